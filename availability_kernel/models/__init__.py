"""Availability Kernel data models."""

from availability_kernel.models.collection import ActiveSetChange
from availability_kernel.models.entity import (
    AvailabilityBasis,
    AvailabilityDecision,
    TimeLimitedEntity,
)
from availability_kernel.models.errors import InvalidArgument, InvalidArgumentReason
from availability_kernel.models.interval import Activation, Interval
from availability_kernel.models.policy import AvailabilityPolicy

__all__ = [
    "Activation",
    "ActiveSetChange",
    "AvailabilityBasis",
    "AvailabilityDecision",
    "AvailabilityPolicy",
    "Interval",
    "InvalidArgument",
    "InvalidArgumentReason",
    "TimeLimitedEntity",
]
