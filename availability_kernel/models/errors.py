"""Construction-time validation errors."""

from enum import Enum


class InvalidArgumentReason(str, Enum):
    MISSING_ACTIVATION = "missing_activation"
    MISSING_BOUNDS = "missing_bounds"
    REVERSED_BOUNDS = "reversed_bounds"
    OVERLAPPING_INTERVALS = "overlapping_intervals"
    MULTIPLE_UNBOUNDED = "multiple_unbounded"
    MIXED_TIMEZONES = "mixed_timezones"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"


class InvalidArgument(Exception):
    """
    Raised when an interval, entity or collection is built from bad input.

    Not a ValueError subclass: pydantic only wraps ValueError/AssertionError
    into a ValidationError, so this propagates from model validators as-is.
    """

    def __init__(self, reason: InvalidArgumentReason, detail: str):
        super().__init__(detail)
        self.reason = reason        # Machine-readable
        self.detail = detail        # Human-readable

    def to_dict(self) -> dict:
        return {"reason": self.reason.value, "detail": self.detail}
