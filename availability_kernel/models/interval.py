"""Interval — a time range that switches content on or off while it is current."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from availability_kernel.models.errors import InvalidArgument, InvalidArgumentReason


def is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.tzinfo.utcoffset(value) is not None


class Activation(str, Enum):
    ACTIVATES = "activates"
    DEACTIVATES = "deactivates"
    EMPTY = "empty"         # Placeholder for content with no real intervals


class Interval(BaseModel):
    """
    An open time range with an activation tag.

    A missing start means "since forever", a missing end means "until
    forever". Both bounds are exclusive: at the exact start or end instant
    the interval is not in effect.
    """

    model_config = ConfigDict(frozen=True)

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    activation: Activation = Activation.EMPTY

    @model_validator(mode="after")
    def _check_bounds(self) -> "Interval":
        has_bound = self.start is not None or self.end is not None

        if self.activation == Activation.EMPTY and has_bound:
            raise InvalidArgument(
                InvalidArgumentReason.MISSING_ACTIVATION,
                "An interval cannot have a start or end time without also "
                "having an activation flag.",
            )
        if self.activation != Activation.EMPTY and not has_bound:
            raise InvalidArgument(
                InvalidArgumentReason.MISSING_BOUNDS,
                "An interval with an activation flag must have a start "
                "and/or end time.",
            )
        if self.start is None or self.end is None:
            return self
        if is_aware(self.start) != is_aware(self.end):
            raise InvalidArgument(
                InvalidArgumentReason.MIXED_TIMEZONES,
                "The start and end times must both be naive or both be "
                "timezone-aware.",
            )
        if self.start > self.end:
            raise InvalidArgument(
                InvalidArgumentReason.REVERSED_BOUNDS,
                f"The start time {self.start.isoformat()} must precede the "
                f"end time {self.end.isoformat()}.",
            )
        return self

    @classmethod
    def make(
        cls,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        activate: Optional[bool] = None,
    ) -> "Interval":
        """Build an interval from a nullable activation flag."""
        if activate is None:
            activation = Activation.EMPTY
        elif activate:
            activation = Activation.ACTIVATES
        else:
            activation = Activation.DEACTIVATES
        return cls(start=start, end=end, activation=activation)

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def is_current(self, now: datetime) -> bool:
        """Whether this interval is in effect at `now`."""
        if self.activation == Activation.EMPTY:
            return False
        return (
            (self.start is None or self.start < now)
            and (self.end is None or self.end > now)
        )

    def overlaps_with(self, other: "Interval") -> bool:
        """
        Whether the two intervals share any instant.

        Intervals overlap unless one provably ends at or before the other
        begins. A side missing the bound needed for that proof overlaps.
        """
        # self =>        | ....?
        # other => ?.... |
        if (
            self.start is not None
            and other.end is not None
            and self.start >= other.end
        ):
            return False
        # self =>  ?.... |
        # other =>         | ....?
        if (
            self.end is not None
            and other.start is not None
            and other.start >= self.end
        ):
            return False
        return True
