"""
Time-limited entity — content whose availability is governed by intervals.

Behavioral Contract:
- The interval set is validated once, at construction, and never changes.
- No two intervals overlap; a fully unbounded interval is only allowed alone.
- is_available(now) is a pure function of `now` and the entity's state.
- `now` must match the bounds in timezone awareness, or the query is rejected.
"""

from datetime import datetime
from enum import Enum
from itertools import combinations
from typing import Hashable, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from availability_kernel.models.errors import InvalidArgument, InvalidArgumentReason
from availability_kernel.models.interval import Activation, Interval, is_aware
from availability_kernel.models.policy import AvailabilityPolicy


class AvailabilityBasis(str, Enum):
    NO_INTERVALS = "no_intervals"               # Fell back to available_without_intervals
    OUTSIDE_INTERVALS = "outside_intervals"     # Fell back to available_outside_intervals
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"


class AvailabilityDecision(BaseModel):
    """Why an entity was (or was not) available at a point in time."""

    model_config = ConfigDict(frozen=True)

    identifier: Hashable
    evaluated_at: datetime
    available: bool
    basis: AvailabilityBasis
    current_intervals: Tuple[Interval, ...] = ()


class TimeLimitedEntity(BaseModel):
    """A piece of content that is switched on and off by time intervals."""

    model_config = ConfigDict(frozen=True)

    identifier: Hashable
    intervals: Tuple[Interval, ...] = ()
    policy: AvailabilityPolicy = AvailabilityPolicy()

    @model_validator(mode="after")
    def _check_intervals(self) -> "TimeLimitedEntity":
        # An unbounded interval overlaps everything, so this goes first or
        # its reason would never be reported.
        if len(self.intervals) > 1 and any(i.is_unbounded for i in self.intervals):
            raise InvalidArgument(
                InvalidArgumentReason.MULTIPLE_UNBOUNDED,
                f"Entity {self.identifier!r}: the provided intervals include "
                f"an empty/unbounded range alongside other ranges.",
            )

        bounds = [
            b for i in self.intervals for b in (i.start, i.end) if b is not None
        ]
        if len({is_aware(b) for b in bounds}) > 1:
            raise InvalidArgument(
                InvalidArgumentReason.MIXED_TIMEZONES,
                f"Entity {self.identifier!r}: interval bounds mix naive and "
                f"timezone-aware datetimes.",
            )

        for (i, a), (j, b) in combinations(enumerate(self.intervals), 2):
            if a.overlaps_with(b):
                raise InvalidArgument(
                    InvalidArgumentReason.OVERLAPPING_INTERVALS,
                    f"Entity {self.identifier!r}: the provided intervals "
                    f"include overlapping ranges (#{i} and #{j}).",
                )
        return self

    @classmethod
    def make(
        cls,
        intervals: Sequence[Interval],
        identifier: Hashable,
        policy: Optional[AvailabilityPolicy] = None,
    ) -> "TimeLimitedEntity":
        return cls(
            identifier=identifier,
            intervals=tuple(intervals),
            policy=policy or AvailabilityPolicy(),
        )

    @property
    def available_without_intervals(self) -> bool:
        return self.policy.available_without_intervals

    @property
    def available_outside_intervals(self) -> bool:
        return self.policy.available_outside_intervals

    @property
    def valid_intervals(self) -> Tuple[Interval, ...]:
        """Intervals that carry a start or end time."""
        return tuple(
            i for i in self.intervals if i.activation != Activation.EMPTY
        )

    @property
    def timezone_aware(self) -> Optional[bool]:
        """Whether the bounds are timezone-aware; None when there are none."""
        for interval in self.valid_intervals:
            for bound in (interval.start, interval.end):
                if bound is not None:
                    return is_aware(bound)
        return None

    def check_comparable(self, now: datetime) -> None:
        """Reject a `now` that cannot be compared with this entity's bounds."""
        aware = self.timezone_aware
        if aware is not None and is_aware(now) != aware:
            raise InvalidArgument(
                InvalidArgumentReason.MIXED_TIMEZONES,
                f"Entity {self.identifier!r} has "
                f"{'timezone-aware' if aware else 'naive'} bounds; "
                f"{now.isoformat()} cannot be compared with them.",
            )

    def current_intervals(self, now: datetime) -> Tuple[Interval, ...]:
        self.check_comparable(now)
        return tuple(i for i in self.valid_intervals if i.is_current(now))

    def explain(self, now: datetime) -> AvailabilityDecision:
        """
        Decide availability at `now` and record which rule decided it.

        1. No intervals (or a lone placeholder): available_without_intervals.
        2. None current: available_outside_intervals.
        3. Any current interval activates: available.
        4. Otherwise every current interval deactivates: unavailable.
        """
        if not self.intervals or (
            len(self.intervals) == 1
            and self.intervals[0].activation == Activation.EMPTY
        ):
            return AvailabilityDecision(
                identifier=self.identifier,
                evaluated_at=now,
                available=self.available_without_intervals,
                basis=AvailabilityBasis.NO_INTERVALS,
            )

        current = self.current_intervals(now)
        if not current:
            available = self.available_outside_intervals
            basis = AvailabilityBasis.OUTSIDE_INTERVALS
        elif any(i.activation == Activation.ACTIVATES for i in current):
            available = True
            basis = AvailabilityBasis.ACTIVATED
        else:
            available = False
            basis = AvailabilityBasis.DEACTIVATED

        return AvailabilityDecision(
            identifier=self.identifier,
            evaluated_at=now,
            available=available,
            basis=basis,
            current_intervals=current,
        )

    def is_available(self, now: datetime) -> bool:
        """Whether the content is available at `now`."""
        return self.explain(now).available
