"""Availability policy — fallback answers when no interval decides."""

from pydantic import BaseModel, ConfigDict


class AvailabilityPolicy(BaseModel):
    """
    Per-kind configuration for an entity's fallback availability.

    Different content kinds disagree on what "no interval applies" means:
    announcements stay up until switched off, promotions stay down until
    switched on.
    """

    model_config = ConfigDict(frozen=True)

    available_without_intervals: bool = True    # No intervals at all
    available_outside_intervals: bool = False   # Intervals exist, none current

    @classmethod
    def default(cls) -> "AvailabilityPolicy":
        return cls()

    @classmethod
    def opt_in(cls) -> "AvailabilityPolicy":
        """Unavailable unless an interval activates the content."""
        return cls(
            available_without_intervals=False,
            available_outside_intervals=False,
        )

    @classmethod
    def opt_out(cls) -> "AvailabilityPolicy":
        """Available unless an interval deactivates the content."""
        return cls(
            available_without_intervals=True,
            available_outside_intervals=True,
        )
