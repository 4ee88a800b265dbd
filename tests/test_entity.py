"""Tests for TimeLimitedEntity validation and availability."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from availability_kernel.models import (
    AvailabilityBasis,
    AvailabilityPolicy,
    Interval,
    InvalidArgument,
    InvalidArgumentReason,
    TimeLimitedEntity,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _s(seconds: int) -> datetime:
    return NOW + timedelta(seconds=seconds)


def _entity(*ranges, policy=None) -> TimeLimitedEntity:
    intervals = [Interval.make(*r) for r in ranges]
    return TimeLimitedEntity.make(intervals, 0, policy)


class TestConstruction:
    def test_stores_intervals_in_insertion_order(self):
        later = Interval.make(_s(100), _s(200), True)
        earlier = Interval.make(None, _s(-100), False)
        entity = TimeLimitedEntity.make([later, earlier], "promo")
        assert entity.intervals == (later, earlier)
        assert entity.identifier == "promo"

    def test_rejects_overlapping_intervals(self):
        with pytest.raises(InvalidArgument) as exc:
            _entity((_s(-1), _s(1), True), (NOW, _s(2), True))
        assert exc.value.reason == InvalidArgumentReason.OVERLAPPING_INTERVALS

    def test_rejects_overlap_regardless_of_activation(self):
        with pytest.raises(InvalidArgument) as exc:
            _entity((_s(-1), _s(1), True), (NOW, _s(2), False))
        assert exc.value.reason == InvalidArgumentReason.OVERLAPPING_INTERVALS

    def test_rejects_two_unbounded_intervals(self):
        with pytest.raises(InvalidArgument) as exc:
            _entity((None, None, None), (None, None, None))
        assert exc.value.reason == InvalidArgumentReason.MULTIPLE_UNBOUNDED

    def test_rejects_unbounded_next_to_bounded(self):
        with pytest.raises(InvalidArgument) as exc:
            _entity((None, None, None), (_s(10), None, True))
        assert exc.value.reason == InvalidArgumentReason.MULTIPLE_UNBOUNDED

    def test_accepts_single_unbounded_interval(self):
        entity = _entity((None, None, None))
        assert len(entity.intervals) == 1
        assert entity.valid_intervals == ()

    def test_rejects_mixed_timezone_awareness(self):
        with pytest.raises(InvalidArgument) as exc:
            _entity((None, datetime(2024, 1, 1), True), (_s(10), None, True))
        assert exc.value.reason == InvalidArgumentReason.MIXED_TIMEZONES

    def test_accepts_adjacent_intervals(self):
        entity = _entity((None, NOW, False), (NOW, _s(60), True), (_s(60), None, False))
        assert len(entity.valid_intervals) == 3

    def test_default_policy(self):
        entity = _entity()
        assert entity.available_without_intervals is True
        assert entity.available_outside_intervals is False

    def test_immutable(self):
        entity = _entity((NOW, None, True))
        with pytest.raises(ValidationError):
            entity.identifier = 1


class TestIsAvailable:
    @pytest.mark.parametrize("ranges", [
        [(_s(-1), None, True)],
        [(None, _s(1), True)],
        [(_s(-1), _s(1), True)],
        [(None, None, None)],
        [],
    ])
    def test_available(self, ranges):
        assert _entity(*ranges).is_available(NOW)

    @pytest.mark.parametrize("ranges", [
        [(_s(1), None, True)],
        [(None, _s(-1), True)],
        [(_s(1), _s(2), True)],
        [(_s(-1), None, False)],
        [(None, _s(1), False)],
        [(_s(-1), _s(1), False)],
        [(_s(-2), _s(-1), True)],
        # Boundary instants are not inside the interval.
        [(NOW, None, True)],
        [(None, NOW, True)],
        [(NOW, NOW, True)],
    ])
    def test_unavailable(self, ranges):
        assert not _entity(*ranges).is_available(NOW)

    def test_started_one_second_ago(self):
        assert _entity((_s(-1), None, True)).is_available(NOW)

    def test_expired_one_second_ago(self):
        assert not _entity((None, _s(-1), True)).is_available(NOW)

    def test_outside_intervals_uses_policy(self):
        entity = _entity((_s(-2), _s(-1), True))
        assert entity.is_available(NOW) is entity.available_outside_intervals

    def test_without_intervals_policy(self):
        off = AvailabilityPolicy(available_without_intervals=False)
        assert not _entity(policy=off).is_available(NOW)
        assert not _entity(policy=off).is_available(_s(-10_000))
        assert not _entity((None, None, None), policy=off).is_available(NOW)
        assert _entity(policy=AvailabilityPolicy()).is_available(NOW)

    def test_outside_intervals_policy(self):
        on = AvailabilityPolicy(available_outside_intervals=True)
        off = AvailabilityPolicy(available_outside_intervals=False)
        assert _entity((_s(1), None, True), policy=on).is_available(NOW)
        assert not _entity((_s(1), None, True), policy=off).is_available(NOW)

    def test_current_deactivation_beats_outside_policy(self):
        entity = _entity((_s(-1), _s(1), False), policy=AvailabilityPolicy.opt_out())
        assert not entity.is_available(NOW)
        assert entity.is_available(_s(5))

    def test_switches_across_adjacent_intervals(self):
        entity = _entity(
            (None, _s(-60), False),
            (_s(-60), _s(60), True),
            (_s(60), None, False),
        )
        assert not entity.is_available(_s(-120))
        assert entity.is_available(NOW)
        assert not entity.is_available(_s(120))
        # Exactly on the seam neither neighbour is current.
        assert entity.is_available(_s(60)) is entity.available_outside_intervals


class TestExplain:
    def test_no_intervals(self):
        decision = _entity().explain(NOW)
        assert decision.basis == AvailabilityBasis.NO_INTERVALS
        assert decision.available is True
        assert decision.current_intervals == ()

    def test_outside_intervals(self):
        decision = _entity((_s(1), None, True)).explain(NOW)
        assert decision.basis == AvailabilityBasis.OUTSIDE_INTERVALS
        assert decision.available is False

    def test_activated(self):
        interval = Interval.make(_s(-1), None, True)
        entity = TimeLimitedEntity.make([interval], "a")
        decision = entity.explain(NOW)
        assert decision.basis == AvailabilityBasis.ACTIVATED
        assert decision.current_intervals == (interval,)
        assert decision.identifier == "a"
        assert decision.evaluated_at == NOW

    def test_deactivated(self):
        decision = _entity((_s(-1), None, False)).explain(NOW)
        assert decision.basis == AvailabilityBasis.DEACTIVATED
        assert decision.available is False

    def test_current_intervals_skip_inactive(self):
        entity = _entity((None, _s(-10), True), (_s(-5), _s(5), False))
        current = entity.current_intervals(NOW)
        assert len(current) == 1
        assert current[0].end == _s(5)


class TestAvailabilityPolicy:
    def test_presets(self):
        assert AvailabilityPolicy.default() == AvailabilityPolicy()
        opt_in = AvailabilityPolicy.opt_in()
        assert not opt_in.available_without_intervals
        assert not opt_in.available_outside_intervals
        opt_out = AvailabilityPolicy.opt_out()
        assert opt_out.available_without_intervals
        assert opt_out.available_outside_intervals

    def test_opt_in_content_hidden_until_activated(self):
        entity = _entity((_s(10), _s(20), True), policy=AvailabilityPolicy.opt_in())
        assert not entity.is_available(NOW)
        assert entity.is_available(_s(15))
        assert not entity.is_available(_s(25))


class TestTimezoneKind:
    def test_kind_follows_bounds(self):
        assert _entity((_s(-1), None, True)).timezone_aware is True
        naive = TimeLimitedEntity.make(
            [Interval.make(datetime(2024, 6, 1, 11), None, True)], "naive"
        )
        assert naive.timezone_aware is False
        assert _entity().timezone_aware is None
        assert _entity((None, None, None)).timezone_aware is None

    def test_naive_now_against_aware_bounds_rejected(self):
        entity = _entity((_s(-1), None, True))
        with pytest.raises(InvalidArgument) as exc:
            entity.is_available(datetime(2024, 6, 1, 12))
        assert exc.value.reason == InvalidArgumentReason.MIXED_TIMEZONES

    def test_aware_now_against_naive_bounds_rejected(self):
        entity = TimeLimitedEntity.make(
            [Interval.make(datetime(2024, 6, 1, 11), None, True)], "naive"
        )
        with pytest.raises(InvalidArgument) as exc:
            entity.explain(NOW)
        assert exc.value.reason == InvalidArgumentReason.MIXED_TIMEZONES
        assert entity.is_available(datetime(2024, 6, 1, 12))

    def test_unbounded_entity_accepts_either_kind(self):
        entity = _entity((None, None, None))
        assert entity.is_available(NOW)
        assert entity.is_available(datetime(2024, 6, 1, 12))
