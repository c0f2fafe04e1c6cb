"""
Tests for the time arithmetic helpers.
"""

import pendulum

from slotbooker.domain.models import TimeRange, TimeSlot
from slotbooker.domain.time_utils import align_to_granularity, is_aligned, is_business_day, overlaps
from tests.helpers import TZ, at


class TestIsBusinessDay:

    def test_weekdays_are_business_days(self):
        for day in range(10, 15):  # Monday..Friday
            assert is_business_day(at(day, 12), TZ)

    def test_weekend_is_not(self):
        assert not is_business_day(at(15, 12), TZ)  # Saturday
        assert not is_business_day(at(16, 12), TZ)  # Sunday

    def test_weekday_is_taken_in_configured_timezone(self):
        """Saturday 02:00 UTC is still Friday evening in New York."""
        instant = pendulum.datetime(2025, 2, 15, 2, 0, tz="UTC")
        assert is_business_day(instant, TZ)
        assert not is_business_day(instant, "UTC")


class TestOverlaps:

    def test_partial_overlap_is_symmetric(self):
        a = TimeRange(start=at(10, 9), end=at(10, 10))
        b = TimeRange(start=at(10, 9, 30), end=at(10, 11))
        assert overlaps(a, b)
        assert overlaps(b, a)

    def test_touching_endpoints_do_not_overlap(self):
        a = TimeSlot(start=at(10, 10), end=at(10, 10, 30))
        b = TimeRange(start=at(10, 10, 30), end=at(10, 11))
        assert not overlaps(a, b)
        assert not overlaps(b, a)

    def test_containment_overlaps(self):
        outer = TimeRange(start=at(10, 9), end=at(10, 17))
        inner = TimeSlot(start=at(10, 12), end=at(10, 12, 30))
        assert overlaps(outer, inner)
        assert overlaps(inner, outer)

    def test_same_instant_across_timezones(self):
        local = TimeSlot(start=at(10, 10), end=at(10, 10, 30))
        utc = TimeRange(
            start=pendulum.datetime(2025, 2, 10, 15, 15, tz="UTC"),
            end=pendulum.datetime(2025, 2, 10, 15, 45, tz="UTC"),
        )
        assert overlaps(local, utc)


class TestGranularity:

    def test_aligned_instant_is_unchanged(self):
        assert align_to_granularity(at(10, 10, 30), 30) == at(10, 10, 30)

    def test_rounds_up_to_next_step(self):
        assert align_to_granularity(at(10, 10, 10), 30) == at(10, 10, 30)
        assert align_to_granularity(at(10, 10, 31), 30) == at(10, 11)
        assert align_to_granularity(at(10, 10, 1), 15) == at(10, 10, 15)

    def test_seconds_push_to_next_step(self):
        instant = at(10, 10).add(seconds=1)
        assert align_to_granularity(instant, 30) == at(10, 10, 30)

    def test_rounds_across_hour(self):
        assert align_to_granularity(at(10, 16, 45), 30) == at(10, 17)

    def test_is_aligned(self):
        assert is_aligned(at(10, 9), 30)
        assert is_aligned(at(10, 9, 45), 15)
        assert not is_aligned(at(10, 9, 45), 30)
        assert not is_aligned(at(10, 9).add(seconds=5), 30)
