"""
Tests for slot calculator.
"""

import pendulum
import pytest

from slotbooker.config import SchedulingConfig
from slotbooker.domain.models import TimeRange, TimeSlot
from slotbooker.domain.slot_calculator import SlotCalculator
from slotbooker.domain.time_utils import is_business_day, overlaps
from tests.helpers import TZ, at


def slot(day, hour, minute=0):
    return TimeSlot.starting_at(at(day, hour, minute), 30)


class TestGenerateCandidates:
    """Tests for candidate generation."""

    def test_first_candidate_respects_lead_time(self, scheduling_config, now):
        """Monday 08:00 + 120 min lead -> first slot Monday 10:00-10:30."""
        candidates = SlotCalculator(scheduling_config).generate_candidates(now)

        assert candidates[0] == slot(10, 10)
        assert candidates[0].end == at(10, 10, 30)

    def test_candidate_count_over_horizon(self, scheduling_config, now):
        """14 days from Monday hold 10 business days; 16 slots a day, Monday loses two."""
        candidates = SlotCalculator(scheduling_config).generate_candidates(now)

        assert len(candidates) == 14 + 9 * 16
        assert candidates[-1] == slot(21, 16, 30)

    def test_candidates_are_chronological(self, scheduling_config, now):
        candidates = SlotCalculator(scheduling_config).generate_candidates(now)
        starts = [c.start for c in candidates]
        assert starts == sorted(starts)

    def test_unaligned_earliest_rounds_forward(self, scheduling_config):
        """08:10 + 120 min = 10:10, so the first start is 10:30, not 10:00."""
        candidates = SlotCalculator(scheduling_config).generate_candidates(at(10, 8, 10))
        assert candidates[0] == slot(10, 10, 30)

    def test_earliest_start_on_step_grid(self, scheduling_config):
        """A few seconds past the grid pushes the first start to the next step."""
        candidates = SlotCalculator(scheduling_config).generate_candidates(at(10, 8).add(seconds=30))
        assert candidates[0] == slot(10, 10, 30)

    def test_early_morning_starts_at_opening(self, scheduling_config):
        """05:07 + 120 min is before opening, so the day starts at 09:00."""
        candidates = SlotCalculator(scheduling_config).generate_candidates(at(10, 5, 7))
        assert candidates[0] == slot(10, 9)

    def test_finer_step_grid(self, now):
        config = SchedulingConfig(min_lead_minutes=121, step_minutes=15, timezone=TZ)
        candidates = SlotCalculator(config).generate_candidates(now)

        assert [c.start for c in candidates[:2]] == [at(10, 10, 15), at(10, 10, 30)]

    def test_late_friday_skips_weekend(self, scheduling_config):
        candidates = SlotCalculator(scheduling_config).generate_candidates(at(14, 15, 30))
        assert candidates[0] == slot(17, 9)

    def test_now_in_other_timezone_is_converted(self, scheduling_config):
        """13:00 UTC is 08:00 in New York."""
        now_utc = pendulum.datetime(2025, 2, 10, 13, 0, tz="UTC")
        candidates = SlotCalculator(scheduling_config).generate_candidates(now_utc)
        assert candidates[0] == slot(10, 10)
        assert candidates[0].start.timezone_name == TZ

    def test_last_slot_ends_at_close(self, scheduling_config, now):
        candidates = SlotCalculator(scheduling_config).generate_candidates(now)
        monday = [c for c in candidates if c.start.day == 10]
        assert monday[-1] == slot(10, 16, 30)
        assert monday[-1].end == at(10, 17)

    def test_short_horizon_over_weekend_is_empty(self):
        config = SchedulingConfig(search_days=2, timezone=TZ)
        candidates = SlotCalculator(config).generate_candidates(at(15, 9))  # Saturday
        assert candidates == []

    @pytest.mark.parametrize(
        "overrides",
        [
            {},
            {"duration_minutes": 45, "step_minutes": 15},
            {"duration_minutes": 60, "step_minutes": 60, "min_lead_minutes": 0},
            {"duration_minutes": 20, "step_minutes": 10, "work_start_hour": 8, "work_end_hour": 12},
            {"min_lead_minutes": 2000, "search_days": 5},
        ],
    )
    def test_every_candidate_is_valid(self, overrides):
        config = SchedulingConfig(timezone=TZ, **overrides)
        now = at(12, 11, 7)  # Wednesday, unaligned
        earliest = now.add(minutes=config.min_lead_minutes)

        candidates = SlotCalculator(config).generate_candidates(now)

        for candidate in candidates:
            assert candidate.duration_minutes() == config.duration_minutes
            assert candidate.start >= earliest
            assert is_business_day(candidate.start, TZ)
            assert candidate.start >= candidate.start.set(hour=config.work_start_hour, minute=0)
            assert candidate.end <= candidate.start.set(hour=config.work_end_hour, minute=0)
            assert candidate.start.minute % config.step_minutes == 0


class TestFilterFree:

    def test_removes_overlapping_slots(self):
        slots = [slot(10, 10), slot(10, 10, 30), slot(10, 11), slot(10, 11, 30)]
        busy = [TimeRange(start=at(10, 10, 15), end=at(10, 11))]

        free = SlotCalculator.filter_free(slots, busy)

        assert free == [slot(10, 11), slot(10, 11, 30)]

    def test_touching_busy_interval_keeps_slot(self):
        slots = [slot(10, 10), slot(10, 10, 30)]
        busy = [TimeRange(start=at(10, 10, 30), end=at(10, 11))]

        assert SlotCalculator.filter_free(slots, busy) == [slot(10, 10)]

    def test_output_is_ordered_subsequence(self, scheduling_config, now):
        candidates = SlotCalculator(scheduling_config).generate_candidates(now)
        busy = [
            TimeRange(start=at(10, 12), end=at(10, 13)),
            TimeRange(start=at(11, 9, 10), end=at(11, 9, 20)),
            TimeRange(start=at(13, 0), end=at(14, 0)),  # all of Thursday
        ]

        free = SlotCalculator.filter_free(candidates, busy)

        positions = [candidates.index(s) for s in free]
        assert positions == sorted(positions)
        for s in free:
            assert not any(overlaps(s, b) for b in busy)
        assert not [s for s in free if s.start.day == 13]

    def test_no_busy_keeps_everything(self):
        slots = [slot(10, 10), slot(10, 11)]
        assert SlotCalculator.filter_free(slots, []) == slots

    def test_empty_input(self):
        assert SlotCalculator.filter_free([], [TimeRange(start=at(10, 9), end=at(10, 10))]) == []


class TestSelection:

    def test_first_n(self):
        free = [slot(10, 10), slot(10, 11), slot(10, 12)]
        assert SlotCalculator.first_n(free, 2) == [slot(10, 10), slot(10, 11)]
        assert SlotCalculator.first_n(free, 5) == free
        assert SlotCalculator.first_n([], 2) == []
        assert SlotCalculator.first_n(free, 0) == []

    def test_nearest_n_returns_chronological_order(self):
        free = [slot(10, 9), slot(10, 13), slot(10, 14, 30), slot(11, 9)]

        chosen = SlotCalculator.nearest_n(free, at(10, 14), 2)

        # 14:30 is closest (30 min), 13:00 next (60 min)
        assert chosen == [slot(10, 13), slot(10, 14, 30)]

    def test_nearest_n_tie_prefers_earlier(self):
        free = [slot(10, 10), slot(10, 10, 30)]
        preferred = at(10, 10, 15)

        assert SlotCalculator.nearest_n(free, preferred, 1) == [slot(10, 10)]
        assert SlotCalculator.nearest_n(free, preferred, 2) == [slot(10, 10), slot(10, 10, 30)]

    def test_nearest_n_is_deterministic(self):
        free = [slot(10, h) for h in range(9, 17)]
        preferred = at(10, 12, 30)

        first = SlotCalculator.nearest_n(free, preferred, 3)
        second = SlotCalculator.nearest_n(list(reversed(free)), preferred, 3)

        assert first == second == [slot(10, 11), slot(10, 12), slot(10, 13)]

    def test_nearest_n_deduplicates_starts(self):
        free = [slot(10, 10), slot(10, 10), slot(10, 11)]
        assert SlotCalculator.nearest_n(free, at(10, 10), 2) == [slot(10, 10), slot(10, 11)]

    def test_nearest_n_spans_horizon(self):
        """Nearest is measured across days, not only within the preferred day."""
        free = [slot(10, 16, 30), slot(17, 9)]
        assert SlotCalculator.nearest_n(free, at(15, 10), 1) == [slot(17, 9)]

    def test_nearest_n_empty(self):
        assert SlotCalculator.nearest_n([], at(10, 10), 2) == []


class TestIsExactlyFree:

    def test_free_when_no_overlap(self, scheduling_config):
        calculator = SlotCalculator(scheduling_config)
        busy = [TimeRange(start=at(11, 13), end=at(11, 14))]
        assert calculator.is_exactly_free(at(11, 14), busy)

    def test_busy_when_overlapping(self, scheduling_config):
        calculator = SlotCalculator(scheduling_config)
        busy = [TimeRange(start=at(11, 14, 15), end=at(11, 14, 20))]
        assert not calculator.is_exactly_free(at(11, 14), busy)

    def test_slot_at_uses_configured_duration(self):
        calculator = SlotCalculator(SchedulingConfig(duration_minutes=45, step_minutes=15, timezone=TZ))
        built = calculator.slot_at(at(11, 14))
        assert built.end == at(11, 14, 45)
