"""
Core business logic for calculating bookable time slots.

Pure domain logic without any external dependencies (no API calls, no I/O):
candidate generation, busy-interval filtering and slot selection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Sequence

from pendulum import DateTime

from .models import TimeRange, TimeSlot
from .time_utils import align_to_granularity, is_business_day, overlaps

if TYPE_CHECKING:
    from ..config import SchedulingConfig


class SlotCalculator:
    """
    Generates and selects fixed-duration slots for a scheduling configuration.

    Algorithm:
    1. Walk ``search_days`` calendar days starting at the earliest bookable day
    2. On business days, step through business hours by ``step_minutes``
    3. Start at ``now + min_lead_minutes`` rounded up to the step grid
    4. Remove slots overlapping a busy interval
    5. Select first-N or nearest-N of what remains
    """

    def __init__(self, config: SchedulingConfig):
        self.config = config

    def earliest_start(self, now: DateTime) -> DateTime:
        """Return the earliest bookable instant for ``now``."""
        return now.in_timezone(self.config.timezone).add(minutes=self.config.min_lead_minutes)

    def generate_candidates(self, now: DateTime) -> List[TimeSlot]:
        """
        Produce every candidate slot in the search horizon, in ascending order.

        Args:
            now: Current instant (any zone; converted to the configured one)

        Returns:
            List of TimeSlot objects. No slot starts before ``now + lead``,
            ends after business hours or falls on a weekend.
        """
        cfg = self.config
        earliest = self.earliest_start(now)
        first_day = earliest.start_of("day")
        first_start = align_to_granularity(earliest, cfg.step_minutes)
        candidates: List[TimeSlot] = []

        for offset in range(cfg.search_days):
            day = first_day.add(days=offset)
            if not is_business_day(day, cfg.timezone):
                continue

            day_start = day.set(hour=cfg.work_start_hour, minute=0, second=0, microsecond=0)
            day_end = day.set(hour=cfg.work_end_hour, minute=0, second=0, microsecond=0)
            cursor = max(day_start, first_start)

            while cursor.add(minutes=cfg.duration_minutes) <= day_end:
                candidates.append(TimeSlot.starting_at(cursor, cfg.duration_minutes))
                cursor = cursor.add(minutes=cfg.step_minutes)

        return candidates

    @staticmethod
    def filter_free(slots: Iterable[TimeSlot], busy: Sequence[TimeRange]) -> List[TimeSlot]:
        """
        Keep the slots that overlap none of the busy intervals.

        Order is preserved; touching endpoints do not count as overlap.
        """
        return [
            slot for slot in slots
            if not any(overlaps(slot, interval) for interval in busy)
        ]

    @staticmethod
    def first_n(free: Sequence[TimeSlot], n: int) -> List[TimeSlot]:
        """Take the first ``n`` free slots in chronological order."""
        if n <= 0:
            return []
        return list(free[:n])

    @staticmethod
    def nearest_n(free: Sequence[TimeSlot], preferred: DateTime, n: int) -> List[TimeSlot]:
        """
        Select the ``n`` slots closest to ``preferred``, returned chronologically.

        Distance is the absolute gap between slot start and ``preferred``;
        equal distances keep chronological order.
        """
        if n <= 0:
            return []

        ranked = sorted(
            free,
            key=lambda slot: (abs((slot.start - preferred).total_seconds()), slot.start),
        )

        chosen: List[TimeSlot] = []
        seen_starts = set()
        for slot in ranked:
            if slot.start in seen_starts:
                continue
            seen_starts.add(slot.start)
            chosen.append(slot)
            if len(chosen) == n:
                break

        return sorted(chosen, key=lambda slot: slot.start)

    def slot_at(self, instant: DateTime) -> TimeSlot:
        """Build the configured-duration slot starting at ``instant``."""
        return TimeSlot.starting_at(
            instant.in_timezone(self.config.timezone),
            self.config.duration_minutes,
        )

    def is_exactly_free(self, instant: DateTime, busy: Sequence[TimeRange]) -> bool:
        """Check whether the single slot starting at ``instant`` is free."""
        return bool(self.filter_free([self.slot_at(instant)], busy))
