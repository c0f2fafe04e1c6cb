"""
Pure helpers for zoned timestamp arithmetic.
"""

from __future__ import annotations

from typing import Protocol

from pendulum import DateTime

# ISO weekdays, Monday=1 .. Sunday=7
BUSINESS_WEEKDAYS = frozenset({1, 2, 3, 4, 5})


class Interval(Protocol):
    start: DateTime
    end: DateTime


def is_business_day(instant: DateTime, timezone: str) -> bool:
    """Return True if ``instant`` falls on Monday-Friday in ``timezone``."""
    return instant.in_timezone(timezone).isoweekday() in BUSINESS_WEEKDAYS


def overlaps(a: Interval, b: Interval) -> bool:
    """
    Half-open overlap test.

    Ranges that only touch at an endpoint (10:00-10:30 and 10:30-11:00) do
    not overlap.
    """
    return a.start < b.end and b.start < a.end


def is_aligned(instant: DateTime, step_minutes: int) -> bool:
    """Check that ``instant`` sits on a ``step_minutes`` boundary of its hour."""
    return (
        instant.minute % step_minutes == 0
        and instant.second == 0
        and instant.microsecond == 0
    )


def align_to_granularity(instant: DateTime, step_minutes: int) -> DateTime:
    """
    Round ``instant`` up to the next multiple of ``step_minutes`` counted from
    the top of its hour. Aligned instants are returned unchanged.
    """
    if is_aligned(instant, step_minutes):
        return instant

    top_of_hour = instant.set(minute=0, second=0, microsecond=0)
    elapsed = (instant - top_of_hour).total_seconds()
    step_seconds = step_minutes * 60
    steps = int(elapsed // step_seconds) + 1
    return top_of_hour.add(minutes=steps * step_minutes)
