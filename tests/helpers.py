"""
Clock helpers and stub collaborators shared by the test suite.
"""

from typing import Dict, List

import pendulum

from slotbooker.domain.exceptions import ProviderError
from slotbooker.domain.models import Reservation, TimeRange
from slotbooker.domain.results import Err, Ok

TZ = "America/New_York"


def at(day: int, hour: int, minute: int = 0) -> pendulum.DateTime:
    """February 2025 in New York; the 10th is a Monday."""
    return pendulum.datetime(2025, 2, day, hour, minute, tz=TZ)


class StubCalendar:
    """Minimal stub matching the CalendarProvider protocol."""

    def __init__(self):
        self.busy: List[TimeRange] = []
        self.fail_query = False
        self.fail_reserve = False
        self.queries: List[tuple] = []
        self.reserved: List[tuple] = []

    def query_busy(self, time_min, time_max):
        self.queries.append((time_min, time_max))
        if self.fail_query:
            return Err(ProviderError("query_busy", "timed out", timed_out=True))
        return Ok([b for b in self.busy if b.start < time_max and b.end > time_min])

    def reserve(self, slot, request):
        if self.fail_reserve:
            return Err(ProviderError("reserve", "403 Forbidden"))
        self.reserved.append((slot, request))
        return Ok(Reservation(event_id=f"evt-{len(self.reserved)}", link="https://calendar.google.com/event?eid=abc"))


class StubSink:
    def __init__(self):
        self.rows: List[Dict[str, str]] = []
        self.fail = False

    def append(self, row):
        if self.fail:
            return Err(ProviderError("append_record", "500 Server Error"))
        self.rows.append(row)
        return Ok(None)
