"""
Mock calendar and booking log for running without Google credentials.
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

from ..domain.models import BookingRequest, Reservation, TimeRange, TimeSlot
from ..domain.results import Ok, ProviderResult

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Mock client that simulates the Google Calendar API.

    Busy events are loaded from ``mock_calendar_data.json``. Event times
    without an offset are read in the configured timezone, and weekday
    names ("monday") are resolved to the next such day so the fixture stays
    useful over time. Reservations are kept in memory and show up as busy in
    later queries.
    """

    def __init__(self, timezone: str = "America/New_York", data_file: Optional[Path] = None):
        self.timezone = timezone
        self.data_file = data_file or DEFAULT_DATA_FILE
        self.events: List[Dict[str, Any]] = []
        self._load_calendar_data()

    def _load_calendar_data(self) -> None:
        """Load mock calendar data from JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                raw_events = json.load(f)
        else:
            # Fallback to empty if file doesn't exist
            raw_events = []

        for event in raw_events:
            try:
                self.events.append({
                    "id": event.get("id") or uuid.uuid4().hex,
                    "summary": event.get("summary", "Busy"),
                    "start": self._resolve(event["start"]),
                    "end": self._resolve(event["end"]),
                })
            except (KeyError, ValueError) as e:
                logger.warning("Skipping invalid mock event %r: %s", event, e)

    def _resolve(self, value: str) -> DateTime:
        """Parse ``2025-02-11T14:00`` or ``monday 14:00`` style values."""
        parts = value.split()
        if len(parts) == 2 and parts[0].lower() in WEEKDAYS:
            hour, minute = (int(p) for p in parts[1].split(":"))
            day = pendulum.now(self.timezone).next(WEEKDAYS[parts[0].lower()])
            return day.set(hour=hour, minute=minute, second=0, microsecond=0)

        parsed = pendulum.parse(value, tz=self.timezone)
        if not isinstance(parsed, DateTime):
            raise ValueError(f"Could not parse datetime: {value}")
        return parsed.in_timezone(self.timezone)

    def query_busy(self, time_min: DateTime, time_max: DateTime) -> ProviderResult[List[TimeRange]]:
        """Return events overlapping the requested window."""
        return Ok([
            TimeRange(start=event["start"], end=event["end"])
            for event in self.events
            if event["start"] < time_max and event["end"] > time_min
        ])

    def reserve(self, slot: TimeSlot, request: BookingRequest) -> ProviderResult[Reservation]:
        event_id = uuid.uuid4().hex
        self.events.append({
            "id": event_id,
            "summary": f"Demo – {request.full_name}",
            "start": slot.start,
            "end": slot.end,
        })
        return Ok(Reservation(event_id=event_id, link=f"https://calendar.example.com/event/{event_id}"))


class MockRecordSink:
    """Keeps appended booking rows in memory."""

    def __init__(self):
        self.rows: List[Dict[str, str]] = []

    def append(self, row: Dict[str, str]) -> ProviderResult[None]:
        self.rows.append(dict(row))
        return Ok(None)


WEEKDAYS = {
    "monday": pendulum.MONDAY,
    "tuesday": pendulum.TUESDAY,
    "wednesday": pendulum.WEDNESDAY,
    "thursday": pendulum.THURSDAY,
    "friday": pendulum.FRIDAY,
    "saturday": pendulum.SATURDAY,
    "sunday": pendulum.SUNDAY,
}
