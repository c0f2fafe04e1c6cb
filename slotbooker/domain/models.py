"""
Domain models for time ranges, bookable slots and booking requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from pendulum import DateTime

LABEL_DAY_FORMAT = "ddd, MMM D [at] h:mm A"
LABEL_TIME_FORMAT = "h:mm A"


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Busy intervals reported by the calendar provider are plain time ranges.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


BusyInterval = TimeRange


@dataclass(frozen=True)
class TimeSlot:
    """
    A fixed-duration appointment window.

    Slots are produced by the candidate generator or built from a validated
    caller instant; ``end`` is always ``start + duration``.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Slot start {self.start} must be before slot end {self.end}")

    @classmethod
    def starting_at(cls, start: DateTime, duration_minutes: int) -> "TimeSlot":
        """Build the slot of ``duration_minutes`` beginning at ``start``."""
        return cls(start=start, end=start.add(minutes=duration_minutes))

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def label(self) -> str:
        return format_slot_label(self)

    def to_dict(self) -> Dict[str, str]:
        """Serialise the slot the way callers read it back."""
        return {
            "start_time": self.start.to_iso8601_string(),
            "end_time": self.end.to_iso8601_string(),
            "label": self.label(),
        }


def format_slot_label(slot: TimeSlot) -> str:
    """
    Format a slot as a short spoken label.

    Example: ``Tue, Feb 11 at 2:00 PM–2:30 PM``
    """
    day_part = slot.start.format(LABEL_DAY_FORMAT, locale="en")
    end_part = slot.end.format(LABEL_TIME_FORMAT, locale="en")
    return f"{day_part}–{end_part}"


@dataclass(frozen=True)
class BookingRequest:
    """
    A decoded booking request.

    ``requested_instant`` is kept raw; the request validator is the only place
    that turns it into a slot.
    """
    full_name: str
    email: str
    phone: str
    requested_instant: object
    business_type: str = ""
    notes: str = ""


@dataclass(frozen=True)
class Reservation:
    """Reference returned by the calendar provider for a created event."""
    event_id: str
    link: str = ""
