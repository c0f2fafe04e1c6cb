"""
Outcomes returned by every caller-facing scheduling operation.

Each variant carries a ``status`` tag used when the result is serialised.
Negative outcomes (``Unavailable``, ``NoSlots``) are ordinary results, not
errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List, Union

from .models import TimeSlot

# Validation reasons, in the order the request validator checks them
MALFORMED_TIME = "malformed_time"
TOO_SOON_OR_PAST = "too_soon_or_past"
NON_BUSINESS_DAY = "non_business_day"
OUTSIDE_BUSINESS_HOURS = "outside_business_hours"
BAD_GRANULARITY = "bad_granularity"

REASON_MESSAGES = {
    MALFORMED_TIME: "That time could not be understood.",
    TOO_SOON_OR_PAST: "That time is in the past or too soon to book.",
    NON_BUSINESS_DAY: "We only book demos Monday through Friday.",
    OUTSIDE_BUSINESS_HOURS: "That time is outside business hours.",
    BAD_GRANULARITY: "Demos start on fixed boundaries, such as the hour or half hour.",
}


@dataclass(frozen=True)
class Confirmed:
    slot: TimeSlot
    external_reference: str
    link: str = ""
    record_logged: bool = True

    status: ClassVar[str] = "confirmed"


@dataclass(frozen=True)
class Offered:
    """Free slots offered to the caller, chronologically ordered."""
    slots: List[TimeSlot]

    status: ClassVar[str] = "ok"


@dataclass(frozen=True)
class Available:
    """The exact requested slot is free right now."""
    slot: TimeSlot

    status: ClassVar[str] = "available"


@dataclass(frozen=True)
class Unavailable:
    slot: TimeSlot
    alternatives: List[TimeSlot] = field(default_factory=list)

    status: ClassVar[str] = "unavailable"


@dataclass(frozen=True)
class NoSlots:
    status: ClassVar[str] = "no_slots"

    @property
    def alternatives(self) -> List[TimeSlot]:
        return []


@dataclass(frozen=True)
class InvalidRequest:
    """Caller-correctable time validation failure."""
    reason: str
    alternatives: List[TimeSlot] = field(default_factory=list)

    status: ClassVar[str] = "invalid_time"

    @property
    def message(self) -> str:
        return REASON_MESSAGES.get(self.reason, self.reason)


@dataclass(frozen=True)
class MalformedRequest:
    """The payload could not be decoded into a request."""
    message: str
    missing: List[str] = field(default_factory=list)
    alternatives: List[TimeSlot] = field(default_factory=list)

    status: ClassVar[str] = "error"


@dataclass(frozen=True)
class Failed:
    """An external collaborator failed; the caller gets a generic error."""
    message: str
    alternatives: List[TimeSlot] = field(default_factory=list)

    status: ClassVar[str] = "error"


AvailabilityResult = Union[
    Confirmed,
    Offered,
    Available,
    Unavailable,
    NoSlots,
    InvalidRequest,
    MalformedRequest,
    Failed,
]
