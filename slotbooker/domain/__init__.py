"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import BookingRequest, BusyInterval, Reservation, TimeRange, TimeSlot, format_slot_label
from .slot_calculator import SlotCalculator
from .validation import RequestValidator, parse_instant

__all__ = [
    "BookingRequest",
    "BusyInterval",
    "Reservation",
    "TimeRange",
    "TimeSlot",
    "format_slot_label",
    "SlotCalculator",
    "RequestValidator",
    "parse_instant",
]
