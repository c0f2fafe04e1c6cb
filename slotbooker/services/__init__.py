"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking import BookingService, CalendarProvider, RecordSink

__all__ = ["BookingService", "CalendarProvider", "RecordSink"]
