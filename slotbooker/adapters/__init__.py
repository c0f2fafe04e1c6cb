"""
Adapters layer - External integrations (Google Calendar, Google Sheets).
"""

from .google_calendar import GoogleCalendarClient
from .sheets_sink import SheetsRecordSink
from .mock_calendar import MockCalendarClient, MockRecordSink

__all__ = ["GoogleCalendarClient", "SheetsRecordSink", "MockCalendarClient", "MockRecordSink"]
