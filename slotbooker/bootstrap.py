"""
Process wiring: logging setup and construction of the booking service.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from pendulum import DateTime
from rich.logging import RichHandler

from .adapters.google_calendar import GoogleCalendarClient
from .adapters.mock_calendar import MockCalendarClient, MockRecordSink
from .adapters.sheets_sink import SheetsRecordSink
from .config import AppConfig
from .services.booking import BookingService

_logging_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install a rich log handler once per process."""
    global _logging_configured

    if _logging_configured:
        logging.getLogger().setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    _logging_configured = True


def build_service(
    config: AppConfig,
    *,
    mock: bool = False,
    clock: Optional[Callable[[], DateTime]] = None,
) -> BookingService:
    """
    Build a BookingService for ``config``.

    Args:
        config: Resolved application configuration
        mock: Use the JSON fixture calendar and an in-memory log
        clock: Optional replacement for ``pendulum.now``

    Raises:
        ConfigurationError: In live mode, if required settings are missing
    """
    scheduling = config.scheduling

    if mock:
        calendar = MockCalendarClient(timezone=scheduling.timezone)
        sink = MockRecordSink()
    else:
        config.require_live_settings()
        calendar = GoogleCalendarClient(
            access_token=config.calendar.access_token,
            calendar_id=config.calendar.calendar_id,
            timezone=scheduling.timezone,
            event_title=config.calendar.event_title,
            timeout=config.provider.timeout_seconds,
        )
        sink = SheetsRecordSink(
            access_token=config.sheets_token(),
            spreadsheet_id=config.sheets.spreadsheet_id,
            tab=config.sheets.tab,
            timeout=config.provider.timeout_seconds,
        )

    return BookingService(scheduling, calendar, sink, clock=clock)
