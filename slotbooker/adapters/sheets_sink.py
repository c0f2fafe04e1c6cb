"""
Google Sheets booking log.
"""

from __future__ import annotations

import logging
from typing import Dict, List
from urllib.parse import quote

import requests

from ..domain.exceptions import ProviderError
from ..domain.results import Err, Ok, ProviderResult

logger = logging.getLogger(__name__)

# Column order of the booking sheet
BOOKING_COLUMNS: List[str] = [
    "logged_at",
    "full_name",
    "email",
    "phone",
    "business_type",
    "start_time",
    "end_time",
    "calendar_link",
]


class SheetsRecordSink:
    """Appends one row per booking using the ``values:append`` endpoint."""

    SHEETS_API_ENDPOINT = "https://sheets.googleapis.com/v4/spreadsheets"

    def __init__(self, access_token: str, spreadsheet_id: str, tab: str = "Bookings", timeout: float = 10.0):
        self.spreadsheet_id = spreadsheet_id
        self.tab = tab
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    @property
    def append_url(self) -> str:
        cell_range = quote(f"{self.tab}!A:Z", safe="")
        return f"{self.SHEETS_API_ENDPOINT}/{self.spreadsheet_id}/values/{cell_range}:append"

    def append(self, row: Dict[str, str]) -> ProviderResult[None]:
        values = [[row.get(column, "") for column in BOOKING_COLUMNS]]

        try:
            response = requests.post(
                self.append_url,
                headers=self.headers,
                params={"valueInputOption": "USER_ENTERED"},
                json={"values": values},
                timeout=self.timeout,
            )
            response.raise_for_status()

        except requests.exceptions.Timeout as e:
            logger.warning("Sheets append timed out after %ss", self.timeout)
            return Err(ProviderError("append_record", f"timed out: {e}", timed_out=True))

        except requests.exceptions.RequestException as e:
            logger.warning("Sheets append failed: %s", e)
            return Err(ProviderError("append_record", str(e)))

        return Ok(None)
