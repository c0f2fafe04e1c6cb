"""
Google Calendar REST client for busy lookups and event creation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List
from urllib.parse import quote

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import ProviderError
from ..domain.models import BookingRequest, Reservation, TimeRange, TimeSlot
from ..domain.results import Err, Ok, ProviderResult

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """
    Client for Google Calendar API v3 operations.

    Uses ``freeBusy`` for availability and ``events.insert`` for bookings.
    Transport failures are returned as ``Err`` values, never raised.
    """

    CALENDAR_API_ENDPOINT = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        access_token: str,
        calendar_id: str = "primary",
        timezone: str = "America/New_York",
        event_title: str = "MK Receptions Demo",
        timeout: float = 10.0,
    ):
        """
        Initialize the Calendar API client.

        Args:
            access_token: Valid OAuth bearer token with calendar scope
            calendar_id: Calendar to query and book into
            timezone: IANA timezone identifier for returned intervals and events
            event_title: Prefix of the created event summary
            timeout: Per-request timeout in seconds
        """
        self.calendar_id = calendar_id
        self.timezone = timezone
        self.event_title = event_title
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    def query_busy(self, time_min: DateTime, time_max: DateTime) -> ProviderResult[List[TimeRange]]:
        """
        Get busy intervals for the configured calendar.

        Args:
            time_min: Start of the time window
            time_max: End of the time window

        Returns:
            ``Ok`` with busy TimeRange objects, or ``Err`` on failure
        """
        payload = {
            "timeMin": time_min.in_timezone("UTC").to_iso8601_string(),
            "timeMax": time_max.in_timezone("UTC").to_iso8601_string(),
            "timeZone": self.timezone,
            "items": [{"id": self.calendar_id}],
        }

        response = self._post("query_busy", f"{self.CALENDAR_API_ENDPOINT}/freeBusy", payload)
        if isinstance(response, Err):
            return response

        calendar = response.value.get("calendars", {}).get(self.calendar_id)
        if calendar is None:
            return Err(ProviderError("query_busy", f"calendar {self.calendar_id!r} missing from response"))

        errors = calendar.get("errors") or []
        if errors:
            reasons = ", ".join(str(error.get("reason", "unknown")) for error in errors)
            return Err(ProviderError("query_busy", f"calendar reported errors: {reasons}"))

        return Ok(self._parse_busy(calendar.get("busy", [])))

    def reserve(self, slot: TimeSlot, request: BookingRequest) -> ProviderResult[Reservation]:
        """
        Create the demo event on the calendar.

        Attendees and conference data are not added so the call also works
        for service accounts without domain-wide delegation.
        """
        url = f"{self.CALENDAR_API_ENDPOINT}/calendars/{quote(self.calendar_id, safe='')}/events"
        payload = {
            "summary": f"{self.event_title} – {request.full_name}",
            "description": self._describe(request),
            "start": {"dateTime": slot.start.to_iso8601_string(), "timeZone": self.timezone},
            "end": {"dateTime": slot.end.to_iso8601_string(), "timeZone": self.timezone},
        }

        response = self._post("reserve", url, payload)
        if isinstance(response, Err):
            return response

        event_id = response.value.get("id")
        if not event_id:
            return Err(ProviderError("reserve", "event created without an id"))

        return Ok(Reservation(event_id=str(event_id), link=response.value.get("htmlLink", "")))

    def _post(self, operation: str, url: str, payload: Dict[str, Any]) -> ProviderResult[Dict[str, Any]]:
        try:
            response = requests.post(url, headers=self.headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.Timeout as e:
            logger.warning("Google Calendar %s timed out after %ss", operation, self.timeout)
            return Err(ProviderError(operation, f"timed out: {e}", timed_out=True))

        except requests.exceptions.RequestException as e:
            logger.warning("Google Calendar %s failed: %s", operation, e)
            return Err(ProviderError(operation, str(e)))

        except ValueError as e:
            logger.warning("Google Calendar %s returned invalid JSON: %s", operation, e)
            return Err(ProviderError(operation, f"invalid JSON response: {e}"))

        if not isinstance(data, dict):
            return Err(ProviderError(operation, "unexpected response shape"))

        return Ok(data)

    def _parse_busy(self, items: List[Dict[str, Any]]) -> List[TimeRange]:
        """
        Parse freeBusy busy entries into our domain model.

        Response format:
        {
            "calendars": {
                "primary": {
                    "busy": [
                        {"start": "2025-02-11T19:00:00Z", "end": "2025-02-11T19:30:00Z"}
                    ]
                }
            }
        }
        """
        busy_ranges: List[TimeRange] = []

        for item in items:
            try:
                start = self._parse_datetime(item["start"])
                end = self._parse_datetime(item["end"])
                busy_ranges.append(TimeRange(start=start, end=end))

            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Could not parse busy interval %r: %s", item, e)
                continue

        return busy_ranges

    def _parse_datetime(self, datetime_str: str) -> DateTime:
        """Parse an ISO 8601 string into a DateTime in the configured timezone."""
        dt = pendulum.parse(datetime_str)

        if isinstance(dt, DateTime):
            return dt.in_timezone(self.timezone)

        raise ValueError(f"Could not parse datetime: {datetime_str}")

    @staticmethod
    def _describe(request: BookingRequest) -> str:
        return (
            f"Name: {request.full_name}\n"
            f"Email: {request.email}\n"
            f"Phone: {request.phone}\n"
            f"Business type: {request.business_type}\n\n"
            f"Notes:\n{request.notes}"
        )
