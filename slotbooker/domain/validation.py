"""
Validation of caller-supplied appointment instants.

All checks run before any network call so nonsensical input (wrong year,
weekend, 3 AM) is rejected cheaply.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Union

import pendulum
from pendulum import DateTime

from .models import TimeSlot
from .outcomes import (
    BAD_GRANULARITY,
    MALFORMED_TIME,
    NON_BUSINESS_DAY,
    OUTSIDE_BUSINESS_HOURS,
    TOO_SOON_OR_PAST,
    InvalidRequest,
)
from .time_utils import is_aligned, is_business_day

if TYPE_CHECKING:
    from ..config import SchedulingConfig


def parse_instant(raw: object, timezone: str) -> DateTime | None:
    """
    Parse an ISO-8601 string or datetime into a DateTime in ``timezone``.

    Values without an offset are read as local time in ``timezone``; values
    with an offset are converted. Returns None for anything unparsable.
    """
    if isinstance(raw, datetime):
        if raw.tzinfo is None:
            return pendulum.instance(raw, tz=timezone)
        return pendulum.instance(raw).in_timezone(timezone)

    if not isinstance(raw, str) or not raw.strip():
        return None

    try:
        parsed = pendulum.parse(raw.strip(), tz=timezone)
    except (ValueError, TypeError, OverflowError):
        return None

    # Durations and bare times are not instants
    if not isinstance(parsed, DateTime):
        return None

    return parsed.in_timezone(timezone)


class RequestValidator:
    """
    Turns a raw requested instant into a bookable ``TimeSlot``.

    Checks run in a fixed order and stop at the first failure:
    parse, lead time, business day, business hours, granularity.
    """

    def __init__(self, config: "SchedulingConfig"):
        self.config = config

    def validate(self, raw: object, now: DateTime) -> Union[TimeSlot, InvalidRequest]:
        cfg = self.config

        instant = parse_instant(raw, cfg.timezone)
        if instant is None:
            return InvalidRequest(MALFORMED_TIME)

        earliest = now.in_timezone(cfg.timezone).add(minutes=cfg.min_lead_minutes)
        if instant < earliest:
            return InvalidRequest(TOO_SOON_OR_PAST)

        if not is_business_day(instant, cfg.timezone):
            return InvalidRequest(NON_BUSINESS_DAY)

        # Hours are compared on the instant's own day; the slot is built only once valid
        day_start = instant.set(hour=cfg.work_start_hour, minute=0, second=0, microsecond=0)
        latest_start = instant.set(
            hour=cfg.work_end_hour, minute=0, second=0, microsecond=0
        ).subtract(minutes=cfg.duration_minutes)
        if instant < day_start or instant > latest_start:
            return InvalidRequest(OUTSIDE_BUSINESS_HOURS)

        if not is_aligned(instant, cfg.step_minutes):
            return InvalidRequest(BAD_GRANULARITY)

        return TimeSlot.starting_at(instant, cfg.duration_minutes)
