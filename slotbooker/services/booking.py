"""
Application service for offering and booking demo slots.

The service coordinates the calendar provider and the booking log through
small protocols and delegates all slot arithmetic to the domain layer. This
keeps the HTTP and CLI layers thin and lets tests plug in stub collaborators.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Protocol

import pendulum
from pendulum import DateTime

from ..config import SchedulingConfig
from ..domain.models import BookingRequest, Reservation, TimeRange, TimeSlot
from ..domain.outcomes import (
    MALFORMED_TIME,
    Available,
    AvailabilityResult,
    Confirmed,
    Failed,
    InvalidRequest,
    MalformedRequest,
    NoSlots,
    Offered,
    Unavailable,
)
from ..domain.exceptions import RequestDecodeError
from ..domain.results import Err, Ok, ProviderResult
from ..domain.slot_calculator import SlotCalculator
from ..domain.validation import RequestValidator, parse_instant

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "The calendar could not be reached. Please try again shortly."


class CalendarProvider(Protocol):
    """Calendar behaviour needed by the service."""

    def query_busy(self, time_min: DateTime, time_max: DateTime) -> ProviderResult[List[TimeRange]]:
        """Return busy intervals between ``time_min`` and ``time_max``."""

    def reserve(self, slot: TimeSlot, request: BookingRequest) -> ProviderResult[Reservation]:
        """Create the appointment and return its external reference."""


class RecordSink(Protocol):
    """Append-only booking log."""

    def append(self, row: Dict[str, str]) -> ProviderResult[None]:
        """Append one flat record."""


class BookingService:
    """
    Offers free slots and books them against the external calendar.

    Booking is check-then-commit: the requested window is re-queried right
    before the reservation. Nothing in this process serialises concurrent
    bookings, so two requests can still pass the re-check together and both
    reserve; preventing that is left to the calendar's own conflict handling.
    A reservation that was committed is never rolled back.
    """

    def __init__(
        self,
        config: SchedulingConfig,
        calendar: CalendarProvider,
        record_sink: RecordSink,
        clock: Optional[Callable[[], DateTime]] = None,
    ) -> None:
        self._config = config
        self._calendar = calendar
        self._record_sink = record_sink
        self._calculator = SlotCalculator(config)
        self._validator = RequestValidator(config)
        self._clock = clock or (lambda: pendulum.now(config.timezone))

    @property
    def config(self) -> SchedulingConfig:
        return self._config

    def now(self) -> DateTime:
        return self._clock().in_timezone(self._config.timezone)

    # ------------------------------------------------------------------
    # Listing operations
    # ------------------------------------------------------------------

    def next_available(self, count: Optional[int] = None) -> AvailabilityResult:
        """Offer the first free slots in chronological order."""
        free = self._free_slots(self.now())
        if isinstance(free, Err):
            return Failed(GENERIC_FAILURE_MESSAGE)

        slots = self._calculator.first_n(free.value, self._count(count))
        return Offered(slots) if slots else NoSlots()

    def slots_near(self, raw_instant: object, count: Optional[int] = None) -> AvailabilityResult:
        """
        Offer the free slots closest to a preferred instant.

        The preferred instant only seeds the ranking; it does not have to be
        bookable itself.
        """
        now = self.now()
        preferred = parse_instant(raw_instant, self._config.timezone)
        if preferred is None:
            return InvalidRequest(MALFORMED_TIME, self._fallback_alternatives(now))

        free = self._free_slots(now)
        if isinstance(free, Err):
            return Failed(GENERIC_FAILURE_MESSAGE)

        slots = self._calculator.nearest_n(free.value, preferred, self._count(count))
        return Offered(slots) if slots else NoSlots()

    def check_availability(self, raw_instant: object) -> AvailabilityResult:
        """Validate one requested instant and report whether it is free."""
        now = self.now()
        validated = self._validator.validate(raw_instant, now)
        if isinstance(validated, InvalidRequest):
            return InvalidRequest(validated.reason, self._fallback_alternatives(now))

        busy = self._calendar.query_busy(validated.start, validated.end)
        if isinstance(busy, Err):
            logger.warning("Availability check failed for %s: %s", validated.start, busy.message)
            return Failed(GENERIC_FAILURE_MESSAGE)

        if self._calculator.is_exactly_free(validated.start, busy.value):
            return Available(validated)

        return Unavailable(validated, self._fallback_alternatives(now, preferred=validated.start))

    def reject_malformed(self, error: RequestDecodeError) -> MalformedRequest:
        """Wrap a decode failure, attaching the next free slots as a way forward."""
        return MalformedRequest(
            message=error.message,
            missing=error.missing,
            alternatives=self._fallback_alternatives(self.now()),
        )

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def book(self, request: BookingRequest) -> AvailabilityResult:
        """
        Validate, re-check and reserve the requested slot, then log it.

        States: validating -> checking availability -> reserving -> logging
        -> confirmed, leaving early as invalid, unavailable or failed.
        """
        now = self.now()

        logger.debug("Booking state=validating requested=%r", request.requested_instant)
        validated = self._validator.validate(request.requested_instant, now)
        if isinstance(validated, InvalidRequest):
            logger.info("Booking rejected: %s", validated.reason)
            return InvalidRequest(validated.reason, self._fallback_alternatives(now))

        slot = validated

        logger.debug("Booking state=checking_availability slot=%s", slot.start)
        busy = self._calendar.query_busy(slot.start, slot.end)
        if isinstance(busy, Err):
            logger.error("Re-check before booking failed: %s", busy.message)
            return Failed(GENERIC_FAILURE_MESSAGE)

        if not self._calculator.is_exactly_free(slot.start, busy.value):
            logger.info("Requested slot %s was taken", slot.start)
            return Unavailable(slot, self._fallback_alternatives(now, preferred=slot.start))

        logger.debug("Booking state=reserving slot=%s", slot.start)
        reservation = self._calendar.reserve(slot, request)
        if isinstance(reservation, Err):
            logger.error("Reservation failed for %s: %s", slot.start, reservation.message)
            return Failed(GENERIC_FAILURE_MESSAGE)

        logger.debug("Booking state=logging event=%s", reservation.value.event_id)
        logged = self._record_sink.append(self._booking_row(request, slot, reservation.value, now))
        if isinstance(logged, Err):
            logger.warning(
                "Booking %s reserved but not logged: %s",
                reservation.value.event_id,
                logged.message,
            )

        logger.info("Booked demo for %s at %s", request.full_name, slot.start)
        return Confirmed(
            slot=slot,
            external_reference=reservation.value.event_id,
            link=reservation.value.link,
            record_logged=isinstance(logged, Ok),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _count(self, count: Optional[int]) -> int:
        if count is None:
            return self._config.alternatives_count
        return max(1, int(count))

    def _free_slots(self, now: DateTime) -> ProviderResult[List[TimeSlot]]:
        """Generate candidates and drop those the calendar reports busy."""
        candidates = self._calculator.generate_candidates(now)
        if not candidates:
            return Ok([])

        busy = self._calendar.query_busy(candidates[0].start, candidates[-1].end)
        if isinstance(busy, Err):
            logger.warning("Busy lookup failed: %s", busy.message)
            return busy

        return Ok(self._calculator.filter_free(candidates, busy.value))

    def _fallback_alternatives(
        self,
        now: DateTime,
        preferred: Optional[DateTime] = None,
    ) -> List[TimeSlot]:
        """
        Best-effort alternatives for a negative outcome.

        Without ``preferred`` the first free slots are returned; with it, the
        nearest free slots other than ``preferred`` itself. A calendar failure
        yields an empty list and the primary outcome is kept.
        """
        free = self._free_slots(now)
        if isinstance(free, Err):
            return []

        count = self._config.alternatives_count
        if preferred is None:
            return self._calculator.first_n(free.value, count)

        others = [slot for slot in free.value if slot.start != preferred]
        return self._calculator.nearest_n(others, preferred, count)

    def _booking_row(
        self,
        request: BookingRequest,
        slot: TimeSlot,
        reservation: Reservation,
        now: DateTime,
    ) -> Dict[str, str]:
        return {
            "logged_at": now.in_timezone("UTC").to_iso8601_string(),
            "full_name": request.full_name,
            "email": request.email,
            "phone": request.phone,
            "business_type": request.business_type,
            "start_time": slot.start.to_iso8601_string(),
            "end_time": slot.end.to_iso8601_string(),
            "calendar_link": reservation.link,
        }
