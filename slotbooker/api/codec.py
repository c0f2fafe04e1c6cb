"""
Decoding of inbound payloads and serialisation of scheduling outcomes.

Voice-agent platforms wrap tool arguments differently (``args``,
``arguments`` or the bare body). ``extract_arguments`` is the only place that
knows about those shapes.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import ValidationError

from ..domain.exceptions import RequestDecodeError
from ..domain.models import BookingRequest, TimeSlot
from ..domain.outcomes import (
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
from .schemas import BookingArguments, CountArguments, StartTimeArguments, ToolArguments

# Error types that mean "not supplied" rather than "supplied but wrong"
BLANK_ERROR_TYPES = frozenset({"missing", "string_too_short"})

M = TypeVar("M", bound=ToolArguments)


def extract_arguments(body: Any) -> Dict[str, Any]:
    """
    Return the flat argument mapping from a request body.

    Raises:
        RequestDecodeError: If the body is not a JSON object
    """
    if body is None:
        return {}
    if not isinstance(body, Mapping):
        raise RequestDecodeError("Request body must be a JSON object")

    for key in ("args", "arguments"):
        nested = body.get(key)
        if isinstance(nested, str):
            try:
                nested = json.loads(nested)
            except ValueError as exc:
                raise RequestDecodeError(f"'{key}' is not valid JSON") from exc
        if isinstance(nested, Mapping):
            return dict(nested)

    return dict(body)


def _decode_error(exc: ValidationError) -> RequestDecodeError:
    """Map pydantic errors onto missing and invalid field names."""
    missing: List[str] = []
    invalid: List[str] = []

    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "body"
        blank = error["type"] in BLANK_ERROR_TYPES or error.get("input", "") is None
        target = missing if blank else invalid
        if field not in target:
            target.append(field)

    if invalid:
        return RequestDecodeError(f"Invalid value for: {', '.join(invalid)}", missing)
    return RequestDecodeError("Missing required fields", missing)


def _validate(model: Type[M], body: Any) -> M:
    try:
        return model.model_validate(extract_arguments(body))
    except ValidationError as exc:
        raise _decode_error(exc) from exc


def decode_booking_request(body: Any) -> BookingRequest:
    """
    Decode a booking payload.

    Raises:
        RequestDecodeError: Listing every missing required field
    """
    return _validate(BookingArguments, body).to_request()


def decode_start_time(body: Any) -> str:
    """Decode the ``start_time`` of an availability or nearby-slots payload."""
    return _validate(StartTimeArguments, body).start_time


def decode_count(body: Any) -> Optional[int]:
    """Decode the optional ``count`` argument, clamped to 1..MAX_COUNT."""
    return _validate(CountArguments, body).count


def _slots(slots: List[TimeSlot]) -> List[Dict[str, str]]:
    return [slot.to_dict() for slot in slots]


def serialize_result(result: AvailabilityResult, timezone: str) -> Tuple[int, Dict[str, Any]]:
    """
    Convert an outcome into ``(http_status, json_body)``.

    Every body carries ``status`` and ``timezone``; every non-confirmed body
    carries ``alternatives``.
    """
    body: Dict[str, Any] = {"status": result.status, "timezone": timezone}
    http_status = 200

    if isinstance(result, Confirmed):
        body.update(result.slot.to_dict())
        body.update({
            "event_id": result.external_reference,
            "calendar_link": result.link,
            "record_logged": result.record_logged,
        })
        return http_status, body

    if isinstance(result, Offered):
        body["slots"] = _slots(result.slots)
        body["alternatives"] = body["slots"]
    elif isinstance(result, Available):
        body.update({"available": True, "slot": result.slot.to_dict(), "alternatives": []})
    elif isinstance(result, Unavailable):
        body.update({
            "available": False,
            "message": "That time is no longer available.",
            "slot": result.slot.to_dict(),
            "alternatives": _slots(result.alternatives),
        })
    elif isinstance(result, NoSlots):
        body.update({"slots": [], "alternatives": []})
    elif isinstance(result, InvalidRequest):
        body.update({
            "reason": result.reason,
            "message": result.message,
            "alternatives": _slots(result.alternatives),
        })
    elif isinstance(result, MalformedRequest):
        http_status = 400
        body.update({
            "message": result.message,
            "missing": list(result.missing),
            "alternatives": _slots(result.alternatives),
        })
    elif isinstance(result, Failed):
        http_status = 502
        body.update({"message": result.message, "alternatives": _slots(result.alternatives)})
    else:
        raise TypeError(f"Unknown scheduling outcome: {result!r}")

    return http_status, body
