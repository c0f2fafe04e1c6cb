"""
HTTP transport for the voice agent's scheduling tools.

server.py responsibilities:
- Route tool calls to the BookingService
- Decode payloads through the codec and serialise every outcome as JSON
- Serve the TwiML that connects an inbound call to the voice agent stream

All scheduling logic lives in BookingService.
"""

from __future__ import annotations

import logging
from typing import Any
from xml.sax.saxutils import quoteattr

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from .. import __version__
from ..bootstrap import build_service, configure_logging
from ..config import AppConfig, load_config
from ..domain.exceptions import RequestDecodeError
from ..domain.outcomes import AvailabilityResult
from ..services.booking import BookingService
from .codec import (
    decode_booking_request,
    decode_count,
    decode_start_time,
    serialize_result,
)

logger = logging.getLogger(__name__)


def twiml_stream_response(stream_url: str, agent_id: str) -> str:
    """TwiML connecting the call audio to the voice agent stream."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<Response>\n"
        "  <Connect>\n"
        f"    <Stream url={quoteattr(stream_url)}>\n"
        f"      <Parameter name=\"agent_id\" value={quoteattr(agent_id)} />\n"
        "    </Stream>\n"
        "  </Connect>\n"
        "</Response>"
    )


def create_app(config: AppConfig, service: BookingService) -> FastAPI:
    """Build the FastAPI application around an already wired service."""
    app = FastAPI(title="slotbooker", version=__version__)
    timezone = config.scheduling.timezone

    def respond(result: AvailabilityResult) -> JSONResponse:
        status_code, content = serialize_result(result, timezone)
        return JSONResponse(status_code=status_code, content=content)

    @app.exception_handler(RequestDecodeError)
    def handle_decode_error(request: Request, exc: RequestDecodeError) -> JSONResponse:
        return respond(service.reject_malformed(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"status": "error", "timezone": timezone, "message": "Request body must be valid JSON", "alternatives": []},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"status": "error", "timezone": timezone, "message": "Internal error", "alternatives": []},
        )

    @app.get("/")
    @app.get("/health")
    def health() -> dict:
        return {"ok": True}

    @app.post("/retell/get_slots")
    def get_slots(body: Any = Body(default=None)) -> JSONResponse:
        return respond(service.next_available(decode_count(body)))

    @app.post("/retell/confirm_availability")
    def confirm_availability(body: Any = Body(default=None)) -> JSONResponse:
        return respond(service.check_availability(decode_start_time(body)))

    @app.post("/retell/get_slots_near")
    def get_slots_near(body: Any = Body(default=None)) -> JSONResponse:
        start_time = decode_start_time(body)
        return respond(service.slots_near(start_time, decode_count(body)))

    @app.post("/retell/book_demo")
    def book_demo(body: Any = Body(default=None)) -> JSONResponse:
        request = decode_booking_request(body)
        logger.info("Booking request from %s for %s", request.full_name, request.requested_instant)
        return respond(service.book(request))

    @app.api_route("/twilio/voice", methods=["GET", "POST"])
    def twilio_voice() -> Response:
        return Response(
            content=twiml_stream_response(config.voice.stream_url, config.voice.agent_id),
            media_type="text/xml",
        )

    return app


def create_app_from_env() -> FastAPI:
    """
    Application factory for ``uvicorn --factory``.

    Configuration errors propagate so the process refuses to start.
    """
    config = load_config()
    configure_logging(config.log_level)
    return create_app(config, build_service(config))


__all__ = ["create_app", "create_app_from_env", "twiml_stream_response"]
