"""
Pydantic models for the flat tool-call arguments accepted by the HTTP and CLI surfaces.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.models import BookingRequest

MAX_COUNT = 10


class ToolArguments(BaseModel):
    """Base for tool arguments: surrounding whitespace is stripped, unknown keys ignored."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class BookingArguments(ToolArguments):
    """Arguments of the booking tool."""
    full_name: str = Field(..., min_length=1, description="Full name of the attendee")
    email: str = Field(..., min_length=1, description="Attendee email")
    phone: str = Field(..., min_length=1, description="Attendee phone number")
    start_time: str = Field(..., min_length=1, description="Requested start, ISO 8601")
    business_type: str = Field("", description="Kind of business")
    notes: str = Field("", description="Free-form notes")

    @field_validator("business_type", "notes", mode="before")
    @classmethod
    def none_as_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_request(self) -> BookingRequest:
        return BookingRequest(
            full_name=self.full_name,
            email=self.email,
            phone=self.phone,
            business_type=self.business_type,
            notes=self.notes,
            requested_instant=self.start_time,
        )


class StartTimeArguments(ToolArguments):
    """Arguments naming one instant (availability check, nearby slots)."""
    start_time: str = Field(..., min_length=1, description="Requested or preferred start, ISO 8601")


class CountArguments(ToolArguments):
    """Optional number of slots to offer, clamped to 1..MAX_COUNT."""
    count: Optional[int] = Field(None, description="Number of slots to offer")

    @field_validator("count", mode="before")
    @classmethod
    def blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("count")
    @classmethod
    def clamp(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return None
        return min(max(value, 1), MAX_COUNT)
