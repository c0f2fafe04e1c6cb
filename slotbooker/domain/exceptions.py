"""
Domain-specific exception hierarchy for the slot booking application.
"""

from __future__ import annotations

from typing import Sequence


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class ProviderError(SchedulingError):
    """Raised (or returned inside ``Err``) when a calendar or sink call fails."""

    def __init__(self, operation: str, message: str, *, timed_out: bool = False):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message
        self.timed_out = timed_out


class ConfigurationError(SchedulingError):
    """Raised when startup configuration is missing or invalid."""


class RequestDecodeError(SchedulingError):
    """Raised when an inbound payload cannot be turned into a typed request."""

    def __init__(self, message: str, missing: Sequence[str] = ()):
        super().__init__(message)
        self.message = message
        self.missing = list(missing)
