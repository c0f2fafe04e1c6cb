"""
Explicit success/failure values returned by external collaborator calls.

Adapters never let transport exceptions escape; they hand back ``Ok`` or
``Err`` and the booking service branches on the type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .exceptions import ProviderError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful collaborator call."""
    value: T


@dataclass(frozen=True)
class Err:
    """Failed collaborator call."""
    error: ProviderError

    @property
    def message(self) -> str:
        return str(self.error)


ProviderResult = Union[Ok[T], Err]
