"""Uniform result shapes returned by every gateway operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeAlias, TypeVar

from pydantic import JsonValue

T = TypeVar("T")

ErrorDetail: TypeAlias = JsonValue
"""Backend error body: raw text, or decoded JSON where an operation expects structure."""


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Operation completed; ``payload`` holds the operation-specific result."""

    payload: T
    code: int

    @property
    def ok(self) -> Literal[True]:
        return True

    @property
    def error(self) -> None:
        return None

    def payload_or(self, default: T) -> T:
        return self.payload


@dataclass(frozen=True, slots=True)
class Failure:
    """Operation failed.

    ``code`` is the backend status, a fixed sentinel for synthesized failures, or
    ``None`` when the transport failed before any status was received. ``error`` is
    ``None`` only when a dependent call was halted on a bare status code.
    """

    code: int | None
    error: ErrorDetail = None

    @property
    def ok(self) -> Literal[False]:
        return False

    @property
    def payload(self) -> None:
        return None

    def payload_or(self, default: T) -> T:
        return default


Outcome: TypeAlias = Success[T] | Failure


__all__ = [
    "ErrorDetail",
    "Failure",
    "Outcome",
    "Success",
]
