"""Session token issued by gateway authentication."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class SessionToken:
    """Opaque access token plus the expiry reported by the rotating-token login."""

    value: str = field(repr=False)
    expires_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.value.strip():
            raise ValueError("session token value must not be empty")

    def __str__(self) -> str:
        return self.value


__all__ = ["SessionToken"]
