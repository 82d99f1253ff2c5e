"""Patron identifier references."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PatronIdentifier:
    """Either a patron UUID or a login username; exactly one is set."""

    folio_id: str | None = None
    username: str | None = None

    def __post_init__(self) -> None:
        has_id = bool(self.folio_id and self.folio_id.strip())
        has_username = bool(self.username and self.username.strip())
        if has_id == has_username:
            raise ValueError("patron identifier requires exactly one of folio_id or username")

    @classmethod
    def by_id(cls, folio_id: str) -> PatronIdentifier:
        return cls(folio_id=folio_id)

    @classmethod
    def by_username(cls, username: str) -> PatronIdentifier:
        return cls(username=username)

    @property
    def is_resolved(self) -> bool:
        return bool(self.folio_id and self.folio_id.strip())


__all__ = ["PatronIdentifier"]
