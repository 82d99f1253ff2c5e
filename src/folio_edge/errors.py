"""Exceptions raised by the gateway client."""

from __future__ import annotations


class FolioEdgeError(Exception):
    """Base class for gateway client failures."""


class AuthenticationError(FolioEdgeError):
    """Raised when an operation is attempted without a session token."""


__all__ = [
    "FolioEdgeError",
    "AuthenticationError",
]
