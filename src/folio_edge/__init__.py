"""Synchronous client for a FOLIO library-services gateway."""

from folio_edge.auth import (
    LEGACY_TOKEN_AUTH,
    ROTATING_TOKEN_AUTH,
    AuthStrategy,
    LegacyTokenAuth,
    RotatingTokenAuth,
    strategy_for,
)
from folio_edge.config.gateway import GatewaySettings
from folio_edge.domain.circulation import CirculationRequest, RequestMethod
from folio_edge.domain.outcome import Failure, Outcome, Success
from folio_edge.domain.patron import PatronIdentifier
from folio_edge.domain.session import SessionToken
from folio_edge.errors import AuthenticationError, FolioEdgeError
from folio_edge.gateway import GatewayClient
from folio_edge.observability.logging import configure_logging

__all__ = [
    "AuthStrategy",
    "AuthenticationError",
    "CirculationRequest",
    "Failure",
    "FolioEdgeError",
    "GatewayClient",
    "GatewaySettings",
    "LEGACY_TOKEN_AUTH",
    "LegacyTokenAuth",
    "Outcome",
    "PatronIdentifier",
    "ROTATING_TOKEN_AUTH",
    "RequestMethod",
    "RotatingTokenAuth",
    "SessionToken",
    "Success",
    "configure_logging",
    "strategy_for",
]
