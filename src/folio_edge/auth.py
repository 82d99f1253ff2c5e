"""Gateway login strategies.

The gateway has shipped two incompatible login endpoints. ``LegacyTokenAuth`` posts to
``/authn/login`` and reads a non-expiring token from the ``x-okapi-token`` header.
``RotatingTokenAuth`` posts to ``/authn/login-with-expiry`` and reads the access token
from the ``folioAccessToken`` cookie and its expiry from the JSON body. The refresh
token issued alongside is ignored: sessions are expected to be short-lived.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from folio_edge.clients import PATHS
from folio_edge.domain.outcome import Failure, Outcome, Success
from folio_edge.domain.session import SessionToken
from folio_edge.exchange import TOKEN_HEADER, UNUSABLE_RESPONSE_CODE, GatewayExchange

logger = logging.getLogger("folio_edge.auth")

ACCESS_TOKEN_COOKIE = "folioAccessToken"
_ACCESS_TOKEN_PATTERN = re.compile(rf"{ACCESS_TOKEN_COOKIE}=([^;]*)")
_DATETIME = TypeAdapter(datetime)


class AuthStrategy(Protocol):
    """One gateway login scheme."""

    name: str
    login_path: str

    def read_token(self, response: httpx.Response) -> SessionToken | None:
        """Extract the session token from a successful login response."""

    def authenticate(
        self,
        exchange: GatewayExchange,
        username: str,
        password: str,
        *,
        forwarded_for: str,
    ) -> Outcome[SessionToken]:
        """Post credentials and return the issued token."""


class _LoginFlow(ABC):
    name: str
    login_path: str

    @abstractmethod
    def read_token(self, response: httpx.Response) -> SessionToken | None: ...

    def authenticate(
        self,
        exchange: GatewayExchange,
        username: str,
        password: str,
        *,
        forwarded_for: str,
    ) -> Outcome[SessionToken]:
        result = exchange.send(
            "POST",
            self.login_path,
            json_payload={"username": username, "password": password},
            extra_headers={"X-Forwarded-For": forwarded_for},
        )
        if isinstance(result, Failure):
            logger.info(
                "gateway login failed",
                extra={"data": {"scheme": self.name, "tenant": exchange.tenant, "code": result.code}},
            )
            return result

        response = result.payload
        token = self.read_token(response)
        if token is None:
            logger.warning(
                "gateway login response carried no token",
                extra={"data": {"scheme": self.name, "status_code": response.status_code}},
            )
            return Failure(UNUSABLE_RESPONSE_CODE, f"login response did not include a {self.name} access token")
        logger.debug(
            "gateway login succeeded",
            extra={
                "data": {
                    "scheme": self.name,
                    "tenant": exchange.tenant,
                    "expires_at": token.expires_at.isoformat() if token.expires_at else None,
                }
            },
        )
        return Success(token, response.status_code)


@dataclass(frozen=True)
class LegacyTokenAuth(_LoginFlow):
    name: str = "legacy"
    login_path: str = PATHS.login

    def read_token(self, response: httpx.Response) -> SessionToken | None:
        value = response.headers.get(TOKEN_HEADER)
        if not value:
            return None
        return SessionToken(value)


@dataclass(frozen=True)
class RotatingTokenAuth(_LoginFlow):
    name: str = "rotating"
    login_path: str = PATHS.login_with_expiry

    def read_token(self, response: httpx.Response) -> SessionToken | None:
        for cookie in response.headers.get_list("set-cookie"):
            if not cookie.startswith(f"{ACCESS_TOKEN_COOKIE}="):
                continue
            match = _ACCESS_TOKEN_PATTERN.match(cookie)
            if match is None or not match.group(1):
                continue
            return SessionToken(match.group(1), expires_at=_access_token_expiry(response))
        return None


def _access_token_expiry(response: httpx.Response) -> datetime | None:
    try:
        raw = response.json().get("accessTokenExpiration")
    except (ValueError, AttributeError):
        return None
    if raw is None:
        return None
    try:
        return _DATETIME.validate_python(raw)
    except ValidationError:
        logger.warning(
            "unparseable access token expiry",
            extra={"data": {"accessTokenExpiration": raw}},
        )
        return None


LEGACY_TOKEN_AUTH = LegacyTokenAuth()
ROTATING_TOKEN_AUTH = RotatingTokenAuth()

_STRATEGIES: dict[str, AuthStrategy] = {
    LEGACY_TOKEN_AUTH.name: LEGACY_TOKEN_AUTH,
    ROTATING_TOKEN_AUTH.name: ROTATING_TOKEN_AUTH,
}


def strategy_for(name: str) -> AuthStrategy:
    try:
        return _STRATEGIES[name.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown auth scheme {name!r}; expected one of {sorted(_STRATEGIES)}") from None


__all__ = [
    "ACCESS_TOKEN_COOKIE",
    "AuthStrategy",
    "LEGACY_TOKEN_AUTH",
    "LegacyTokenAuth",
    "ROTATING_TOKEN_AUTH",
    "RotatingTokenAuth",
    "strategy_for",
]
