"""Synchronous client for the library-services gateway."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

import httpx

from folio_edge.auth import ROTATING_TOKEN_AUTH, AuthStrategy
from folio_edge.clients import GATEWAY, PATHS
from folio_edge.domain.circulation import (
    CirculationRequest,
    RequestMethod,
    cancellation_overlay,
    format_timestamp,
    translate_request_types,
)
from folio_edge.domain.outcome import Failure, Outcome, Success
from folio_edge.domain.patron import PatronIdentifier
from folio_edge.domain.session import SessionToken
from folio_edge.exchange import GatewayExchange, decode_body, normalize_gateway, require_token

if TYPE_CHECKING:
    from folio_edge.config.gateway import GatewaySettings

logger = logging.getLogger("folio_edge.gateway")

# Synthesized failures use a server-error code rather than whatever the backend said.
SENTINEL_FAILURE_CODE = 500
USER_NOT_FOUND = "Couldn't find user record"
USER_NOT_IDENTIFIED = "Couldn't identify user"
POLICY_NOT_RESOLVED = "Circulation rules did not name a request policy"
REQUEST_NOT_READABLE = "Request record was not a JSON object"

# The cancellation fetch counts anything above this as "do not update".
BARE_SUCCESS = 200


@dataclass
class GatewayClient:
    """One method per gateway capability.

    The client carries transport settings only. Gateway URL, tenant and token are
    passed to every call and never stored, so one instance can serve concurrent
    callers holding different sessions.
    """

    timeout_seconds: float = GATEWAY.timeout_seconds
    forwarded_for: str = GATEWAY.forwarded_for
    transport: httpx.BaseTransport | None = None

    @classmethod
    def from_settings(cls, settings: GatewaySettings, *, transport: httpx.BaseTransport | None = None) -> GatewayClient:
        return cls(
            timeout_seconds=settings.timeout_seconds,
            forwarded_for=settings.forwarded_for,
            transport=transport,
        )

    @contextmanager
    def _exchange(self, gateway: str, tenant: str, token: str | None = None) -> Iterator[GatewayExchange]:
        with httpx.Client(
            base_url=normalize_gateway(gateway),
            timeout=self.timeout_seconds,
            transport=self.transport,
        ) as client:
            yield GatewayExchange(client=client, tenant=tenant, token=token)

    # Authentication ------------------------------------------------------------------------------

    def authenticate(
        self,
        gateway: str,
        tenant: str,
        username: str,
        password: str,
        strategy: AuthStrategy = ROTATING_TOKEN_AUTH,
    ) -> Outcome[SessionToken]:
        with self._exchange(gateway, tenant) as exchange:
            return strategy.authenticate(exchange, username, password, forwarded_for=self.forwarded_for)

    # Patrons -------------------------------------------------------------------------------------

    def patron_record(self, gateway: str, tenant: str, token: str | SessionToken, username: str) -> Outcome[dict[str, Any]]:
        """Look up the single user record whose username matches exactly."""

        token = require_token(token)
        with self._exchange(gateway, tenant, token) as exchange:
            return self._find_patron(exchange, username)

    def patron_account(
        self,
        gateway: str,
        tenant: str,
        token: str | SessionToken,
        patron: PatronIdentifier,
    ) -> Outcome[dict[str, Any]]:
        """Fetch loans, holds and charges for a patron."""

        token = require_token(token)
        with self._exchange(gateway, tenant, token) as exchange:
            folio_id = self._resolve_patron_id(exchange, patron)
            if folio_id is None:
                return Failure(SENTINEL_FAILURE_CODE, USER_NOT_IDENTIFIED)
            result = exchange.send(
                "GET",
                f"{PATHS.patron_account}/{folio_id}",
                params={
                    "includeLoans": "true",
                    "includeHolds": "true",
                    "includeCharges": "true",
                },
            )
            if isinstance(result, Failure):
                return result
            return decode_body(result.payload)

    def renew_item(
        self,
        gateway: str,
        tenant: str,
        token: str | SessionToken,
        patron: PatronIdentifier,
        item_id: str,
    ) -> Outcome[str | None]:
        """Renew a loaned item; the payload is the new due date."""

        token = require_token(token)
        with self._exchange(gateway, tenant, token) as exchange:
            folio_id = self._resolve_patron_id(exchange, patron)
            if folio_id is None:
                return Failure(SENTINEL_FAILURE_CODE, USER_NOT_IDENTIFIED)
            result = exchange.send(
                "POST",
                f"{PATHS.patron_account}/{folio_id}/item/{item_id}/renew",
                structured_errors=True,
            )
            if isinstance(result, Failure):
                return result
            body = decode_body(result.payload)
            if isinstance(body, Failure):
                return body
            due_date = _field(body.payload, "dueDate")
            return Success(due_date, body.code)

    def _find_patron(self, exchange: GatewayExchange, username: str) -> Outcome[dict[str, Any]]:
        result = exchange.send("GET", PATHS.users, params={"query": f"(username=={username})"})
        if isinstance(result, Failure):
            return result
        body = decode_body(result.payload)
        if isinstance(body, Failure):
            return body
        users = _field(body.payload, "users")
        if not isinstance(users, list) or len(users) != 1:
            logger.info(
                "patron lookup did not match exactly one user",
                extra={"data": {"tenant": exchange.tenant, "matches": len(users) if isinstance(users, list) else None}},
            )
            return Failure(SENTINEL_FAILURE_CODE, USER_NOT_FOUND)
        return Success(users[0], body.code)

    def _resolve_patron_id(self, exchange: GatewayExchange, patron: PatronIdentifier) -> str | None:
        if patron.is_resolved:
            return patron.folio_id
        record = self._find_patron(exchange, patron.username or "")
        if isinstance(record, Failure):
            return None
        folio_id = _field(record.payload, "id")
        return folio_id if isinstance(folio_id, str) and folio_id else None

    # Requests ------------------------------------------------------------------------------------

    def request_options(
        self,
        gateway: str,
        tenant: str,
        token: str | SessionToken,
        patron_group_id: str,
        material_type_id: str,
        loan_type_id: str,
        location_id: str,
    ) -> Outcome[frozenset[RequestMethod]]:
        """Resolve which delivery methods the circulation rules allow.

        The rules engine names a request policy for the patron/item/location combination,
        then the policy lists the allowed request types. A failed rules lookup ends the
        call without touching the policy endpoint.
        """

        token = require_token(token)
        with self._exchange(gateway, tenant, token) as exchange:
            rules = exchange.send(
                "GET",
                PATHS.request_policy_rules,
                params={
                    "item_type_id": material_type_id,
                    "loan_type_id": loan_type_id,
                    "patron_type_id": patron_group_id,
                    "location_id": location_id,
                },
            )
            if isinstance(rules, Failure):
                return rules
            rules_body = decode_body(rules.payload)
            if isinstance(rules_body, Failure):
                return rules_body
            policy_id = _field(rules_body.payload, "requestPolicyId")
            if not policy_id:
                return Failure(SENTINEL_FAILURE_CODE, POLICY_NOT_RESOLVED)

            policy = exchange.send("GET", f"{PATHS.request_policies}/{policy_id}")
            if isinstance(policy, Failure):
                return policy
            policy_body = decode_body(policy.payload)
            if isinstance(policy_body, Failure):
                return policy_body
            labels = _field(policy_body.payload, "requestTypes")
            return Success(translate_request_types(labels), policy_body.code)

    def request_item(
        self,
        gateway: str,
        tenant: str,
        token: str | SessionToken,
        *,
        instance_id: str,
        holdings_id: str,
        item_id: str,
        requester_id: str,
        request_type: str,
        request_date: str | datetime,
        fulfillment_preference: str,
        service_point_id: str,
        comments: str = "",
        request_level: str = "Item",
    ) -> Outcome[None]:
        """Place a new circulation request; empty comments are left out of the body."""

        token = require_token(token)
        request = CirculationRequest(
            instance_id=instance_id,
            holdings_record_id=holdings_id,
            item_id=item_id,
            requester_id=requester_id,
            request_type=request_type,
            request_date=request_date if isinstance(request_date, str) else format_timestamp(request_date),
            request_level=request_level,
            fulfillment_preference=fulfillment_preference,
            pickup_service_point_id=service_point_id,
            patron_comments=comments or None,
        )
        with self._exchange(gateway, tenant, token) as exchange:
            result = exchange.send("POST", PATHS.requests, json_payload=request.to_payload())
            if isinstance(result, Failure):
                return result
            return Success(None, result.code)

    def cancel_request(
        self,
        gateway: str,
        tenant: str,
        token: str | SessionToken,
        request_id: str,
        reason_id: str,
    ) -> Outcome[None]:
        """Cancel a request by replaying its full representation with cancellation fields.

        The update endpoint replaces the whole resource, so the current record is fetched
        first. A fetch answering with anything above a bare 200 stops before the update.
        """

        token = require_token(token)
        path = f"{PATHS.requests}/{request_id}"
        with self._exchange(gateway, tenant, token) as exchange:
            fetched = exchange.send("GET", path)
            if isinstance(fetched, Failure):
                return fetched
            if fetched.code > BARE_SUCCESS:
                logger.info(
                    "request fetch returned a non-plain success; not cancelling",
                    extra={"data": {"request_id": request_id, "status_code": fetched.code}},
                )
                return Failure(fetched.code)
            body = decode_body(fetched.payload)
            if isinstance(body, Failure):
                return body
            if not isinstance(body.payload, dict):
                logger.warning(
                    "request fetch did not return a record; not cancelling",
                    extra={"data": {"request_id": request_id, "status_code": body.code}},
                )
                return Failure(SENTINEL_FAILURE_CODE, REQUEST_NOT_READABLE)
            update = cancellation_overlay(body.payload, reason_id)
            result = exchange.send("PUT", path, json_payload=update)
            if isinstance(result, Failure):
                return result
            logger.info(
                "request cancelled",
                extra={"data": {"request_id": request_id, "reason_id": reason_id, "status_code": result.code}},
            )
            return Success(None, result.code)

    # Catalog -------------------------------------------------------------------------------------

    def instance_record(self, gateway: str, tenant: str, token: str | SessionToken, instance_id: str) -> Outcome[dict[str, Any]]:
        token = require_token(token)
        with self._exchange(gateway, tenant, token) as exchange:
            return self._get_record(exchange, f"{PATHS.instances}/{instance_id}")

    def service_point(self, gateway: str, tenant: str, token: str | SessionToken, service_point_id: str) -> Outcome[dict[str, Any]]:
        token = require_token(token)
        with self._exchange(gateway, tenant, token) as exchange:
            return self._get_record(exchange, f"{PATHS.service_points}/{service_point_id}")

    @staticmethod
    def _get_record(exchange: GatewayExchange, path: str) -> Outcome[dict[str, Any]]:
        result = exchange.send("GET", path)
        if isinstance(result, Failure):
            return result
        return decode_body(result.payload)


def _field(payload: Any, key: str) -> Any:
    return payload.get(key) if isinstance(payload, dict) else None


__all__ = [
    "BARE_SUCCESS",
    "GatewayClient",
    "POLICY_NOT_RESOLVED",
    "REQUEST_NOT_READABLE",
    "SENTINEL_FAILURE_CODE",
    "USER_NOT_FOUND",
    "USER_NOT_IDENTIFIED",
]
