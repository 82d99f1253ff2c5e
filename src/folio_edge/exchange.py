"""Single gateway request/response exchange with outcome normalization."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

from folio_edge.domain.outcome import ErrorDetail, Failure, Outcome, Success
from folio_edge.errors import AuthenticationError

_LOGGER = logging.getLogger("folio_edge.gateway.calls")

TENANT_HEADER = "X-Okapi-Tenant"
TOKEN_HEADER = "x-okapi-token"

# A 2xx answer the client cannot use is reported as a bad gateway, never as a 2xx failure.
UNUSABLE_RESPONSE_CODE = 502


def require_token(token: object) -> str:
    """Return the token text, raising before any request when it is missing."""

    text = "" if token is None else str(token)
    if not text.strip():
        raise AuthenticationError("Authentication token is missing.")
    return text


def normalize_gateway(gateway: str) -> str:
    if not gateway or not gateway.strip():
        raise ValueError("gateway url must not be empty")
    return gateway.strip().rstrip("/")


@dataclass(frozen=True, slots=True)
class GatewayExchange:
    """Call-scoped request context: one HTTP client, one tenant, optionally one token."""

    client: httpx.Client
    tenant: str
    token: str | None = None

    def __post_init__(self) -> None:
        if not self.tenant or not self.tenant.strip():
            raise ValueError("tenant must not be empty")

    def headers(self, *, json_body: bool = False, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = {
            TENANT_HEADER: self.tenant,
            "Accept": "application/json",
        }
        if self.token is not None:
            headers[TOKEN_HEADER] = self.token
        if json_body:
            headers["Content-Type"] = "application/json"
        if extra:
            headers.update(extra)
        return headers

    def send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json_payload: Any = None,
        extra_headers: Mapping[str, str] | None = None,
        structured_errors: bool = False,
    ) -> Outcome[httpx.Response]:
        """Issue one request; rejections and transport failures come back as ``Failure``."""

        method = method.upper()
        json_body = json_payload is not None
        tracer = trace.get_tracer("folio_edge.gateway")
        with tracer.start_as_current_span(
            "gateway.request",
            kind=SpanKind.CLIENT,
            attributes={
                "http.method": method,
                "http.target": path,
                "folio.tenant": self.tenant,
            },
        ) as span:
            start = time.perf_counter()
            try:
                response = self.client.request(
                    method,
                    path,
                    params=dict(params) if params else None,
                    json=json_payload,
                    headers=self.headers(json_body=json_body, extra=extra_headers),
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                span.set_attribute("http.status_code", status)
                span.set_status(Status(StatusCode.ERROR, f"http {status}"))
                _LOGGER.info(
                    "gateway.request.rejected",
                    extra={
                        "data": {
                            "method": method,
                            "path": path,
                            "status_code": status,
                            "latency_ms": _elapsed_ms(start),
                        }
                    },
                )
                return Failure(status, error_detail(exc.response, structured=structured_errors))
            except httpx.RequestError as exc:
                span.record_exception(exc)
                span.set_status(Status(StatusCode.ERROR, exc.__class__.__name__))
                _LOGGER.warning(
                    "gateway.request.transport_error",
                    extra={
                        "data": {
                            "method": method,
                            "path": path,
                            "error_type": exc.__class__.__name__,
                            "error": str(exc),
                            "latency_ms": _elapsed_ms(start),
                        }
                    },
                )
                return Failure(None, f"Network error: {exc.__class__.__name__} - {exc}")

            span.set_attribute("http.status_code", response.status_code)
            _LOGGER.info(
                "gateway.request.complete",
                extra={
                    "data": {
                        "method": method,
                        "path": path,
                        "status_code": response.status_code,
                        "latency_ms": _elapsed_ms(start),
                    }
                },
            )
            return Success(response, response.status_code)


def error_detail(response: httpx.Response, *, structured: bool) -> ErrorDetail:
    """Return the rejection body, decoded as JSON only when ``structured`` is requested."""

    if not structured:
        return response.text
    try:
        return response.json()
    except ValueError:
        return response.text


def decode_body(response: httpx.Response) -> Outcome[Any]:
    """Decode a successful response body; an undecodable body becomes a ``Failure``."""

    try:
        return Success(response.json(), response.status_code)
    except ValueError:
        _LOGGER.warning(
            "gateway.response.undecodable",
            extra={
                "data": {
                    "path": response.request.url.path,
                    "status_code": response.status_code,
                    "content_type": response.headers.get("content-type"),
                }
            },
        )
        return Failure(UNUSABLE_RESPONSE_CODE, response.text or "gateway returned an empty body")


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


__all__ = [
    "GatewayExchange",
    "TENANT_HEADER",
    "TOKEN_HEADER",
    "UNUSABLE_RESPONSE_CODE",
    "decode_body",
    "error_detail",
    "normalize_gateway",
    "require_token",
]
