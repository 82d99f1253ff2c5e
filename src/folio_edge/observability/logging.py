"""Log formatting for applications that embed the gateway client.

Gateway calls log a ``data`` mapping (method, path, status, latency). ``GatewayLogFormatter``
renders it after the message, masking anything that could carry a session credential,
and can switch to one JSON object per line for log collectors.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Mapping
from typing import Any

from opentelemetry import trace

GATEWAY_LOGGER = "folio_edge"
REDACTED = "<redacted>"
CREDENTIAL_KEYS = frozenset({"password", "token", "x-okapi-token", "cookie", "set-cookie"})


def redact(value: Any) -> Any:
    """Return ``value`` with credential keys masked at any depth."""

    if isinstance(value, Mapping):
        return {
            str(key): REDACTED if str(key).lower() in CREDENTIAL_KEYS else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


def _json_lines_requested() -> bool:
    return os.getenv("FOLIO_EDGE_JSON_LOGS", "").strip().lower() in {"1", "true", "yes"}


class GatewayLogFormatter(logging.Formatter):
    """Append the redacted ``data`` of gateway log records."""

    def __init__(self, fmt: str | None = None, *, json_lines: bool | None = None) -> None:
        super().__init__(fmt or "%(asctime)s %(levelname)s %(name)s: %(message)s")
        self.json_lines = _json_lines_requested() if json_lines is None else json_lines

    def format(self, record: logging.LogRecord) -> str:
        data = getattr(record, "data", None)
        safe = redact(data) if data else None
        if self.json_lines:
            payload: dict[str, Any] = {
                "severity": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            if safe is not None:
                payload["data"] = safe
            span_context = trace.get_current_span().get_span_context()
            if span_context.is_valid:
                payload["trace_id"] = f"{span_context.trace_id:032x}"
            return json.dumps(payload, sort_keys=True, default=str)

        formatted = super().format(record)
        if safe is None:
            return formatted
        return f"{formatted} | data={json.dumps(safe, sort_keys=True, separators=(',', ':'), default=str)}"


def configure_logging(level: str | int | None = None, *, json_lines: bool | None = None) -> logging.Handler:
    """Attach a stdout handler to the client's loggers and return it.

    ``level`` falls back to ``FOLIO_EDGE_LOG_LEVEL`` and then ``INFO``.
    """

    resolved = level if level is not None else os.getenv("FOLIO_EDGE_LOG_LEVEL", "INFO").upper()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(GatewayLogFormatter(json_lines=json_lines))
    logger = logging.getLogger(GATEWAY_LOGGER)
    logger.addHandler(handler)
    logger.setLevel(resolved)
    return handler


__all__ = ["CREDENTIAL_KEYS", "GatewayLogFormatter", "configure_logging", "redact"]
