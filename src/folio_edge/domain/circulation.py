"""Circulation request records and request-policy delivery methods."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("folio_edge.domain.circulation")

CANCELLED_STATUS = "Closed - Cancelled"
CANCELLATION_NOTE = "Cancelled by user in My Account"


class RequestMethod(str, Enum):
    HOLD = "hold"
    RECALL = "recall"
    L2L = "l2l"


_REQUEST_TYPE_LABELS: dict[str, RequestMethod] = {
    "Hold": RequestMethod.HOLD,
    "Page": RequestMethod.L2L,
    "Recall": RequestMethod.RECALL,
}


def translate_request_types(labels: Iterable[object] | None) -> frozenset[RequestMethod]:
    """Map backend request-type labels onto delivery methods, dropping unknown labels."""

    if not isinstance(labels, (list, tuple, set, frozenset)):
        return frozenset()
    methods: set[RequestMethod] = set()
    for label in labels:
        method = _REQUEST_TYPE_LABELS.get(label) if isinstance(label, str) else None
        if method is None:
            logger.debug("ignoring unknown request type", extra={"data": {"label": label}})
            continue
        methods.add(method)
    return frozenset(methods)


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class CirculationRequest(BaseModel):
    """New circulation request as submitted to the backend."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    instance_id: str = Field(alias="instanceId")
    holdings_record_id: str = Field(alias="holdingsRecordId")
    item_id: str = Field(alias="itemId")
    requester_id: str = Field(alias="requesterId")
    request_type: str = Field(alias="requestType")
    request_date: str = Field(alias="requestDate")
    request_level: str = Field(default="Item", alias="requestLevel")
    fulfillment_preference: str = Field(alias="fulfillmentPreference")
    pickup_service_point_id: str = Field(alias="pickupServicePointId")
    patron_comments: str | None = Field(default=None, alias="patronComments")

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if payload.get("patronComments") == "":
            del payload["patronComments"]
        return payload


def cancellation_overlay(
    record: Mapping[str, Any],
    reason_id: str,
    *,
    cancelled_at: datetime | None = None,
) -> dict[str, Any]:
    """Return the fetched request record with the cancellation fields laid over it.

    Every field of ``record`` is carried as received, nulls included; the requester
    is recorded as the canceller.
    """

    moment = cancelled_at or datetime.now(UTC)
    return {
        **record,
        "status": CANCELLED_STATUS,
        "cancellationReasonId": reason_id,
        "cancelledByUserId": record.get("requesterId"),
        "cancellationAdditionalInformation": CANCELLATION_NOTE,
        "cancelledDate": format_timestamp(moment),
        "requestLevel": record.get("requestLevel") or "Item",
    }


__all__ = [
    "CANCELLATION_NOTE",
    "CANCELLED_STATUS",
    "CirculationRequest",
    "RequestMethod",
    "cancellation_overlay",
    "format_timestamp",
    "translate_request_types",
]
