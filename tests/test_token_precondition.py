from __future__ import annotations

from collections.abc import Callable

import pytest

from folio_edge.domain.patron import PatronIdentifier
from folio_edge.domain.session import SessionToken
from folio_edge.errors import AuthenticationError
from folio_edge.gateway import GatewayClient

GATEWAY_URL = "https://folio.example.com"
TENANT = "test_tenant"

Operation = Callable[[GatewayClient, object], object]

_OPERATIONS: dict[str, Operation] = {
    "patron_record": lambda c, t: c.patron_record(GATEWAY_URL, TENANT, t, "jd123"),
    "patron_account": lambda c, t: c.patron_account(
        GATEWAY_URL, TENANT, t, PatronIdentifier.by_username("jd123")
    ),
    "renew_item": lambda c, t: c.renew_item(
        GATEWAY_URL, TENANT, t, PatronIdentifier.by_id("user-789"), "item-222"
    ),
    "request_options": lambda c, t: c.request_options(
        GATEWAY_URL, TENANT, t, "group", "material", "loan", "location"
    ),
    "instance_record": lambda c, t: c.instance_record(GATEWAY_URL, TENANT, t, "instance-111"),
    "request_item": lambda c, t: c.request_item(
        GATEWAY_URL,
        TENANT,
        t,
        instance_id="instance-111",
        holdings_id="holdings-333",
        item_id="item-222",
        requester_id="user-789",
        request_type="Hold",
        request_date="2026-10-18T09:30:00Z",
        fulfillment_preference="Hold Shelf",
        service_point_id="sp-444",
    ),
    "cancel_request": lambda c, t: c.cancel_request(GATEWAY_URL, TENANT, t, "request-123", "reason-456"),
    "service_point": lambda c, t: c.service_point(GATEWAY_URL, TENANT, t, "sp-444"),
}


@pytest.mark.parametrize("operation", sorted(_OPERATIONS))
@pytest.mark.parametrize("token", [None, "", "   "])
def test_missing_token_raises_before_any_request(recorder, client: GatewayClient, operation: str, token) -> None:
    with pytest.raises(AuthenticationError, match="Authentication token is missing"):
        _OPERATIONS[operation](client, token)

    assert recorder.requests == []


def test_session_token_is_accepted_in_place_of_text(recorder, client: GatewayClient) -> None:
    client.service_point(GATEWAY_URL, TENANT, SessionToken("session-abc"), "sp-444")

    (request,) = recorder.requests
    assert request.headers["x-okapi-token"] == "session-abc"
