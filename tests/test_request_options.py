from __future__ import annotations

import httpx

from folio_edge.domain.circulation import RequestMethod
from folio_edge.domain.outcome import Failure, Success
from folio_edge.gateway import POLICY_NOT_RESOLVED, SENTINEL_FAILURE_CODE, GatewayClient

GATEWAY_URL = "https://folio.example.com"
TENANT = "test_tenant"
TOKEN = "test_token"

_RULES_PATH = "/circulation/rules/request-policy"
_POLICY_ID = "policy-123"
_POLICY_PATH = f"/request-policy-storage/request-policies/{_POLICY_ID}"


def _options(client: GatewayClient):
    return client.request_options(
        GATEWAY_URL,
        TENANT,
        TOKEN,
        "patron-group",
        "material-type",
        "loan-type",
        "location-id",
    )


def test_both_lookups_succeed(recorder, client: GatewayClient) -> None:
    recorder.route("GET", _RULES_PATH, httpx.Response(200, json={"requestPolicyId": _POLICY_ID}))
    recorder.route("GET", _POLICY_PATH, httpx.Response(200, json={"requestTypes": ["Hold", "Recall", "Page"]}))

    outcome = _options(client)

    assert outcome == Success(
        frozenset({RequestMethod.HOLD, RequestMethod.RECALL, RequestMethod.L2L}),
        200,
    )
    rules_request = recorder.calls("GET", _RULES_PATH)[0]
    assert dict(rules_request.url.params) == {
        "item_type_id": "material-type",
        "loan_type_id": "loan-type",
        "patron_type_id": "patron-group",
        "location_id": "location-id",
    }


def test_rules_failure_never_reaches_policy_lookup(recorder, client: GatewayClient) -> None:
    recorder.route("GET", _RULES_PATH, httpx.Response(404, text="Not found"))
    recorder.route("GET", _POLICY_PATH, httpx.Response(200, json={"requestTypes": ["Hold"]}))

    outcome = _options(client)

    assert outcome == Failure(404, "Not found")
    assert outcome.payload_or(frozenset()) == frozenset()
    assert recorder.calls("GET", _POLICY_PATH) == []


def test_policy_failure_carries_second_status(recorder, client: GatewayClient) -> None:
    recorder.route("GET", _RULES_PATH, httpx.Response(200, json={"requestPolicyId": _POLICY_ID}))
    recorder.route("GET", _POLICY_PATH, httpx.Response(500, text="Internal error"))

    outcome = _options(client)

    assert outcome == Failure(500, "Internal error")
    assert outcome.payload_or(frozenset()) == frozenset()


def test_null_request_types_yield_empty_set(recorder, client: GatewayClient) -> None:
    recorder.route("GET", _RULES_PATH, httpx.Response(200, json={"requestPolicyId": _POLICY_ID}))
    recorder.route("GET", _POLICY_PATH, httpx.Response(200, json={"requestTypes": None}))

    outcome = _options(client)

    assert outcome == Success(frozenset(), 200)


def test_absent_request_types_yield_empty_set(recorder, client: GatewayClient) -> None:
    recorder.route("GET", _RULES_PATH, httpx.Response(200, json={"requestPolicyId": _POLICY_ID}))
    recorder.route("GET", _POLICY_PATH, httpx.Response(200, json={"id": _POLICY_ID, "name": "Default"}))

    outcome = _options(client)

    assert outcome == Success(frozenset(), 200)


def test_unknown_request_types_are_dropped(recorder, client: GatewayClient) -> None:
    recorder.route("GET", _RULES_PATH, httpx.Response(200, json={"requestPolicyId": _POLICY_ID}))
    recorder.route("GET", _POLICY_PATH, httpx.Response(200, json={"requestTypes": ["Hold", "Teleport"]}))

    outcome = _options(client)

    assert outcome == Success(frozenset({RequestMethod.HOLD}), 200)


def test_rules_without_policy_id_stop_before_policy_lookup(recorder, client: GatewayClient) -> None:
    recorder.route("GET", _RULES_PATH, httpx.Response(200, json={}))

    outcome = _options(client)

    assert outcome == Failure(SENTINEL_FAILURE_CODE, POLICY_NOT_RESOLVED)
    assert len(recorder.requests) == 1


def test_policy_transport_failure_is_normalized(recorder, client: GatewayClient) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    recorder.route("GET", _RULES_PATH, httpx.Response(200, json={"requestPolicyId": _POLICY_ID}))
    recorder.route("GET", _POLICY_PATH, refuse)

    outcome = _options(client)

    assert outcome == Failure(None, "Network error: ConnectError - connection refused")
    assert [r.url.path for r in recorder.requests] == [_RULES_PATH, _POLICY_PATH]


def test_undecodable_policy_body_is_a_bad_gateway(recorder, client: GatewayClient) -> None:
    recorder.route("GET", _RULES_PATH, httpx.Response(200, json={"requestPolicyId": _POLICY_ID}))
    recorder.route("GET", _POLICY_PATH, httpx.Response(200, text="<html>maintenance</html>"))

    outcome = _options(client)

    assert outcome == Failure(502, "<html>maintenance</html>")
