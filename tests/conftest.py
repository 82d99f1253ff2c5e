from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
import pytest

from folio_edge.gateway import GatewayClient

GATEWAY_URL = "https://folio.example.com"
TENANT = "test_tenant"
TOKEN = "test_token"

Handler = Callable[[httpx.Request], httpx.Response]


@dataclass
class RecordingGateway:
    """Routes requests by (method, path) and keeps every request it saw."""

    routes: dict[tuple[str, str], Handler] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def route(self, method: str, path: str, handler: Handler | httpx.Response) -> None:
        if isinstance(handler, httpx.Response):
            response = handler
            self.routes[(method, path)] = lambda request: response
        else:
            self.routes[(method, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, text=f"no route for {request.method} {request.url.path}")
        return handler(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def recorder() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def client(recorder: RecordingGateway) -> GatewayClient:
    return GatewayClient(transport=recorder.transport)
