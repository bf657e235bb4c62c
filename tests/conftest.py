from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.deps import get_gateway
from src.client.api_client import SupportApiClient
from src.main import app
from src.services.upstream import UpstreamGateway

UPSTREAM_BASE = "http://upstream.test"


class FakeUpstream:
    """Stand-in for the upstream platform; records every request it receives."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], tuple[int, Any, str | None]] = {}
        self.error: Exception | None = None

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json_body: Any = None,
        text: str | None = None,
    ) -> None:
        self._routes[(method, path)] = (status, json_body, text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error

        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"success": False, "message": "Not found"})

        status, json_body, text = route
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=json_body)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def gateway(upstream: FakeUpstream) -> UpstreamGateway:
    return UpstreamGateway(
        base_url=UPSTREAM_BASE,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)),
    )


@pytest.fixture()
def override_gateway(gateway: UpstreamGateway):
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield gateway
    app.dependency_overrides.pop(get_gateway, None)


@pytest.fixture()
def client(override_gateway) -> TestClient:
    """Operator session with a valid auth cookie."""

    return TestClient(app, cookies={"auth_token": "operator-token"})


@pytest.fixture()
def anonymous_client(override_gateway) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def api() -> FakeUpstream:
    """Stand-in for this service's own API, for client-side tests."""

    return FakeUpstream()


@pytest.fixture()
def support_client(api: FakeUpstream) -> SupportApiClient:
    return SupportApiClient(
        httpx.AsyncClient(transport=httpx.MockTransport(api.handler), base_url="http://testserver")
    )
