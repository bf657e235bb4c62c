from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Request

from src.config import settings
from src.services.upstream import UpstreamGateway, build_http_client, require_auth


def get_credential(request: Request) -> str | None:
    """Bearer credential from the operator's session cookie, read per request."""

    return require_auth(request.cookies.get(settings.auth_cookie_name))


async def get_gateway(request: Request) -> AsyncIterator[UpstreamGateway]:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is not None:
        yield gateway
        return

    # Lifespan did not run (e.g. TestClient used without a context manager):
    # the client lives for this request only.
    client = build_http_client(timeout_seconds=settings.upstream_timeout_seconds)
    try:
        yield UpstreamGateway(base_url=settings.upstream_api_base, http_client=client)
    finally:
        await client.aclose()
