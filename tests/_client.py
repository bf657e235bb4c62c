import httpx

from src.main import app


def get_async_client(*, cookies: dict[str, str] | None = None) -> httpx.AsyncClient:
    """Async client bound to the ASGI app (no network)."""

    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
        cookies=cookies,
    )
