import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.api.errors import register_exception_handlers
from src.api.v1.router import router as v1_router
from src.config import settings
from src.services.upstream import UpstreamGateway, build_http_client

logger = logging.getLogger("support.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the upstream HTTP client for the lifetime of the process."""

    client = build_http_client(timeout_seconds=settings.upstream_timeout_seconds)
    app.state.gateway = UpstreamGateway(base_url=settings.upstream_api_base, http_client=client)
    logger.info(
        "upstream_client_ready base_url=%s timeout=%s",
        settings.upstream_api_base,
        settings.upstream_timeout_seconds,
    )
    try:
        yield
    finally:
        await client.aclose()
        app.state.gateway = None
        logger.info("upstream_client_closed")


def create_app() -> FastAPI:
    app = FastAPI(title="Support Applications Review API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Attach a request id to every response and log a compact access line.

        - If the caller provides X-Request-ID, we reuse it.
        - Otherwise we generate a UUID4.
        """

        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "access request_id=%s method=%s path=%s status=%s duration_ms=%.2f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(v1_router, prefix="/api")
    return app


app = create_app()
