import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.services.upstream import UpstreamTransportError

logger = logging.getLogger("support.api")


class SupportApiError(Exception):
    """A locally produced error, rendered as {"success": false, "message": ...}."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _envelope(request: Request, status_code: int, message: str, **extra) -> JSONResponse:
    request_id = _get_request_id(request)
    payload: dict = {"success": False, "message": message, **extra}
    if request_id:
        payload["request_id"] = request_id

    response = JSONResponse(status_code=status_code, content=payload)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SupportApiError)
    async def support_api_error_handler(request: Request, exc: SupportApiError):
        return _envelope(request, exc.status_code, exc.message)

    @app.exception_handler(UpstreamTransportError)
    async def upstream_transport_error_handler(request: Request, exc: UpstreamTransportError):
        return _envelope(request, exc.status_code, exc.message, retryable=exc.retryable)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _envelope(request, exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _envelope(request, 422, "Geçersiz istek.", detail=exc.errors())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_exception request_id=%s", _get_request_id(request), exc_info=exc)
        return _envelope(request, 500, "Internal Server Error")
