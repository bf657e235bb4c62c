from __future__ import annotations

import json
import logging
import math
import re
import time
from collections.abc import MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx
from fastapi.responses import JSONResponse, Response

from src.config import settings

logger = logging.getLogger("support.upstream")

UNAUTHORIZED_MESSAGE = "Yetkisiz: {cookie} çerezi bulunamadı."

QueryParams = Sequence[tuple[str, str]] | MutableMapping[str, str]


class UpstreamTransportError(Exception):
    """The upstream service could not be reached; safe to retry."""

    retryable = True
    status_code = 502
    message = "Üst servise ulaşılamadı. Lütfen tekrar deneyin."


class UpstreamUnavailable(UpstreamTransportError):
    pass


class UpstreamTimeout(UpstreamTransportError):
    status_code = 504
    message = "Üst servis zamanında yanıt vermedi. Lütfen tekrar deneyin."


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    body: Any

    def to_response(self) -> Response:
        if self.status_code in (204, 304):
            return Response(status_code=self.status_code)
        return JSONResponse(status_code=self.status_code, content=self.body)


def require_auth(token: str | None) -> str | None:
    """Map a session token to a bearer credential, or None when there is no session."""

    if not token:
        return None
    return f"Bearer {token}"


def _parse_body(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


# Decimal or exponent notation; no digit separators, "inf" or "nan".
_NUMBER_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$")


def _clamp(raw: str | None, *, default: int, low: int, high: float) -> int:
    if not raw or not _NUMBER_RE.match(raw):
        return default
    value = float(raw)
    if not math.isfinite(value):
        return default
    return int(min(high, max(low, math.floor(value))))


def normalize_paging(params: MutableMapping[str, str]) -> MutableMapping[str, str]:
    """Clamp limit to [1, 200] and offset to [0, inf) in place.

    Only keys whose value actually changes are written, so an absent key that
    resolves to its default stays absent and a second pass is a no-op.
    """

    limit_raw = params.get("limit")
    offset_raw = params.get("offset")

    limit = _clamp(limit_raw, default=50, low=1, high=200)
    offset = _clamp(offset_raw, default=0, low=0, high=math.inf)

    if str(limit) != (limit_raw if limit_raw is not None else "50"):
        params["limit"] = str(limit)
    if str(offset) != (offset_raw if offset_raw is not None else "0"):
        params["offset"] = str(offset)
    return params


class UpstreamGateway:
    """Single egress point toward the upstream platform."""

    def __init__(self, *, base_url: str, http_client: httpx.AsyncClient) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_client

    async def forward(
        self,
        path: str,
        method: str,
        *,
        credential: str | None,
        query: QueryParams | None = None,
        body: Any = None,
    ) -> UpstreamResponse:
        if credential is None:
            message = UNAUTHORIZED_MESSAGE.format(cookie=settings.auth_cookie_name)
            return UpstreamResponse(401, {"success": False, "message": message})

        headers = {
            "Accept": "application/json",
            "Authorization": credential,
        }
        content = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            content = json.dumps(body)

        url = f"{self._base_url}{path}"
        params = list(query.items()) if isinstance(query, MutableMapping) else query

        start = time.perf_counter()
        try:
            r = await self._http.request(
                method,
                url,
                params=params or None,
                headers=headers,
                content=content,
            )
        except httpx.TimeoutException as exc:
            logger.warning("upstream_timeout method=%s path=%s", method, path)
            raise UpstreamTimeout(str(exc)) from exc
        except httpx.TransportError as exc:
            logger.warning("upstream_unavailable method=%s path=%s error=%s", method, path, exc)
            raise UpstreamUnavailable(str(exc)) from exc

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "upstream method=%s path=%s status=%s duration_ms=%.2f",
            method,
            path,
            r.status_code,
            duration_ms,
        )
        return UpstreamResponse(r.status_code, _parse_body(r.text))


def build_http_client(*, timeout_seconds: float | None) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))
