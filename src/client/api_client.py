from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger("support.client")

API_PREFIX = "/api/support/applications"

LIST_KINDS = ("dealer-forms", "corporate-forms", "carrier-applications")


def pick_message(data: Any, fallback: str) -> str:
    """Operator-facing message from an error body, in upstream precedence order."""

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        for key in ("message", "detail", "title"):
            if data.get(key):
                return str(data[key])
    return fallback


@dataclass(frozen=True)
class ApiResult:
    # None when the request never produced an HTTP response.
    status_code: int | None
    data: Any = None

    @property
    def ok(self) -> bool:
        if self.status_code is None or not 200 <= self.status_code < 300:
            return False
        return not (isinstance(self.data, dict) and self.data.get("success") is False)

    def message(self, transport_fallback: str) -> str:
        if self.status_code is None:
            return transport_fallback
        return pick_message(self.data, f"HTTP {self.status_code}")


def _read_json(response: httpx.Response) -> Any:
    text = response.text
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return text


class SupportApiClient:
    """Thin async client for the support applications API.

    Never raises on HTTP or transport failures; callers inspect ApiResult.
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def _request(self, method: str, path: str, **kwargs: Any) -> ApiResult:
        try:
            r = await self._http.request(method, f"{API_PREFIX}{path}", **kwargs)
        except httpx.TransportError as exc:
            logger.warning("request_failed method=%s path=%s error=%s", method, path, exc)
            return ApiResult(status_code=None)
        return ApiResult(status_code=r.status_code, data=_read_json(r))

    async def get_detail(self, application_type: str, application_id: str) -> ApiResult:
        return await self._request(
            "GET",
            f"/{quote(application_type, safe='')}/{quote(str(application_id), safe='')}",
        )

    async def list_applications(
        self,
        kind: str,
        *,
        limit: int = 50,
        offset: int = 0,
        status: str | None = None,
        search: str | None = None,
    ) -> ApiResult:
        if kind not in LIST_KINDS:
            raise ValueError(f"unknown application list: {kind}")

        params: dict[str, str] = {"limit": str(limit), "offset": str(offset)}
        if status:
            params["status"] = status
        if search and search.strip():
            params["search"] = search.strip()
        return await self._request("GET", f"/{kind}", params=params)

    async def submit_review(
        self,
        *,
        application_type: str,
        application_id: str,
        status: str,
        review_notes: str,
        call_duration: str | int,
    ) -> ApiResult:
        return await self._request(
            "POST",
            "/review",
            json={
                "application_type": application_type,
                "application_id": application_id,
                "status": status,
                "review_notes": review_notes,
                "call_duration": call_duration,
            },
        )

    async def add_to_blacklist(
        self,
        *,
        application_type: str,
        application_id: str,
        email: str,
        phone: str,
        name: str,
        reason: str,
    ) -> ApiResult:
        return await self._request(
            "POST",
            "/blacklist",
            json={
                "application_type": application_type,
                "application_id": application_id,
                "email": email,
                "phone": phone,
                "name": name,
                "reason": reason,
            },
        )

    async def check_blacklist(self, *, email: str | None = None, phone: str | None = None) -> ApiResult:
        params = {}
        if email:
            params["email"] = email
        if phone:
            params["phone"] = phone
        return await self._request("GET", "/blacklist/check", params=params)
