from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

from src.client.api_client import ApiResult, SupportApiClient
from src.client.records import build_record
from src.core.validators import application_id_to_str, is_application_type
from src.schemas.application import ApplicationRecord

logger = logging.getLogger("support.client")

DETAIL_UNAVAILABLE_MESSAGE = "Başvuru detayı getirilemedi."
RECORD_NOT_FOUND_MESSAGE = "Başvuru kaydı bulunamadı."
TECHNICAL_ERROR_MESSAGE = (
    "Başvuru detayı alınırken teknik bir hata oluştu. "
    "Lütfen tekrar deneyin veya teknik ekibe iletin."
)

# Raw database driver errors that must not reach operators verbatim.
_TECHNICAL_ERROR_MARKERS = ("invalid input for query argument",)


class ResolutionState(str, enum.Enum):
    LOADING = "loading"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class FallbackRoute:
    list_kind: str
    limit: int = 200
    offset: int = 0


# Types whose by-id lookup upstream is unreliable get a bounded list scan.
FALLBACK_ROUTES: dict[str, FallbackRoute | None] = {
    "dealer_form": FallbackRoute("dealer-forms"),
    "corporate_form": FallbackRoute("corporate-forms"),
    "carrier_application": None,
}


@dataclass(frozen=True)
class Resolution:
    state: ResolutionState
    record: ApplicationRecord | None = None
    error: str | None = None
    used_fallback: bool = False
    generation: int = 0
    stale: bool = False


class DetailLookupFailed(Exception):
    pass


def friendly_error(message: str | None) -> str | None:
    if message and any(marker in message.lower() for marker in _TECHNICAL_ERROR_MARKERS):
        return TECHNICAL_ERROR_MESSAGE
    return message


def unwrap_detail(payload: Any) -> Any:
    """Extract the application object from a detail or list-item payload."""

    value = payload
    if isinstance(payload, dict):
        if payload.get("data"):
            value = payload["data"]
        elif payload.get("result"):
            value = payload["result"]

    # One upstream shape double-wraps the record under data.
    if isinstance(value, dict) and "data" in value and not value.get("id"):
        value = value["data"]
    return value


def _list_items(data: Any) -> list[Any]:
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        return data["data"]
    if isinstance(data, list):
        return data
    return []


class DetailResolver:
    """Resolve one application's detail record, falling back to a list scan.

    Every resolve() call takes a new generation token; only the latest call
    may commit its result to ``current``.
    """

    def __init__(self, client: SupportApiClient, application_type: str, application_id: str) -> None:
        if not is_application_type(application_type):
            raise ValueError(f"unknown application type: {application_type!r}")
        self.client = client
        self.application_type = application_type
        self.application_id = application_id_to_str(application_id)
        self.current = Resolution(ResolutionState.LOADING)
        self._generation = 0

    @property
    def record(self) -> ApplicationRecord | None:
        return self.current.record

    async def resolve(self) -> Resolution:
        self._generation += 1
        token = self._generation
        self.current = Resolution(
            ResolutionState.LOADING,
            record=self.current.record,
            generation=token,
        )

        result = await self._resolve_once(token)

        if token != self._generation:
            logger.info(
                "stale_resolution_dropped type=%s id=%s generation=%s latest=%s",
                self.application_type,
                self.application_id,
                token,
                self._generation,
            )
            return Resolution(
                result.state,
                record=result.record,
                error=result.error,
                used_fallback=result.used_fallback,
                generation=token,
                stale=True,
            )

        self.current = result
        return result

    async def _resolve_once(self, token: int) -> Resolution:
        primary = await self.client.get_detail(self.application_type, self.application_id)
        if primary.ok:
            return Resolution(
                ResolutionState.RESOLVED,
                record=build_record(unwrap_detail(primary.data)),
                generation=token,
            )

        primary_error = primary.message(DETAIL_UNAVAILABLE_MESSAGE)
        route = FALLBACK_ROUTES.get(self.application_type)
        if route is None:
            return self._failed(primary_error, token)

        logger.info(
            "detail_fallback type=%s id=%s primary_status=%s",
            self.application_type,
            self.application_id,
            primary.status_code,
        )
        try:
            found = await self._scan_list(route)
        except DetailLookupFailed:
            return self._failed(RECORD_NOT_FOUND_MESSAGE, token)

        return Resolution(
            ResolutionState.RESOLVED,
            record=build_record(unwrap_detail(found)),
            used_fallback=True,
            generation=token,
        )

    async def _scan_list(self, route: FallbackRoute) -> Any:
        listing: ApiResult = await self.client.list_applications(
            route.list_kind,
            limit=route.limit,
            offset=route.offset,
        )
        if not listing.ok:
            logger.warning(
                "detail_fallback_list_failed kind=%s status=%s message=%s",
                route.list_kind,
                listing.status_code,
                listing.message(DETAIL_UNAVAILABLE_MESSAGE),
            )
            raise DetailLookupFailed(route.list_kind)

        for item in _list_items(listing.data):
            if isinstance(item, dict) and application_id_to_str(item.get("id")) == self.application_id:
                return item
        raise DetailLookupFailed(route.list_kind)

    def _failed(self, message: str, token: int) -> Resolution:
        return Resolution(
            ResolutionState.FAILED,
            error=friendly_error(message) or DETAIL_UNAVAILABLE_MESSAGE,
            generation=token,
        )
