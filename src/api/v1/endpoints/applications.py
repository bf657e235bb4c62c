from __future__ import annotations

import json
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from starlette.datastructures import MultiDict

from src.api.deps import get_credential, get_gateway
from src.api.errors import SupportApiError
from src.core.validators import (
    MESSAGES,
    ValidationFailed,
    is_application_type,
    validate_blacklist_payload,
    validate_review_payload,
)
from src.services.upstream import UpstreamGateway, normalize_paging

UPSTREAM_PREFIX = "/support/applications"

router = APIRouter(prefix="/support/applications", tags=["applications"])


async def _read_json_body(request: Request):
    raw = await request.body()
    try:
        return json.loads(raw)
    except ValueError:
        raise SupportApiError(400, MESSAGES["invalid_json"])


async def _proxy_list(
    request: Request,
    gateway: UpstreamGateway,
    credential: str | None,
    kind: str,
) -> Response:
    # Repeated keys (status=a&status=b) are passed through as-is.
    query = MultiDict(request.query_params.multi_items())
    normalize_paging(query)
    upstream = await gateway.forward(
        f"{UPSTREAM_PREFIX}/{kind}",
        "GET",
        credential=credential,
        query=query.multi_items(),
    )
    return upstream.to_response()


@router.get("/dealer-forms")
async def list_dealer_forms_endpoint(
    request: Request,
    gateway: UpstreamGateway = Depends(get_gateway),
    credential: str | None = Depends(get_credential),
) -> Response:
    return await _proxy_list(request, gateway, credential, "dealer-forms")


@router.get("/corporate-forms")
async def list_corporate_forms_endpoint(
    request: Request,
    gateway: UpstreamGateway = Depends(get_gateway),
    credential: str | None = Depends(get_credential),
) -> Response:
    return await _proxy_list(request, gateway, credential, "corporate-forms")


@router.get("/carrier-applications")
async def list_carrier_applications_endpoint(
    request: Request,
    gateway: UpstreamGateway = Depends(get_gateway),
    credential: str | None = Depends(get_credential),
) -> Response:
    return await _proxy_list(request, gateway, credential, "carrier-applications")


# Registered before the detail route, which would otherwise capture it.
@router.get("/blacklist/check")
async def check_blacklist_endpoint(
    request: Request,
    gateway: UpstreamGateway = Depends(get_gateway),
    credential: str | None = Depends(get_credential),
) -> Response:
    email = (request.query_params.get("email") or "").strip()
    phone = (request.query_params.get("phone") or "").strip()

    if not email and not phone:
        raise SupportApiError(400, MESSAGES["blacklist_check"])

    query = {}
    if email:
        query["email"] = email
    if phone:
        query["phone"] = phone

    upstream = await gateway.forward(
        f"{UPSTREAM_PREFIX}/blacklist/check",
        "GET",
        credential=credential,
        query=query,
    )
    return upstream.to_response()


@router.post("/blacklist")
async def add_to_blacklist_endpoint(
    request: Request,
    gateway: UpstreamGateway = Depends(get_gateway),
    credential: str | None = Depends(get_credential),
) -> Response:
    body = await _read_json_body(request)
    try:
        entry = validate_blacklist_payload(body)
    except ValidationFailed as exc:
        raise SupportApiError(400, exc.message)

    upstream = await gateway.forward(
        f"{UPSTREAM_PREFIX}/blacklist",
        "POST",
        credential=credential,
        body=entry.model_dump(),
    )
    return upstream.to_response()


@router.post("/review")
async def submit_review_endpoint(
    request: Request,
    gateway: UpstreamGateway = Depends(get_gateway),
    credential: str | None = Depends(get_credential),
) -> Response:
    body = await _read_json_body(request)
    try:
        submission = validate_review_payload(body)
    except ValidationFailed as exc:
        raise SupportApiError(400, exc.message)

    upstream = await gateway.forward(
        f"{UPSTREAM_PREFIX}/review",
        "POST",
        credential=credential,
        body=submission.model_dump(),
    )
    return upstream.to_response()


@router.get("/{application_type}/{application_id}")
async def get_application_detail_endpoint(
    application_type: str,
    application_id: str,
    request: Request,
    gateway: UpstreamGateway = Depends(get_gateway),
    credential: str | None = Depends(get_credential),
) -> Response:
    if not is_application_type(application_type):
        raise SupportApiError(400, MESSAGES["application_type"])

    upstream = await gateway.forward(
        f"{UPSTREAM_PREFIX}/{quote(application_type, safe='')}/{quote(application_id, safe='')}",
        "GET",
        credential=credential,
        query=request.query_params.multi_items(),
    )
    return upstream.to_response()
