from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from src.core.validators import REVIEW_STATUSES, application_id_to_str
from src.schemas.application import ApplicationRecord, ContactInfo, DocumentLink, ReviewInfo

FieldAliases = Iterable[tuple[str, tuple[str, ...]]]

# (canonical field, alias paths); dotted paths reach into nested objects.
FIELD_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("id", ("id",)),
    ("status", ("status", "review.status")),
    ("name", ("name",)),
    ("first_name", ("firstName", "first_name")),
    ("last_name", ("lastName", "last_name")),
    ("email", ("email",)),
    ("phone", ("phone", "phoneNumber", "phone_number")),
    ("city", ("city",)),
    ("created_at", ("createdAt", "created_at")),
    ("subject", ("subject",)),
    ("message", ("message",)),
    ("vehicle_type", ("vehicleType", "vehicle_type")),
    ("vehicle_registration_year", ("vehicleRegistrationYear", "vehicle_registration_year")),
)

REVIEW_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("status", ("review.status",)),
    ("notes", ("review.reviewNotes", "review.review_notes", "reviewNotes", "review_notes")),
    (
        "call_duration_formatted",
        (
            "review.callDurationFormatted",
            "review.call_duration_formatted",
            "callDurationFormatted",
            "call_duration_formatted",
        ),
    ),
    ("call_duration_seconds", ("review.callDuration", "review.call_duration", "callDuration", "call_duration")),
    ("reviewed_at", ("review.reviewedAt", "review.reviewed_at")),
)

STATUS_LABELS = {
    "pending": "Beklemede",
    "approved": "Onaylandı",
    "rejected": "Reddedildi",
}

APPLICATION_TYPE_LABELS = {
    "dealer_form": "Bayi Başvurusu",
    "corporate_form": "Kurumsal Başvuru",
    "carrier_application": "Taşıyıcı Başvurusu",
}

VEHICLE_TYPE_LABELS = {
    "motorcycle": "Motosiklet",
    "minivan": "Minivan",
    "panelvan": "Panelvan",
    "pickup": "Kamyonet",
    "truck": "Kamyon",
}

_KNOWN_DOCUMENTS = (
    ("Araç Belgeleri", ("vehicleDocumentsUrl", "vehicle_documents_url")),
    ("Taşıyıcı Belgeleri", ("carrierDocumentsUrl", "carrier_documents_url")),
)

_HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


def _lookup(raw: Mapping[str, Any], path: str) -> Any:
    value: Any = raw
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def reconcile(raw: Mapping[str, Any], aliases: FieldAliases) -> dict[str, Any]:
    """Pick the first present value for each canonical field from its aliases."""

    out: dict[str, Any] = {}
    for field, paths in aliases:
        out[field] = None
        for path in paths:
            value = _lookup(raw, path)
            if _present(value):
                out[field] = value
                break
    return out


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _optional_text(value: Any) -> str | None:
    text = _text(value)
    return text or None


def translate_vehicle_type(value: str | None) -> str:
    if not value:
        return "-"
    return VEHICLE_TYPE_LABELS.get(value.strip().lower(), value)


def _document_label(key: str) -> str:
    pretty = re.sub(r"Url$", "", key, flags=re.IGNORECASE)
    pretty = re.sub(r"_url$", "", pretty, flags=re.IGNORECASE)
    pretty = re.sub(r"[_\-]", " ", pretty)
    pretty = re.sub(r"([a-z])([A-Z])", r"\1 \2", pretty).strip()
    if not pretty:
        return "Belge"
    return pretty[0].upper() + pretty[1:]


def extract_documents(raw: Mapping[str, Any]) -> list[DocumentLink]:
    documents: list[DocumentLink] = []

    for label, keys in _KNOWN_DOCUMENTS:
        for key in keys:
            if raw.get(key):
                documents.append(DocumentLink(label=label, url=str(raw[key])))
                break

    seen = {d.url for d in documents}
    for key, value in raw.items():
        if not isinstance(value, str):
            continue
        url = value.strip()
        if not _HTTP_URL_RE.match(url) or url in seen:
            continue
        documents.append(DocumentLink(label=_document_label(key), url=url))
        seen.add(url)

    return documents


def _normalize_status(value: Any) -> str:
    status = _text(value).lower()
    return status if status in REVIEW_STATUSES else "pending"


def _review_info(raw: Mapping[str, Any]) -> ReviewInfo | None:
    fields = reconcile(raw, REVIEW_ALIASES)
    if not isinstance(raw.get("review"), Mapping) and all(v is None for v in fields.values()):
        return None

    seconds = fields["call_duration_seconds"]
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        seconds = None

    return ReviewInfo(
        status=_optional_text(fields["status"]),
        notes=str(fields["notes"]) if fields["notes"] is not None else "",
        call_duration_seconds=int(seconds) if seconds is not None else None,
        call_duration_formatted=_optional_text(fields["call_duration_formatted"]),
        reviewed_at=_optional_text(fields["reviewed_at"]),
    )


def build_record(raw: Any) -> ApplicationRecord:
    """Reconcile a loosely shaped upstream payload into an ApplicationRecord."""

    if not isinstance(raw, Mapping):
        return ApplicationRecord()

    fields = reconcile(raw, FIELD_ALIASES)

    name = _text(fields["name"])
    if not name:
        name = f"{_text(fields['first_name'])} {_text(fields['last_name'])}".strip()

    return ApplicationRecord(
        id=application_id_to_str(fields["id"]) if fields["id"] is not None else None,
        status=_normalize_status(fields["status"]),
        name=name,
        email=_text(fields["email"]),
        phone=_text(fields["phone"]),
        city=_optional_text(fields["city"]),
        created_at=_optional_text(fields["created_at"]),
        subject=_optional_text(fields["subject"]),
        message=_optional_text(fields["message"]),
        vehicle_type=_optional_text(fields["vehicle_type"]),
        vehicle_registration_year=_optional_text(fields["vehicle_registration_year"]),
        review=_review_info(raw),
        documents=extract_documents(raw),
        raw=dict(raw),
    )


def extract_contact(record: ApplicationRecord | Mapping[str, Any] | None) -> ContactInfo:
    """Best-effort name/email/phone for the blacklist workflow."""

    if record is None:
        return ContactInfo()
    if not isinstance(record, ApplicationRecord):
        record = build_record(record)
    return record.contact
