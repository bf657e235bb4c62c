from __future__ import annotations

from typing import Any

from src.core.duration import parse_call_duration_seconds
from src.schemas.review import BlacklistEntry, ReviewSubmission

APPLICATION_TYPES = ("dealer_form", "corporate_form", "carrier_application")
REVIEW_STATUSES = ("pending", "approved", "rejected")

MESSAGES = {
    "invalid_json": "Geçersiz JSON body.",
    "application_type": "Geçersiz başvuru tipi.",
    "application_id": "Geçersiz application_id.",
    "status": "Geçersiz status.",
    "call_duration": "Geçersiz görüşme süresi formatı.",
    "email": "Geçersiz email.",
    "phone": "Geçersiz phone.",
    "name": "Geçersiz name.",
    "reason": "Geçersiz reason.",
    "blacklist_check": "email veya phone parametresi zorunludur.",
}


class ValidationFailed(ValueError):
    """Raised with the operator-facing message of the first failing field."""

    def __init__(self, field: str) -> None:
        self.field = field
        self.message = MESSAGES[field]
        super().__init__(self.message)


def is_application_type(value: Any) -> bool:
    return isinstance(value, str) and value in APPLICATION_TYPES


def is_review_status(value: Any) -> bool:
    return isinstance(value, str) and value in REVIEW_STATUSES


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_non_blank_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_valid_application_id(value: Any) -> bool:
    # Numbers are only type-checked; 0 and negatives pass.
    return is_non_blank_string(value) or _is_number(value)


def application_id_to_str(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_review_notes(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def validate_review_payload(body: Any) -> ReviewSubmission:
    """Validate a review submission in type -> id -> status -> duration order."""

    data = body if isinstance(body, dict) else {}

    application_type = data.get("application_type")
    if not is_application_type(application_type):
        raise ValidationFailed("application_type")

    application_id = data.get("application_id")
    if not is_valid_application_id(application_id):
        raise ValidationFailed("application_id")

    status = data.get("status")
    if not is_review_status(status):
        raise ValidationFailed("status")

    seconds = parse_call_duration_seconds(data.get("call_duration"))
    if seconds is None:
        raise ValidationFailed("call_duration")

    return ReviewSubmission(
        application_type=application_type,
        application_id=application_id_to_str(application_id),
        status=status,
        review_notes=normalize_review_notes(data.get("review_notes")),
        call_duration=seconds,
    )


def validate_blacklist_payload(body: Any) -> BlacklistEntry:
    """Validate a blacklist enrollment in type -> id -> email -> phone -> name -> reason order."""

    data = body if isinstance(body, dict) else {}

    if not is_application_type(data.get("application_type")):
        raise ValidationFailed("application_type")
    if not is_valid_application_id(data.get("application_id")):
        raise ValidationFailed("application_id")

    for field in ("email", "phone", "name", "reason"):
        if not is_non_blank_string(data.get(field)):
            raise ValidationFailed(field)

    return BlacklistEntry(
        application_type=data["application_type"],
        application_id=application_id_to_str(data["application_id"]),
        email=data["email"],
        phone=data["phone"],
        name=data["name"],
        reason=data["reason"],
    )
