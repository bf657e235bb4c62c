from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DocumentLink(BaseModel):
    label: str
    url: str


class ReviewInfo(BaseModel):
    status: str | None = None
    notes: str = ""
    call_duration_seconds: int | None = None
    call_duration_formatted: str | None = None
    reviewed_at: str | None = None


class ContactInfo(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""


class ApplicationRecord(BaseModel):
    """Normalized view of an upstream application payload.

    Upstream shapes differ per application type and alias the same field under
    several names; everything past the client boundary reads this model.
    """

    id: str | None = None
    status: str = "pending"

    name: str = ""
    email: str = ""
    phone: str = ""
    city: str | None = None
    created_at: str | None = None

    subject: str | None = None
    message: str | None = None

    vehicle_type: str | None = None
    vehicle_registration_year: str | None = None

    review: ReviewInfo | None = None
    documents: list[DocumentLink] = Field(default_factory=list)

    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def contact(self) -> ContactInfo:
        return ContactInfo(name=self.name, email=self.email, phone=self.phone)
