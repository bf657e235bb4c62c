from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

ApplicationType = Literal["dealer_form", "corporate_form", "carrier_application"]
ReviewStatus = Literal["pending", "approved", "rejected"]


class ReviewSubmission(BaseModel):
    """Body forwarded upstream for a review transition."""

    application_type: ApplicationType
    application_id: str
    status: ReviewStatus
    review_notes: str = ""
    # Canonical seconds, never the display form.
    call_duration: int


class BlacklistEntry(BaseModel):
    application_type: ApplicationType
    application_id: str
    email: str
    phone: str
    name: str
    reason: str
