from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from src.client.api_client import SupportApiClient
from src.client.resolution import DetailResolver, Resolution, ResolutionState
from src.core.duration import format_call_duration, parse_call_duration_seconds
from src.core.validators import MESSAGES, is_review_status
from src.schemas.application import ApplicationRecord

logger = logging.getLogger("support.client")

SAVED_MESSAGE = "Görüşme kaydedildi."
SAVE_FAILED_MESSAGE = "Görüşme kaydedilemedi."


class ReviewState(str, enum.Enum):
    IDLE = "idle"
    SAVING = "saving"


@dataclass
class ReviewForm:
    status: str = "pending"
    review_notes: str = ""
    # Display form, as typed by the operator.
    call_duration: str = "0:00"


@dataclass(frozen=True)
class ReviewOutcome:
    success: bool
    message: str
    resolution: Resolution | None = None


class ReviewWorkflow:
    """Drive the pending -> approved/rejected transition for one application."""

    def __init__(self, client: SupportApiClient, resolver: DetailResolver) -> None:
        self.client = client
        self.resolver = resolver
        self.form = ReviewForm()
        self.state = ReviewState.IDLE
        self.last_message: str | None = None

    def load_from(self, record: ApplicationRecord | None) -> None:
        """Seed the form from the authoritative record."""

        if record is None:
            return
        review = record.review

        if is_review_status(record.status):
            self.form.status = record.status
        self.form.review_notes = review.notes if review is not None else ""

        duration = "0:00"
        if review is not None:
            if review.call_duration_formatted:
                duration = review.call_duration_formatted
            elif review.call_duration_seconds is not None and review.call_duration_seconds >= 0:
                duration = format_call_duration(review.call_duration_seconds)
        self.form.call_duration = duration

    async def submit(self) -> ReviewOutcome:
        if self.state is ReviewState.SAVING:
            return ReviewOutcome(False, SAVE_FAILED_MESSAGE)

        seconds = parse_call_duration_seconds(self.form.call_duration)
        if seconds is None:
            return self._finish(ReviewOutcome(False, MESSAGES["call_duration"]))

        self.state = ReviewState.SAVING
        try:
            result = await self.client.submit_review(
                application_type=self.resolver.application_type,
                application_id=self.resolver.application_id,
                status=self.form.status,
                review_notes=self.form.review_notes,
                call_duration=self.form.call_duration,
            )
            if not result.ok:
                return self._finish(ReviewOutcome(False, result.message(SAVE_FAILED_MESSAGE)))

            logger.info(
                "review_saved type=%s id=%s status=%s call_duration=%s",
                self.resolver.application_type,
                self.resolver.application_id,
                self.form.status,
                seconds,
            )
            resolution = await self.resolver.resolve()
            if resolution.state is ResolutionState.RESOLVED and not resolution.stale:
                self.load_from(resolution.record)
            # The submitted canonical value wins over the re-fetched display field.
            self.form.call_duration = format_call_duration(seconds)
            return self._finish(ReviewOutcome(True, SAVED_MESSAGE, resolution=resolution))
        finally:
            self.state = ReviewState.IDLE

    def _finish(self, outcome: ReviewOutcome) -> ReviewOutcome:
        self.last_message = outcome.message
        return outcome
