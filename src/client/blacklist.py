from __future__ import annotations

import enum
import logging

from src.client.api_client import ApiResult, SupportApiClient
from src.client.records import extract_contact
from src.client.resolution import DetailResolver
from src.core.validators import is_non_blank_string

logger = logging.getLogger("support.client")

ADD_FAILED_MESSAGE = "Kara listeye eklenemedi."
CHECK_FAILED_MESSAGE = "Kara liste sorgulanamadı."


class BlacklistPhase(str, enum.Enum):
    EDITING = "editing"
    CONFIRMING = "confirming"
    SUBMITTING = "submitting"


class BlacklistWorkflow:
    """Propose-then-confirm enrollment; upstream offers no undo."""

    def __init__(self, client: SupportApiClient, resolver: DetailResolver) -> None:
        self.client = client
        self.resolver = resolver
        self.reason = ""
        self.phase = BlacklistPhase.EDITING
        self.error: str | None = None

    def _entry_complete(self) -> bool:
        if not is_non_blank_string(self.reason):
            return False
        contact = extract_contact(self.resolver.record)
        return all(is_non_blank_string(v) for v in (contact.name, contact.email, contact.phone))

    @property
    def can_propose(self) -> bool:
        return self.phase is BlacklistPhase.EDITING and self._entry_complete()

    def propose(self) -> bool:
        if not self.can_propose:
            return False
        self.phase = BlacklistPhase.CONFIRMING
        return True

    def cancel(self) -> None:
        if self.phase is BlacklistPhase.CONFIRMING:
            self.phase = BlacklistPhase.EDITING

    async def confirm(self) -> bool:
        if self.phase is not BlacklistPhase.CONFIRMING:
            return False
        # Reason or record may have changed since propose().
        if not self._entry_complete():
            self.phase = BlacklistPhase.EDITING
            return False

        self.phase = BlacklistPhase.SUBMITTING
        self.error = None
        contact = extract_contact(self.resolver.record)
        try:
            result = await self.client.add_to_blacklist(
                application_type=self.resolver.application_type,
                application_id=self.resolver.application_id,
                email=contact.email,
                phone=contact.phone,
                name=contact.name,
                reason=self.reason,
            )
        finally:
            self.phase = BlacklistPhase.EDITING

        if not result.ok:
            self.error = result.message(ADD_FAILED_MESSAGE)
            return False

        logger.info(
            "blacklist_added type=%s id=%s",
            self.resolver.application_type,
            self.resolver.application_id,
        )
        self.reason = ""
        return True

    async def check(self, *, email: str | None = None, phone: str | None = None) -> ApiResult:
        return await self.client.check_blacklist(email=email, phone=phone)
