"""
Email-to-quotation intake pipeline.

Flow:
  1. Validate configuration (fails before any network call)
  2. Pull the latest email from the IMAP mailbox
  3. Extract a raw inquiry with Claude
  4. Normalize it into a Draft
  5. Optionally persist inquiry, items, draft quotation and quotation items
"""

import logging
import time
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.exceptions import ConfigurationError
from app.inquiry_intake.normalizers import validate_extraction
from app.inquiry_intake.persistence import PersistenceOrchestrator, SavedInquiry
from app.schemas.inquiry import Draft, RejectedLine
from app.services.claude_service import ClaudeService
from app.services.mail_service import MailMessage, MailService

logger = logging.getLogger("intake.pipeline")


@dataclass
class IntakeResult:
    """Complete result of one intake run."""

    mail: MailMessage
    model: str
    extraction: dict  # AI payload as returned
    draft: Draft
    rejected_lines: list[RejectedLine]
    saved: SavedInquiry | None = None
    processing_time_ms: int = 0


def parse_owner_id(value: str) -> uuid.UUID:
    value = value.strip()
    if not value:
        raise ConfigurationError("Missing OWNER_USER_ID")
    try:
        return uuid.UUID(value)
    except ValueError as e:
        raise ConfigurationError(f"OWNER_USER_ID is not a valid UUID: {value!r}") from e


class InquiryIntakePipeline:
    """Orchestrates mail fetch, extraction, normalization and persistence."""

    def __init__(
        self,
        settings: Settings,
        mail_service: MailService | None = None,
        claude_service: ClaudeService | None = None,
        orchestrator: PersistenceOrchestrator | None = None,
    ):
        self.settings = settings
        self.mail_service = mail_service or MailService(settings)
        self.claude_service = claude_service or ClaudeService(settings)
        self.orchestrator = orchestrator or PersistenceOrchestrator(settings)

    async def run(
        self,
        db: AsyncSession,
        owner_id: uuid.UUID | None = None,
        save: bool = False,
    ) -> IntakeResult:
        """Run one intake pass over the latest email.

        Args:
            db: Session used for alias/price lookups and writes.
            owner_id: Owner of created records; defaults to OWNER_USER_ID.
            save: If False, stop after normalization.

        Returns:
            IntakeResult with the mail, AI payload, draft and saved ids.
        """
        start_time = time.monotonic()

        # Step 1: Configuration
        self.mail_service.check_configured()
        self.claude_service.check_configured()
        if save and owner_id is None:
            owner_id = parse_owner_id(self.settings.owner_user_id)

        # Step 2: Mail
        mail = await self.mail_service.fetch_latest()

        # Step 3: Extraction
        logger.info("Extracting inquiry from message %s", mail.message_id or mail.uid)
        ai = await self.claude_service.extract_inquiry(
            subject=mail.subject, sender=mail.sender, body=mail.text
        )

        # Step 4: Normalization
        draft, rejected = validate_extraction(ai.extraction)
        logger.info(
            "Normalized draft: %d valid lines, %d dropped", len(draft.lines), len(rejected)
        )
        if rejected:
            logger.debug("Dropped lines: %s", [r.model_dump(mode="json") for r in rejected])

        # Step 5: Persistence
        saved = None
        if save:
            saved = await self.orchestrator.persist(db, draft, owner_id)

        elapsed_ms = int((time.monotonic() - start_time) * 1000)

        return IntakeResult(
            mail=mail,
            model=ai.model,
            extraction=ai.payload,
            draft=draft,
            rejected_lines=rejected,
            saved=saved,
            processing_time_ms=elapsed_ms,
        )
