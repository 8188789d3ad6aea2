"""
Persistence chain for a normalized inquiry draft.

Writes, in strict order and each as its own committed round trip:
  1. Inquiry (status draft)
  2. One InquiryItem per draft line, brand resolved through the alias table
  3. Quotation (status draft) with the shipment block in template_meta
  4. One QuotationItem per inquiry item, matched against the price list

There is no transaction spanning the chain. A failure after step 1 leaves the
earlier rows committed and is reported as a partial write, unless
``compensate_partial_writes`` is enabled, in which case the committed rows are
deleted again in reverse order before the failure is raised.
"""

import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.exceptions import UpstreamFailure, ValidationFailure, WrittenRecord
from app.inquiry_intake.brand_resolver import BrandResolver
from app.inquiry_intake.price_matcher import PriceListMatcher
from app.models.base import Base
from app.models.inquiry import Inquiry, InquiryItem, InquiryStatus
from app.models.quotation import MatchStatus, Quotation, QuotationItem, QuotationStatus
from app.schemas.inquiry import Draft, DraftLine

logger = logging.getLogger("intake.persistence")


@dataclass
class SavedInquiry:
    """Identifiers of a fully written inquiry graph."""

    inquiry_id: uuid.UUID
    quotation_id: uuid.UUID
    inquiry_item_ids: list[uuid.UUID] = field(default_factory=list)
    quotation_item_ids: list[uuid.UUID] = field(default_factory=list)
    matched_count: int = 0


@dataclass
class _SavedLine:
    item_id: uuid.UUID
    line: DraftLine
    brand_standard: str


@dataclass(frozen=True)
class _Committed:
    model: type[Base]
    id: uuid.UUID


def build_template_meta(draft: Draft) -> dict[str, str]:
    return {
        "shipment_company_name": draft.delivery_company_name or "",
        "shipment_address": draft.delivery_address or "",
        "shipment_recipient": draft.delivery_contact_person or "",
        "shipment_phone": draft.delivery_phone or "",
        "shipment_email": draft.delivery_email or "",
    }


class PersistenceOrchestrator:
    """Writes the inquiry → quotation record graph for one draft."""

    def __init__(
        self,
        settings: Settings,
        brand_resolver: BrandResolver | None = None,
        price_matcher: PriceListMatcher | None = None,
    ):
        self.compensate_partial_writes = settings.compensate_partial_writes
        self.brand_resolver = brand_resolver or BrandResolver()
        self.price_matcher = price_matcher or PriceListMatcher()

    async def persist(self, db: AsyncSession, draft: Draft, owner_id: uuid.UUID) -> SavedInquiry:
        """Persist a draft and return the identifiers of everything written.

        Raises:
            ValidationFailure: the draft has no lines; nothing is written.
            UpstreamFailure: a write or lookup failed. ``partial_write`` is set
                when the inquiry row had already been committed.
        """
        if not draft.lines:
            raise ValidationFailure("No valid lines to save.")

        written: list[_Committed] = []

        inquiry = Inquiry(
            id=uuid.uuid4(),
            user_id=owner_id,
            status=InquiryStatus.DRAFT,
            customer_name=draft.customer_name,
            customer_country=draft.customer_country,
            billing_address=draft.billing_address,
            contact_person=draft.contact_person,
            contact_phone=draft.contact_phone,
            contact_email=draft.contact_email,
        )
        await self._write(db, inquiry, written, "Create inquiry failed")
        logger.info("Created inquiry %s with %d lines", inquiry.id, len(draft.lines))

        try:
            return await self._write_remaining(db, draft, owner_id, inquiry, written)
        except UpstreamFailure as e:
            raise await self._partial_write_failure(db, written, e) from e

    async def _write_remaining(
        self,
        db: AsyncSession,
        draft: Draft,
        owner_id: uuid.UUID,
        inquiry: Inquiry,
        written: list[_Committed],
    ) -> SavedInquiry:
        saved_lines: list[_SavedLine] = []
        for line in draft.lines:
            brand_standard = await self.brand_resolver.resolve(db, line.brand_input)
            item = InquiryItem(
                id=uuid.uuid4(),
                inquiry_id=inquiry.id,
                user_id=owner_id,
                brand=brand_standard,
                catalog_number=line.catalog_upper,
                normalized_catalog_number=line.normalized_catalog,
                quantity=line.quantity,
            )
            await self._write(db, item, written, "Create inquiry item failed")
            saved_lines.append(_SavedLine(item_id=item.id, line=line, brand_standard=brand_standard))

        quotation = Quotation(
            id=uuid.uuid4(),
            inquiry_id=inquiry.id,
            user_id=owner_id,
            status=QuotationStatus.DRAFT,
            template_meta=build_template_meta(draft),
        )
        await self._write(db, quotation, written, "Create quotation failed")

        saved = SavedInquiry(inquiry_id=inquiry.id, quotation_id=quotation.id)
        for saved_line in saved_lines:
            line = saved_line.line
            price_list_id = await self.price_matcher.find_entry_id(
                db, saved_line.brand_standard, line.normalized_catalog
            )
            quotation_item = QuotationItem(
                id=uuid.uuid4(),
                quotation_id=quotation.id,
                inquiry_item_id=saved_line.item_id,
                user_id=owner_id,
                brand=saved_line.brand_standard,
                catalog_number=line.catalog_upper,
                normalized_catalog_number=line.normalized_catalog,
                quantity=line.quantity,
                price_list_id=price_list_id,
                match_status=MatchStatus.MATCHED if price_list_id else MatchStatus.NOT_FOUND,
                brand_input=line.brand_input,
                brand_standard=saved_line.brand_standard,
            )
            await self._write(db, quotation_item, written, "Create quotation item failed")
            saved.inquiry_item_ids.append(saved_line.item_id)
            saved.quotation_item_ids.append(quotation_item.id)
            if price_list_id:
                saved.matched_count += 1

        logger.info(
            "Created quotation %s for inquiry %s (%d/%d lines matched)",
            quotation.id, inquiry.id, saved.matched_count, len(saved_lines),
        )
        return saved

    async def _write(
        self,
        db: AsyncSession,
        row: Base,
        written: list[_Committed],
        failure_message: str,
    ) -> None:
        """Insert and commit one row; one store round trip per call.

        The row's key is captured before the commit. A failed commit rolls
        back and expires every instance in the session, so nothing after
        this point reads ORM attributes.
        """
        committed = _Committed(model=type(row), id=row.id)
        db.add(row)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise UpstreamFailure(f"{failure_message}: {e}") from e
        written.append(committed)

    async def _partial_write_failure(
        self, db: AsyncSession, written: list[_Committed], error: UpstreamFailure
    ) -> UpstreamFailure:
        records = [WrittenRecord(table=c.model.__tablename__, id=str(c.id)) for c in written]
        await db.rollback()
        compensated = False
        if self.compensate_partial_writes:
            compensated = await self._compensate(db, written)

        logger.error(
            "Persistence aborted after %d committed writes (compensated=%s): %s; committed=%s",
            len(records), compensated, error.message, [(r.table, r.id) for r in records],
        )
        return UpstreamFailure(
            error.message,
            error.code,
            partial_write=True,
            compensated=compensated,
            committed=records,
        )

    async def _compensate(self, db: AsyncSession, written: list[_Committed]) -> bool:
        """Delete committed rows newest first. Returns False if any delete fails."""
        for committed in reversed(written):
            model = committed.model
            try:
                await db.execute(delete(model).where(model.id == committed.id))
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(
                    "Compensating delete of %s %s failed: %s", model.__tablename__, committed.id, e
                )
                return False
        return True
