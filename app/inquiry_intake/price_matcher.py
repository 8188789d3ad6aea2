"""Exact price-list matching on (brand, normalized catalog number)."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import LookupFailure
from app.models.catalog import PriceListEntry

logger = logging.getLogger("intake.price_matcher")


class PriceListMatcher:
    async def find_entry_id(
        self, db: AsyncSession, brand: str, normalized_catalog: str
    ) -> uuid.UUID | None:
        """Return the id of the price-list entry for this brand and catalog, if any.

        Both keys must match exactly. With duplicate entries the earliest-created
        one wins.
        """
        try:
            result = await db.execute(
                select(PriceListEntry.id)
                .where(
                    PriceListEntry.brand == brand,
                    PriceListEntry.normalized_catalog_number == normalized_catalog,
                )
                .order_by(PriceListEntry.created_at, PriceListEntry.id)
                .limit(1)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Price list lookup failed for %s/%s: %s", brand, normalized_catalog, e)
            raise LookupFailure(f"Price list lookup failed: {e}") from e
