"""Brand alias resolution against the ``brand_alias`` table."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import LookupFailure
from app.inquiry_intake.normalizers import coerce_text
from app.models.catalog import BrandAlias

logger = logging.getLogger("intake.brand_resolver")


class BrandResolver:
    """Maps a free-text brand to its canonical spelling."""

    async def resolve(self, db: AsyncSession, brand_input_upper: str) -> str:
        """Return the standard brand for an alias, or the input when none is known.

        Duplicate aliases resolve to the earliest-created row. Database errors
        raise LookupFailure rather than reading as "no alias".
        """
        try:
            result = await db.execute(
                select(BrandAlias.standard_brand)
                .where(BrandAlias.alias == brand_input_upper)
                .order_by(BrandAlias.created_at, BrandAlias.id)
                .limit(1)
            )
            standard_brand = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Brand alias lookup failed for %r: %s", brand_input_upper, e)
            raise LookupFailure(f"Brand alias lookup failed: {e}") from e

        if standard_brand is None:
            return brand_input_upper
        return coerce_text(standard_brand, brand_input_upper).upper()
