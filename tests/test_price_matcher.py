"""Tests for exact price-list matching."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from app.exceptions import LookupFailure
from app.inquiry_intake.price_matcher import PriceListMatcher
from app.models.catalog import PriceListEntry


class TestPriceListMatcher:
    async def test_exact_brand_and_catalog_match(self, db_session):
        entry = PriceListEntry(
            id=uuid.uuid4(), brand="ABC CORP", catalog_number="XY-100", normalized_catalog_number="XY100"
        )
        db_session.add(entry)
        await db_session.commit()

        matcher = PriceListMatcher()
        assert await matcher.find_entry_id(db_session, "ABC CORP", "XY100") == entry.id
        assert await matcher.find_entry_id(db_session, "ABC CO", "XY100") is None
        assert await matcher.find_entry_id(db_session, "ABC CORP", "XY-100") is None

    async def test_duplicate_entries_earliest_wins(self, db_session):
        now = datetime.now(timezone.utc)
        older = PriceListEntry(
            id=uuid.uuid4(), brand="Z", catalog_number="1", normalized_catalog_number="1",
            created_at=now - timedelta(hours=1),
        )
        newer = PriceListEntry(
            id=uuid.uuid4(), brand="Z", catalog_number="1", normalized_catalog_number="1", created_at=now,
        )
        db_session.add_all([newer, older])
        await db_session.commit()

        assert await PriceListMatcher().find_entry_id(db_session, "Z", "1") == older.id

    async def test_store_error_raises_lookup_failure(self):
        db = AsyncMock()
        db.execute.side_effect = OperationalError("SELECT", {}, Exception("timeout"))

        with pytest.raises(LookupFailure, match="Price list lookup failed"):
            await PriceListMatcher().find_entry_id(db, "Z", "1")
