"""Reference tables consulted during intake: brand aliases and the price list."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Index, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class BrandAlias(Base):
    __tablename__ = "brand_alias"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    alias: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    standard_brand: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class PriceListEntry(Base):
    __tablename__ = "price_list"
    __table_args__ = (
        Index("ix_price_list_brand_catalog", "brand", "normalized_catalog_number"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    brand: Mapped[str] = mapped_column(String(200), nullable=False)
    catalog_number: Mapped[str] = mapped_column(String(200), nullable=False)
    normalized_catalog_number: Mapped[str] = mapped_column(String(200), nullable=False)
    unit_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str] = mapped_column(String(10), default="USD")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
