"""ORM models for customer inquiries and their line items."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class InquiryStatus(str, enum.Enum):
    DRAFT = "draft"


class Inquiry(Base, TimestampMixin):
    __tablename__ = "inquiries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    status: Mapped[InquiryStatus] = mapped_column(
        SAEnum(
            InquiryStatus,
            name="inquiry_status",
            values_callable=lambda e: [member.value for member in e],
        ),
        default=InquiryStatus.DRAFT,
        nullable=False,
    )
    customer_name: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    customer_country: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    billing_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(200), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(100), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    items: Mapped[list["InquiryItem"]] = relationship(
        back_populates="inquiry", cascade="all, delete-orphan"
    )


class InquiryItem(Base):
    __tablename__ = "inquiry_items"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    inquiry_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("inquiries.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    brand: Mapped[str] = mapped_column(String(200), nullable=False)
    catalog_number: Mapped[str] = mapped_column(String(200), nullable=False)
    normalized_catalog_number: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    inquiry: Mapped["Inquiry"] = relationship(back_populates="items")
