import enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DraftLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    brand_input: str = Field(..., min_length=1, description="Brand as typed, upper-cased")
    catalog_upper: str = Field(..., min_length=1, description="Catalog number as typed, upper-cased")
    normalized_catalog: str = Field(..., description="Catalog number used for price matching")
    quantity: int = Field(..., gt=0)


class Draft(BaseModel):
    """Canonical inquiry extracted from one email, ready for persistence."""

    model_config = ConfigDict(frozen=True)

    customer_name: str = ""
    customer_country: str = ""
    billing_address: str | None = None
    contact_person: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    delivery_company_name: str | None = None
    delivery_address: str | None = None
    delivery_contact_person: str | None = None
    delivery_phone: str | None = None
    delivery_email: str | None = None
    lines: tuple[DraftLine, ...] = ()


class RejectionReason(str, enum.Enum):
    NOT_AN_OBJECT = "not_an_object"
    MISSING_BRAND = "missing_brand"
    MISSING_CATALOG_NUMBER = "missing_catalog_number"
    INVALID_QUANTITY = "invalid_quantity"


class RejectedLine(BaseModel):
    index: int = Field(..., description="Position in the extracted items list")
    reasons: list[RejectionReason]


class SavedInquiryResponse(BaseModel):
    inquiry_id: UUID
    quotation_id: UUID
    inquiry_item_ids: list[UUID] = []
    quotation_item_ids: list[UUID] = []
    matched_count: int = 0
