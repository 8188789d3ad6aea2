"""Shape of the AI extraction payload, before any normalization.

Leaves are deliberately ``Any``: the model may return numbers, booleans or
nulls where text is expected. Only the envelope is enforced here; typing of
individual values happens in ``app.inquiry_intake.normalizers``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RawCustomer(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Any = Field(None, description="Customer company name")
    country: Any = Field(None, description="Customer country")
    billing_address: Any = Field(None, description="Billing address")
    contact_person: Any = Field(None, description="Contact person name")
    contact_phone: Any = Field(None, description="Contact phone number")
    contact_email: Any = Field(None, description="Contact email address")


class RawDelivery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    company_name: Any = Field(None, description="Receiving company name")
    address: Any = Field(None, description="Delivery address")
    contact_person: Any = Field(None, description="Recipient name")
    phone: Any = Field(None, description="Recipient phone number")
    email: Any = Field(None, description="Recipient email address")


class RawExtraction(BaseModel):
    """Unvalidated inquiry extraction returned by the AI service."""

    model_config = ConfigDict(extra="forbid")

    customer: RawCustomer | None = None
    delivery: RawDelivery | None = None
    # Items stay untyped so one malformed entry drops that line, not the payload
    items: list[Any] | None = None
