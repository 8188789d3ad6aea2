from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.schemas.inquiry import Draft, SavedInquiryResponse


class IntakeRequest(BaseModel):
    save: bool = Field(False, description="Persist the inquiry and draft quotation")


class MailSummary(BaseModel):
    uid: int | None = None
    message_id: str
    subject: str
    subject_norm: str
    sender: str
    sent_at: datetime
    text_preview: str


class AiSummary(BaseModel):
    model: str
    json_payload: dict[str, Any] = Field(..., alias="json", serialization_alias="json")

    model_config = {"populate_by_name": True}


class IntakeResponse(BaseModel):
    ok: bool = True
    save: bool
    mail: MailSummary
    ai: AiSummary
    transformed: Draft
    saved: SavedInquiryResponse | None = None
    processing_time_ms: int = 0


class CommittedRecord(BaseModel):
    table: str
    id: str


class FailureDetails(BaseModel):
    name: str
    code: str | int | None = None
    partial_write: bool = False
    compensated: bool = False
    committed: list[CommittedRecord] = []


class IntakeFailureResponse(BaseModel):
    ok: bool = False
    error: str
    details: FailureDetails
