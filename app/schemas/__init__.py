from app.schemas.extraction import RawCustomer, RawDelivery, RawExtraction
from app.schemas.health import HealthResponse
from app.schemas.inquiry import Draft, DraftLine, RejectedLine, RejectionReason, SavedInquiryResponse
from app.schemas.intake import IntakeFailureResponse, IntakeRequest, IntakeResponse

__all__ = [
    "Draft",
    "DraftLine",
    "HealthResponse",
    "IntakeFailureResponse",
    "IntakeRequest",
    "IntakeResponse",
    "RawCustomer",
    "RawDelivery",
    "RawExtraction",
    "RejectedLine",
    "RejectionReason",
    "SavedInquiryResponse",
]
