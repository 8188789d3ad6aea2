import hmac

from fastapi import Header, HTTPException

from app.config import settings
from app.database import get_db
from app.inquiry_intake.pipeline import InquiryIntakePipeline

# Re-export get_db for use in Depends()
get_db = get_db


def get_intake_pipeline() -> InquiryIntakePipeline:
    return InquiryIntakePipeline(settings)


def require_intake_token(x_intake_token: str = Header("", alias="X-Intake-Token")) -> None:
    """Reject the call unless it carries the configured intake token.

    An empty INTAKE_ENDPOINT_TOKEN leaves the endpoint open.
    """
    expected = settings.intake_endpoint_token.strip()
    if not expected:
        return
    if not hmac.compare_digest(x_intake_token.strip().encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")
