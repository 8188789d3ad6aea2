"""
Intake endpoint: pulls the latest email and turns it into a draft quotation.

Flow:
1. Check the intake token
2. Run the intake pipeline (mail → Claude → normalize → optional persist)
3. Report one pass/fail result; failures carry the upstream message and code
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.dependencies import get_db, get_intake_pipeline, require_intake_token
from app.exceptions import IntakeError, UpstreamFailure, ValidationFailure
from app.inquiry_intake.pipeline import InquiryIntakePipeline, IntakeResult
from app.schemas.inquiry import SavedInquiryResponse
from app.schemas.intake import (
    AiSummary,
    CommittedRecord,
    FailureDetails,
    IntakeFailureResponse,
    IntakeRequest,
    IntakeResponse,
    MailSummary,
)

logger = logging.getLogger("intake.api")

router = APIRouter()


def _status_code_for(error: Exception) -> int:
    if isinstance(error, ValidationFailure):
        return 422
    if isinstance(error, UpstreamFailure):
        return 502
    # ConfigurationError and anything unexpected
    return 500


def _failure_response(error: Exception) -> JSONResponse:
    if isinstance(error, IntakeError):
        message = error.message
        code = error.code
    else:
        message = str(error) or type(error).__name__
        code = None

    details = FailureDetails(name=type(error).__name__, code=code)
    if isinstance(error, UpstreamFailure):
        details.partial_write = error.partial_write
        details.compensated = error.compensated
        details.committed = [CommittedRecord(table=r.table, id=r.id) for r in error.committed]

    body = IntakeFailureResponse(error=message, details=details)
    return JSONResponse(status_code=_status_code_for(error), content=body.model_dump(mode="json"))


def _to_response(result: IntakeResult, save: bool) -> IntakeResponse:
    """Convert IntakeResult to API response."""
    mail = result.mail
    saved = None
    if result.saved is not None:
        saved = SavedInquiryResponse(
            inquiry_id=result.saved.inquiry_id,
            quotation_id=result.saved.quotation_id,
            inquiry_item_ids=result.saved.inquiry_item_ids,
            quotation_item_ids=result.saved.quotation_item_ids,
            matched_count=result.saved.matched_count,
        )

    return IntakeResponse(
        save=save,
        mail=MailSummary(
            uid=mail.uid,
            message_id=mail.message_id,
            subject=mail.subject,
            subject_norm=mail.subject_norm,
            sender=mail.sender,
            sent_at=mail.sent_at,
            text_preview=mail.text[: settings.mail_preview_chars],
        ),
        ai=AiSummary(model=result.model, json=result.extraction),
        transformed=result.draft,
        saved=saved,
        processing_time_ms=result.processing_time_ms,
    )


@router.post(
    "/pull-and-parse",
    response_model=IntakeResponse,
    responses={
        422: {"model": IntakeFailureResponse},
        500: {"model": IntakeFailureResponse},
        502: {"model": IntakeFailureResponse},
    },
    dependencies=[Depends(require_intake_token)],
)
async def pull_and_parse(
    request: IntakeRequest | None = None,
    db: AsyncSession = Depends(get_db),
    pipeline: InquiryIntakePipeline = Depends(get_intake_pipeline),
):
    """Pull the latest email, extract an inquiry and optionally save it.

    With ``save`` set, the inquiry, its items, a draft quotation and the
    price-matched quotation items are written one row at a time. A failure
    part-way leaves earlier rows in place; the failure body lists them.
    """
    save = request.save if request is not None else False

    try:
        result = await pipeline.run(db, save=save)
    except Exception as e:
        if isinstance(e, UpstreamFailure) and e.partial_write:
            logger.error(
                "Intake failed after partial write (compensated=%s): %s", e.compensated, e.message
            )
        else:
            logger.exception("Intake failed: %s", e)
        return _failure_response(e)

    return _to_response(result, save)
