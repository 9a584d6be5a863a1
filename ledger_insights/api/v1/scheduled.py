"""POST /v1/scheduled/preview - Dry-run a scheduled transaction"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request

from ledger_insights.api.dependencies import get_request_id
from ledger_insights.api.v1.schemas import ScheduledPreviewRequest, ScheduledPreviewResponse
from ledger_insights.domain.exceptions import InvalidInputError
from ledger_insights.domain.projection import preview_scheduled_transaction
from ledger_insights.infrastructure.observability.metrics import record_analysis

router = APIRouter()


@router.post("/scheduled/preview", response_model=ScheduledPreviewResponse)
def preview_scheduled(request_body: ScheduledPreviewRequest, request: Request):
    """
    Preview next occurrences and estimated monthly/annual cost.

    Nothing is created; business-rule problems come back in validation_errors.
    """
    try:
        preview = preview_scheduled_transaction(
            request_body.amount,
            request_body.frequency,
            start_date=request_body.start_date,
            payee_id=request_body.payee_id,
            payee_name=request_body.payee_name,
        )
    except InvalidInputError as e:
        logging.warning(f"Invalid input: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    record_analysis("scheduled_preview")
    return ScheduledPreviewResponse(**asdict(preview))
