"""GET /v1/budgets/{budget_id}/recurring - Recurring payment detection endpoint"""

import logging
import time
from dataclasses import asdict
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ledger_insights.api.dependencies import get_ledger_client, get_request_id
from ledger_insights.api.v1.schemas import RecurringResponse
from ledger_insights.config import settings
from ledger_insights.domain.exceptions import InvalidInputError, LedgerAPIError
from ledger_insights.domain.recurrence import detect_recurring
from ledger_insights.infrastructure.clients.ledger import LedgerClient
from ledger_insights.infrastructure.observability.logging import log_analysis
from ledger_insights.infrastructure.observability.metrics import record_analysis
from ledger_insights.utils.date_utils import months_ago

router = APIRouter()


@router.get("/budgets/{budget_id}/recurring", response_model=RecurringResponse)
async def get_recurring_payments(
    budget_id: str,
    request: Request,
    months: int = Query(settings.recurring_lookback_months, ge=3, le=12, description="Months of history to analyze"),
    min_occurrences: int = Query(settings.recurring_min_occurrences, ge=2, le=10),
    direction: Literal["outflow", "inflow"] = Query("outflow", description="Detect bills (outflow) or income (inflow)"),
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """
    Detect subscriptions, bills and regular income from transaction history.

    Flow:
    1. Fetch transactions since `months` months ago
    2. Group by payee and classify interval regularity
    3. Return recurring payees sorted by monthly cost
    """
    start_time = time.time()
    request_id = get_request_id(request)
    since = months_ago(months)

    try:
        snapshot = await ledger_client.fetch_snapshot(budget_id, since_date=since)
        report = detect_recurring(
            snapshot.transactions,
            min_occurrences=min_occurrences,
            direction=direction,
            since=since,
        )

    except LedgerAPIError as e:
        logging.error(f"Ledger API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Ledger service unavailable")

    except InvalidInputError as e:
        logging.warning(f"Invalid input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_analysis("recurring")
    log_analysis(
        request_id,
        "recurring",
        budget_id,
        report.summary.payees_analyzed,
        report.summary.payees_skipped,
        duration_ms,
    )

    return RecurringResponse(budget_id=budget_id, analysis_months=months, **asdict(report))
