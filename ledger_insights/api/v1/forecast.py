"""GET /v1/budgets/{budget_id}/cash-flow-forecast - Cash-flow projection endpoint"""

import logging
import time
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ledger_insights.api.dependencies import get_ledger_client, get_request_id
from ledger_insights.api.v1.schemas import CashFlowForecastResponse
from ledger_insights.config import settings
from ledger_insights.domain.exceptions import InvalidInputError, LedgerAPIError
from ledger_insights.domain.forecast import build_cash_flow_forecast
from ledger_insights.domain.projection import scheduled_from_recurring
from ledger_insights.domain.recurrence import detect_recurring
from ledger_insights.infrastructure.clients.ledger import LedgerClient
from ledger_insights.infrastructure.observability.logging import log_analysis
from ledger_insights.infrastructure.observability.metrics import record_forecast
from ledger_insights.utils.date_utils import months_ago

router = APIRouter()


@router.get("/budgets/{budget_id}/cash-flow-forecast", response_model=CashFlowForecastResponse)
async def get_cash_flow_forecast(
    budget_id: str,
    request: Request,
    days: int = Query(settings.forecast_days, ge=7, le=90, description="Number of days to forecast"),
    include_detected: bool = Query(False, description="Also project detected recurring payments"),
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """
    Project the running cash balance over the next `days` days.

    Flow:
    1. Fetch accounts and scheduled transactions (plus history if include_detected)
    2. Expand scheduled items across the horizon
    3. Accumulate the daily running balance and classify shortfall risk
    """
    start_time = time.time()
    request_id = get_request_id(request)
    since = months_ago(settings.recurring_lookback_months) if include_detected else None

    try:
        snapshot = await ledger_client.fetch_snapshot(
            budget_id,
            since_date=since,
            transactions=include_detected,
            accounts=True,
            scheduled=True,
        )

        extra_scheduled = []
        if include_detected:
            detected = detect_recurring(
                snapshot.transactions,
                min_occurrences=settings.recurring_min_occurrences,
                since=since,
            )
            extra_scheduled = scheduled_from_recurring(detected.payments)

        forecast = build_cash_flow_forecast(
            snapshot.accounts,
            snapshot.scheduled,
            days=days,
            extra_scheduled=extra_scheduled,
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
    record_forecast(forecast.status)
    log_analysis(request_id, "cash_flow_forecast", budget_id, len(forecast.scheduled_items), 0, duration_ms)

    return CashFlowForecastResponse(budget_id=budget_id, **asdict(forecast))
