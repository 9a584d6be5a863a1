"""GET /v1/budgets/{budget_id}/spending-trends - Category spending trend endpoint"""

import logging
import time
from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ledger_insights.api.dependencies import get_ledger_client, get_request_id
from ledger_insights.api.v1.schemas import SpendingTrendsResponse
from ledger_insights.config import settings
from ledger_insights.domain.exceptions import InvalidInputError, LedgerAPIError
from ledger_insights.domain.trends import analyze_spending_trends
from ledger_insights.infrastructure.clients.ledger import LedgerClient
from ledger_insights.infrastructure.observability.logging import log_analysis
from ledger_insights.infrastructure.observability.metrics import record_analysis
from ledger_insights.utils.date_utils import trailing_month_starts

router = APIRouter()


@router.get("/budgets/{budget_id}/spending-trends", response_model=SpendingTrendsResponse)
async def get_spending_trends(
    budget_id: str,
    request: Request,
    months: int = Query(settings.trend_months, ge=2, le=12, description="Number of months to analyze"),
    category_id: Optional[str] = Query(None, description="Restrict the analysis to one category"),
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """
    Fit a linear trend to each category's monthly spending.

    Categories with no spending in the window are skipped and counted.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    since = date.fromisoformat(trailing_month_starts(months)[0])

    try:
        snapshot = await ledger_client.fetch_snapshot(budget_id, since_date=since, categories=True)

        transactions = snapshot.transactions
        if snapshot.categories:
            # Hidden and internal categories are absent from the lookup
            transactions = [t for t in transactions if t.category_id in snapshot.categories]

        report = analyze_spending_trends(
            transactions,
            months=months,
            category_id=category_id,
            category_names=snapshot.categories,
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
    record_analysis("spending_trends")
    log_analysis(
        request_id,
        "spending_trends",
        budget_id,
        report.categories_analyzed,
        report.categories_skipped,
        duration_ms,
    )

    return SpendingTrendsResponse(budget_id=budget_id, **asdict(report))
