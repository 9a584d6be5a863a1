"""GET /v1/dates/resolve - Resolve natural-language date expressions"""

from fastapi import APIRouter, Query

from ledger_insights.api.v1.schemas import DateRangeResponse
from ledger_insights.utils.date_utils import get_date_range

router = APIRouter()


@router.get("/dates/resolve", response_model=DateRangeResponse)
def resolve_date_expression(expression: str = Query(..., min_length=1, examples=["past 30 days"])):
    """
    Turn "past 3 months", "last week", "2026-01-15" etc. into a start/end range ending today.

    Unrecognized expressions raise InvalidDateExpressionError, returned as 422 by the app handler.
    """
    start, end = get_date_range(expression)
    return DateRangeResponse(expression=expression, start=start, end=end)
