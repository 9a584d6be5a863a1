"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ledger_insights.domain.frequencies import FREQUENCIES

FrequencyCode = Literal[FREQUENCIES]


class RecurringPaymentSchema(BaseModel):
    payee_id: str
    payee_name: str
    category_name: Optional[str] = None
    frequency: str
    confidence: str
    occurrence_count: int
    average_amount_milliunits: int
    total_milliunits: int
    monthly_cost_milliunits: int
    mean_interval_days: float
    last_date: date
    next_expected: Optional[date] = None


class RecurrenceSummarySchema(BaseModel):
    payees_analyzed: int
    payees_skipped: int
    total_recurring_found: int
    high_confidence_count: int
    medium_confidence_count: int
    low_confidence_count: int
    estimated_monthly_total_milliunits: int
    by_frequency: Dict[str, int]
    since_date: Optional[date] = None


class RecurringResponse(BaseModel):
    """Response for GET /v1/budgets/{budget_id}/recurring"""

    budget_id: str
    analysis_months: int
    payments: List[RecurringPaymentSchema]
    summary: RecurrenceSummarySchema


class ScheduledItemSchema(BaseModel):
    date: date
    amount_milliunits: int
    type: str
    frequency_label: str
    payee_name: str


class DailyForecastPointSchema(BaseModel):
    date: date
    scheduled_income: int
    scheduled_expenses: int
    net_change: int
    running_balance: int


class CashFlowForecastResponse(BaseModel):
    """Response for GET /v1/budgets/{budget_id}/cash-flow-forecast"""

    budget_id: str
    status: str
    start_date: date
    end_date: date
    days: int
    starting_balance: int
    budget_account_count: int
    projected_end_balance: int
    total_income: int
    total_expenses: int
    net_change: int
    lowest_balance: int
    lowest_balance_date: date
    daily_points: List[DailyForecastPointSchema]
    scheduled_items: List[ScheduledItemSchema]
    upcoming_expenses: List[ScheduledItemSchema]
    upcoming_income: List[ScheduledItemSchema]


class MonthlyAmountSchema(BaseModel):
    month: str
    amount_milliunits: int


class CategoryTrendSchema(BaseModel):
    category_id: str
    category_name: Optional[str] = None
    monthly_series: List[MonthlyAmountSchema]
    slope_per_month: float
    trend_percent: float
    classification: str
    average_milliunits: int
    total_milliunits: int


class SpendingTrendsResponse(BaseModel):
    """Response for GET /v1/budgets/{budget_id}/spending-trends"""

    budget_id: str
    months: List[str]
    trends: List[CategoryTrendSchema]
    monthly_totals: List[MonthlyAmountSchema]
    overall_trend: str
    overall_change_percent: float
    categories_analyzed: int
    categories_skipped: int


class ScheduledPreviewRequest(BaseModel):
    """Request body for POST /v1/scheduled/preview"""

    amount: Decimal = Field(..., description="Amount in currency units, negative for outflow (e.g. -50.00)")
    frequency: FrequencyCode
    start_date: Optional[str] = Field(None, description="YYYY-MM-DD, defaults to one period from today")
    payee_id: Optional[str] = None
    payee_name: Optional[str] = Field(None, max_length=200)


class ScheduledPreviewResponse(BaseModel):
    """Response for POST /v1/scheduled/preview"""

    valid: bool
    validation_errors: List[str]
    amount_milliunits: int
    frequency: str
    frequency_label: str
    start_date: date
    next_occurrences: List[date]
    estimated_monthly_milliunits: int
    estimated_annual_milliunits: int
    payee_id: Optional[str] = None
    payee_name: Optional[str] = None


class DateRangeResponse(BaseModel):
    """Response for GET /v1/dates/resolve"""

    expression: str
    start: str
    end: str
