"""Domain models - pure Python dataclasses representing ledger entities and derived reports"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Transaction:
    """Ledger transaction (outflows negative, inflows positive)"""

    transaction_id: str
    date: date
    amount_milliunits: int
    payee_name: str
    payee_id: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    is_transfer: bool = False
    deleted: bool = False


@dataclass(frozen=True)
class Account:
    """Ledger account with its current balance"""

    account_id: str
    name: str
    balance_milliunits: int
    on_budget: bool = True
    closed: bool = False
    deleted: bool = False


@dataclass(frozen=True)
class ScheduledTransaction:
    """User-declared recurring transaction"""

    scheduled_id: str
    account_id: str
    date_next: date
    amount_milliunits: int
    frequency: str  # one of frequencies.FREQUENCIES
    payee_name: str
    payee_id: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    deleted: bool = False


@dataclass(frozen=True)
class LedgerSnapshot:
    """Everything fetched from the ledger for one analysis request"""

    transactions: List[Transaction] = field(default_factory=list)
    accounts: List[Account] = field(default_factory=list)
    scheduled: List[ScheduledTransaction] = field(default_factory=list)
    categories: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RecurrenceCandidate:
    """Interval statistics for one payee's qualifying transactions"""

    payee_id: str
    dates: List[date]
    intervals: List[int]
    mean_interval: float
    std_dev_interval: float
    frequency: str  # weekly | biweekly | monthly | quarterly | annual | irregular
    confidence: str  # high | medium | low


@dataclass(frozen=True)
class RecurringPayment:
    """One detected recurring payee"""

    payee_id: str
    payee_name: str
    category_name: Optional[str]
    frequency: str
    confidence: str
    occurrence_count: int
    average_amount_milliunits: int
    total_milliunits: int
    monthly_cost_milliunits: int
    mean_interval_days: float
    last_date: date
    next_expected: Optional[date]  # None when the next date is unknown


@dataclass(frozen=True)
class RecurrenceSummary:
    """Aggregate counts for a recurrence report"""

    payees_analyzed: int
    payees_skipped: int
    total_recurring_found: int
    high_confidence_count: int
    medium_confidence_count: int
    low_confidence_count: int
    estimated_monthly_total_milliunits: int
    by_frequency: Dict[str, int]
    since_date: Optional[date]


@dataclass(frozen=True)
class RecurrenceReport:
    """Output of recurring-payment detection"""

    payments: List[RecurringPayment]
    summary: RecurrenceSummary


@dataclass(frozen=True)
class ScheduledItem:
    """Single projected occurrence of a scheduled or detected recurring item"""

    date: date
    amount_milliunits: int
    type: str  # "income" or "expense"
    frequency_label: str
    payee_name: str


@dataclass(frozen=True)
class DailyForecastPoint:
    """Running balance after one forecast day"""

    date: date
    scheduled_income: int
    scheduled_expenses: int
    net_change: int
    running_balance: int


@dataclass(frozen=True)
class CashFlowForecast:
    """Output of the cash-flow forecaster"""

    status: str  # healthy | caution | warning
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
    daily_points: List[DailyForecastPoint]
    scheduled_items: List[ScheduledItem]
    upcoming_expenses: List[ScheduledItem]
    upcoming_income: List[ScheduledItem]


@dataclass(frozen=True)
class MonthlyAmount:
    """Spending total for one month ("YYYY-MM-01")"""

    month: str
    amount_milliunits: int


@dataclass(frozen=True)
class CategoryTrend:
    """Linear trend of one category's monthly spending"""

    category_id: str
    category_name: Optional[str]
    monthly_series: List[MonthlyAmount]
    slope_per_month: float
    trend_percent: float
    classification: str  # increasing | decreasing | stable
    average_milliunits: int
    total_milliunits: int


@dataclass(frozen=True)
class TrendReport:
    """Output of the spending trend analyzer"""

    months: List[str]
    trends: List[CategoryTrend]
    monthly_totals: List[MonthlyAmount]
    overall_trend: str
    overall_change_percent: float
    categories_analyzed: int
    categories_skipped: int


@dataclass(frozen=True)
class ScheduledPreview:
    """Dry-run view of a scheduled transaction before it is created"""

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
