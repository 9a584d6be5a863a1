"""Cash-flow forecast - day-by-day running balance from scheduled activity"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ledger_insights.domain.exceptions import InvalidInputError
from ledger_insights.domain.models import (
    Account,
    CashFlowForecast,
    DailyForecastPoint,
    ScheduledItem,
    ScheduledTransaction,
)
from ledger_insights.domain.money import sum_milliunits
from ledger_insights.domain.projection import project_forecast_items
from ledger_insights.utils.date_utils import LocalDate, generate_date_range, local_today

DEFAULT_FORECAST_DAYS = 30
FORECAST_DAYS_RANGE = (7, 90)
UPCOMING_WINDOW_DAYS = 7
SAMPLE_DAYS_OF_MONTH = (1, 15)


def budget_accounts(accounts: Iterable[Account]) -> List[Account]:
    """Open, non-deleted, on-budget accounts"""
    return [a for a in accounts if a.on_budget and not a.deleted and not a.closed]


def classify_cash_flow(lowest_balance: int, starting_balance: int) -> str:
    """
    Status of a forecast from its low point.

    - warning: the balance goes negative
    - caution: the low point is under 20% of the starting balance
    - healthy: otherwise
    """
    if lowest_balance < 0:
        return "warning"
    # lowest < 20% of start, kept in integers
    if lowest_balance * 5 < starting_balance:
        return "caution"
    return "healthy"


def build_daily_points(
    items: Sequence[ScheduledItem],
    starting_balance: int,
    start: date,
    end: date,
) -> Tuple[List[DailyForecastPoint], int, date, int]:
    """
    Walk every day from start to end, accumulating the running balance.

    The balance is carried across every day; only days with activity or
    the 1st/15th of the month are emitted.

    Returns:
        (emitted points, lowest balance, date of lowest balance, end balance)
    """
    items_by_date: Dict[date, List[ScheduledItem]] = defaultdict(list)
    for item in items:
        items_by_date[item.date].append(item)

    points: List[DailyForecastPoint] = []
    running_balance = starting_balance
    lowest_balance = starting_balance
    lowest_date = start

    for day in generate_date_range(start, end):
        day_items = items_by_date.get(day, [])
        income = sum_milliunits(i.amount_milliunits for i in day_items if i.type == "income")
        expenses = sum_milliunits(abs(i.amount_milliunits) for i in day_items if i.type == "expense")
        net_change = income - expenses
        running_balance += net_change

        if running_balance < lowest_balance:
            lowest_balance = running_balance
            lowest_date = day

        if day_items or day.day in SAMPLE_DAYS_OF_MONTH:
            points.append(
                DailyForecastPoint(
                    date=day,
                    scheduled_income=income,
                    scheduled_expenses=expenses,
                    net_change=net_change,
                    running_balance=running_balance,
                )
            )

    return points, lowest_balance, lowest_date, running_balance


def build_cash_flow_forecast(
    accounts: Iterable[Account],
    scheduled: Iterable[ScheduledTransaction],
    *,
    days: int = DEFAULT_FORECAST_DAYS,
    today: Optional[LocalDate] = None,
    extra_scheduled: Iterable[ScheduledTransaction] = (),
) -> CashFlowForecast:
    """
    Main entry point: project balances over the next `days` days.

    Args:
        accounts: Ledger accounts; only open on-budget ones count
        scheduled: User-declared scheduled transactions
        days: Horizon length (7-90)
        today: Local date the forecast starts on (default: local today)
        extra_scheduled: Additional items, e.g. detected recurrences

    Raises:
        InvalidInputError: days outside 7-90
    """
    low, high = FORECAST_DAYS_RANGE
    if not low <= days <= high:
        raise InvalidInputError(f"days must be between {low} and {high}, got {days}")

    today = today or local_today()
    end = today + timedelta(days=days)

    cash_accounts = budget_accounts(accounts)
    starting_balance = sum_milliunits(a.balance_milliunits for a in cash_accounts)

    items = project_forecast_items([*scheduled, *extra_scheduled], today, end)
    points, lowest_balance, lowest_date, end_balance = build_daily_points(items, starting_balance, today, end)

    income_items = [i for i in items if i.type == "income"]
    expense_items = [i for i in items if i.type == "expense"]
    total_income = sum_milliunits(i.amount_milliunits for i in income_items)
    total_expenses = sum_milliunits(abs(i.amount_milliunits) for i in expense_items)

    upcoming_cutoff = today + timedelta(days=UPCOMING_WINDOW_DAYS)

    return CashFlowForecast(
        status=classify_cash_flow(lowest_balance, starting_balance),
        start_date=today,
        end_date=end,
        days=days,
        starting_balance=starting_balance,
        budget_account_count=len(cash_accounts),
        projected_end_balance=end_balance,
        total_income=total_income,
        total_expenses=total_expenses,
        net_change=total_income - total_expenses,
        lowest_balance=lowest_balance,
        lowest_balance_date=lowest_date,
        daily_points=points,
        scheduled_items=items,
        upcoming_expenses=[i for i in expense_items if i.date <= upcoming_cutoff],
        upcoming_income=income_items,
    )
