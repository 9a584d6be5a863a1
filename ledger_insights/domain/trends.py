"""Spending trend analysis - least-squares slope over monthly category totals"""

from collections import defaultdict
from fractions import Fraction
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ledger_insights.domain.exceptions import InvalidInputError
from ledger_insights.domain.grouping import filter_transactions, group_by_category
from ledger_insights.domain.models import CategoryTrend, MonthlyAmount, Transaction, TrendReport
from ledger_insights.domain.money import average_milliunits, round_half_up, safe_ratio, sum_milliunits
from ledger_insights.utils.date_utils import UtcDate, month_key, trailing_month_starts

DEFAULT_TREND_MONTHS = 6
TREND_MONTHS_RANGE = (2, 12)
MIN_TREND_POINTS = 2
TREND_THRESHOLD_PERCENT = 10


def linear_regression_slope(values: Sequence[int]) -> float:
    """
    Ordinary least-squares slope of values against x = 0..n-1.

    slope = (n*Sxy - Sx*Sy) / (n*Sxx - Sx^2), 0.0 when the denominator is 0.
    """
    n = len(values)
    sum_x = sum(range(n))
    sum_y = sum(values)
    sum_xy = sum(x * y for x, y in enumerate(values))
    sum_x2 = sum(x * x for x in range(n))

    denominator = n * sum_x2 - sum_x * sum_x
    return safe_ratio(n * sum_xy - sum_x * sum_y, denominator)


def classify_trend(trend_percent: float) -> str:
    if trend_percent > TREND_THRESHOLD_PERCENT:
        return "increasing"
    if trend_percent < -TREND_THRESHOLD_PERCENT:
        return "decreasing"
    return "stable"


def analyze_category_trend(
    category_id: str,
    series: Sequence[MonthlyAmount],
    category_name: Optional[str] = None,
) -> Optional[CategoryTrend]:
    """
    Trend of one category's monthly spending (oldest month first).

    Returns None for fewer than two months or when nothing was spent in the
    window (there is nothing to trend).
    """
    if len(series) < MIN_TREND_POINTS:
        return None

    amounts = [m.amount_milliunits for m in series]
    total = sum_milliunits(amounts)
    if total == 0:
        return None

    average = average_milliunits(amounts)
    slope = linear_regression_slope(amounts)
    trend_percent = safe_ratio(slope * 100, average) if average > 0 else 0.0

    return CategoryTrend(
        category_id=category_id,
        category_name=category_name,
        monthly_series=list(series),
        slope_per_month=slope,
        trend_percent=trend_percent,
        classification=classify_trend(trend_percent),
        average_milliunits=round_half_up(average),
        total_milliunits=total,
    )


def monthly_category_spending(
    transactions: Iterable[Transaction],
    month_keys: Sequence[str],
) -> Dict[str, List[MonthlyAmount]]:
    """
    Spending per category per month, zero-filled across month_keys.

    A month's spending is the negated net activity when activity is an
    outflow, otherwise 0 (refunds can cancel spending but never go below 0).
    """
    wanted = set(month_keys)
    qualifying = filter_transactions(transactions, direction="all")
    spending: Dict[str, List[MonthlyAmount]] = {}

    for category_id, category_transactions in group_by_category(qualifying).items():
        activity: Dict[str, int] = defaultdict(int)
        for txn in category_transactions:
            key = month_key(txn.date)
            if key in wanted:
                activity[key] += txn.amount_milliunits
        if not activity:
            continue
        spending[category_id] = [
            MonthlyAmount(month=key, amount_milliunits=-activity[key] if activity[key] < 0 else 0)
            for key in month_keys
        ]

    return spending


def _category_names(transactions: Iterable[Transaction]) -> Dict[str, str]:
    names: Dict[str, str] = {}
    for txn in transactions:
        if txn.category_id and txn.category_name:
            names.setdefault(txn.category_id, txn.category_name)
    return names


def _overall_change(totals: Sequence[int]) -> float:
    """Percent change of the second-half average over the first-half average"""
    half = len(totals) // 2
    first_half, second_half = totals[:half], totals[half:]
    if not first_half or not second_half:
        return 0.0
    first_avg = Fraction(sum(first_half), len(first_half))
    second_avg = Fraction(sum(second_half), len(second_half))
    if first_avg <= 0:
        return 0.0
    return float((second_avg - first_avg) / first_avg * 100)


def analyze_spending_trends(
    transactions: Sequence[Transaction],
    *,
    months: int = DEFAULT_TREND_MONTHS,
    today: Optional[UtcDate] = None,
    category_id: Optional[str] = None,
    category_names: Optional[Mapping[str, str]] = None,
) -> TrendReport:
    """
    Main entry point: per-category spending trends over the trailing months.

    Args:
        transactions: Snapshot covering at least the analysed months
        months: Number of months including the current one (2-12)
        today: UTC date that anchors the month window
        category_id: Restrict the report to one category
        category_names: Optional id -> name lookup (falls back to transaction names)

    Raises:
        InvalidInputError: months outside 2-12
    """
    low, high = TREND_MONTHS_RANGE
    if not low <= months <= high:
        raise InvalidInputError(f"months must be between {low} and {high}, got {months}")

    month_keys = trailing_month_starts(months, today)
    spending = monthly_category_spending(transactions, month_keys)
    names = {**_category_names(transactions), **(category_names or {})}

    if category_id is not None:
        spending = {k: v for k, v in spending.items() if k == category_id}

    trends: List[CategoryTrend] = []
    skipped = 0
    for cat_id, series in spending.items():
        trend = analyze_category_trend(cat_id, series, names.get(cat_id))
        if trend is None:
            skipped += 1
            continue
        trends.append(trend)

    trends.sort(key=lambda t: (-t.total_milliunits, t.category_id))

    monthly_totals = [
        MonthlyAmount(
            month=key,
            amount_milliunits=sum_milliunits(series[index].amount_milliunits for series in spending.values()),
        )
        for index, key in enumerate(month_keys)
    ]
    overall_change = _overall_change([m.amount_milliunits for m in monthly_totals])

    return TrendReport(
        months=month_keys,
        trends=trends,
        monthly_totals=monthly_totals,
        overall_trend=classify_trend(overall_change),
        overall_change_percent=overall_change,
        categories_analyzed=len(trends),
        categories_skipped=skipped,
    )
