"""Recurring payment detection - infer periodicity from irregular transaction history"""

from datetime import date, datetime, time, timedelta
from fractions import Fraction
from statistics import fmean, pstdev
from typing import Dict, List, Optional, Sequence, Tuple

from ledger_insights.domain.exceptions import InvalidInputError
from ledger_insights.domain.grouping import filter_transactions, group_by_payee
from ledger_insights.domain.models import (
    RecurrenceCandidate,
    RecurrenceReport,
    RecurrenceSummary,
    RecurringPayment,
    Transaction,
)
from ledger_insights.domain.money import (
    average_milliunits,
    round_half_up,
    safe_ratio,
    scale_milliunits,
    sum_milliunits,
)
from ledger_insights.utils.date_utils import UtcDate, days_between, utc_today

DEFAULT_MIN_OCCURRENCES = 3
MIN_OCCURRENCES_RANGE = (2, 10)

HIGH_CONFIDENCE_COV = 0.15
MEDIUM_CONFIDENCE_COV = 0.35

# Inclusive bounds on the mean interval, in days
FREQUENCY_BANDS: Tuple[Tuple[str, int, int], ...] = (
    ("weekly", 5, 9),
    ("biweekly", 12, 17),
    ("monthly", 25, 35),
    ("quarterly", 80, 100),
    ("annual", 340, 390),
)

DETECTED_FREQUENCIES = ("weekly", "biweekly", "monthly", "quarterly", "annual", "irregular")

MONTHLY_COST_FACTORS: Dict[str, Fraction] = {
    "weekly": Fraction("4.33"),  # ~4.33 weeks per month
    "biweekly": Fraction("2.17"),
    "monthly": Fraction(1),
    "quarterly": Fraction(1, 3),
    "annual": Fraction(1, 12),
    "irregular": Fraction(1),  # assume monthly
}


def compute_intervals(dates: Sequence[date]) -> List[int]:
    """Day counts between consecutive (sorted) dates"""
    return [days_between(prev, curr) for prev, curr in zip(dates, dates[1:])]


def interval_statistics(intervals: Sequence[int]) -> Tuple[float, float]:
    """(mean, population standard deviation); (0.0, 0.0) when there are no intervals"""
    if not intervals:
        return 0.0, 0.0
    return fmean(intervals), pstdev(intervals)


def classify_confidence(coefficient_of_variation: float) -> str:
    if coefficient_of_variation < HIGH_CONFIDENCE_COV:
        return "high"
    if coefficient_of_variation < MEDIUM_CONFIDENCE_COV:
        return "medium"
    return "low"


def classify_frequency(mean_interval: float) -> str:
    for frequency, low, high in FREQUENCY_BANDS:
        if low <= mean_interval <= high:
            return frequency
    return "irregular"


def classify_recurrence(mean_interval: float, std_dev_interval: float) -> Tuple[str, str]:
    """
    Map interval statistics to (frequency, confidence).

    Confidence comes from the coefficient of variation (std / mean), which
    is 0 when the mean interval is 0.
    """
    coefficient_of_variation = safe_ratio(std_dev_interval, mean_interval)
    return classify_frequency(mean_interval), classify_confidence(coefficient_of_variation)


def monthly_cost(average_amount, frequency: str) -> int:
    """Monthly-equivalent cost in milliunits (irregular is costed as monthly)"""
    factor = MONTHLY_COST_FACTORS.get(frequency, Fraction(1))
    return scale_milliunits(average_amount, factor)


def predict_next_date(last_date: date, mean_interval: float, today: UtcDate) -> Optional[date]:
    """
    Next expected occurrence: last date plus the mean interval.

    If that is not after today, one more interval is added. If it is still
    not after today the pattern has lapsed and None ("unknown") is returned
    instead of a multi-interval guess.
    """
    interval = timedelta(days=mean_interval)
    today_start = datetime.combine(today, time())

    candidate = datetime.combine(last_date, time()) + interval
    if candidate > today_start:
        return candidate.date()

    candidate += interval
    if candidate > today_start:
        return candidate.date()

    return None


def build_candidate(
    payee_id: str,
    transactions: Sequence[Transaction],
    min_occurrences: int = DEFAULT_MIN_OCCURRENCES,
) -> Optional[RecurrenceCandidate]:
    """
    Interval statistics for one payee, or None with too little history.

    Expects transactions already filtered and sorted by date.
    """
    if len(transactions) < min_occurrences:
        return None

    dates = [t.date for t in transactions]
    intervals = compute_intervals(dates)
    if not intervals:
        return None

    mean_interval, std_dev_interval = interval_statistics(intervals)
    frequency, confidence = classify_recurrence(mean_interval, std_dev_interval)

    return RecurrenceCandidate(
        payee_id=payee_id,
        dates=dates,
        intervals=intervals,
        mean_interval=mean_interval,
        std_dev_interval=std_dev_interval,
        frequency=frequency,
        confidence=confidence,
    )


def is_noise(candidate: RecurrenceCandidate) -> bool:
    """Irregular timing with low confidence is not a pattern"""
    return candidate.frequency == "irregular" and candidate.confidence == "low"


def _build_payment(candidate: RecurrenceCandidate, transactions: Sequence[Transaction], today: UtcDate) -> RecurringPayment:
    amounts = [abs(t.amount_milliunits) for t in transactions]
    average = average_milliunits(amounts)
    first = transactions[0]
    last_date = candidate.dates[-1]

    return RecurringPayment(
        payee_id=candidate.payee_id,
        payee_name=first.payee_name,
        category_name=first.category_name,
        frequency=candidate.frequency,
        confidence=candidate.confidence,
        occurrence_count=len(transactions),
        average_amount_milliunits=round_half_up(average),
        total_milliunits=sum_milliunits(amounts),
        monthly_cost_milliunits=monthly_cost(average, candidate.frequency),
        mean_interval_days=candidate.mean_interval,
        last_date=last_date,
        next_expected=predict_next_date(last_date, candidate.mean_interval, today),
    )


def detect_recurring(
    transactions: Sequence[Transaction],
    *,
    today: Optional[UtcDate] = None,
    min_occurrences: int = DEFAULT_MIN_OCCURRENCES,
    direction: str = "outflow",
    since: Optional[date] = None,
) -> RecurrenceReport:
    """
    Main entry point: find payees that are paid (or pay) on a regular cadence.

    Steps per payee:
    1. Skip payees with fewer than min_occurrences qualifying transactions
    2. Classify frequency and confidence from the day intervals
    3. Drop irregular + low confidence combinations
    4. Estimate monthly cost and the next expected date

    Returns:
        RecurrenceReport sorted by monthly cost (highest first)
    """
    low, high = MIN_OCCURRENCES_RANGE
    if not low <= min_occurrences <= high:
        raise InvalidInputError(f"min_occurrences must be between {low} and {high}, got {min_occurrences}")
    if direction not in ("outflow", "inflow"):
        raise InvalidInputError(f"direction must be 'outflow' or 'inflow', got {direction!r}")

    today = today or utc_today()
    qualifying = filter_transactions(transactions, direction=direction, since=since)
    by_payee = group_by_payee(qualifying)

    payments: List[RecurringPayment] = []
    analyzed = 0
    skipped = 0

    for payee_id, payee_transactions in by_payee.items():
        candidate = build_candidate(payee_id, payee_transactions, min_occurrences)
        if candidate is None:
            skipped += 1
            continue

        analyzed += 1
        if is_noise(candidate):
            continue

        payments.append(_build_payment(candidate, payee_transactions, today))

    payments.sort(key=lambda p: (-p.monthly_cost_milliunits, p.payee_name, p.payee_id))

    confidence_counts = {level: 0 for level in ("high", "medium", "low")}
    by_frequency = {frequency: 0 for frequency in DETECTED_FREQUENCIES}
    for payment in payments:
        confidence_counts[payment.confidence] += 1
        by_frequency[payment.frequency] += 1

    summary = RecurrenceSummary(
        payees_analyzed=analyzed,
        payees_skipped=skipped,
        total_recurring_found=len(payments),
        high_confidence_count=confidence_counts["high"],
        medium_confidence_count=confidence_counts["medium"],
        low_confidence_count=confidence_counts["low"],
        estimated_monthly_total_milliunits=sum_milliunits(p.monthly_cost_milliunits for p in payments),
        by_frequency=by_frequency,
        since_date=since,
    )
    return RecurrenceReport(payments=payments, summary=summary)
