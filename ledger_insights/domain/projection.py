"""
Occurrence projection for scheduled and detected recurring items

Several notions of "one period" live here side by side:

- calendar steps (add_calendar_step) for dates a user sees in a preview
- fixed day counts (APPROX_INTERVAL_DAYS, monthly = 30) for the cash-flow forecast
- fixed per-month multipliers (MONTHLY_MULTIPLIERS) for cost estimates
"""

import math
from datetime import date, timedelta
from fractions import Fraction
from typing import Iterable, List, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from ledger_insights.domain.exceptions import InvalidDateError
from ledger_insights.domain.frequencies import (
    APPROX_INTERVAL_DAYS,
    DETECTED_TO_FREQUENCY,
    DISPLAY_NAMES,
    FORECAST_LABELS,
    MONTHLY_MULTIPLIERS,
    validate_frequency,
)
from ledger_insights.domain.models import (
    RecurringPayment,
    ScheduledItem,
    ScheduledPreview,
    ScheduledTransaction,
)
from ledger_insights.domain.money import from_display_amount, round_half_up
from ledger_insights.utils.date_utils import (
    LocalDate,
    UtcDate,
    add_calendar_step,
    parse_iso_date,
    utc_today,
)

MAX_SCHEDULE_YEARS = 5
DEFAULT_PREVIEW_OCCURRENCES = 3


def next_occurrences(start: date, frequency: str, count: int) -> List[date]:
    """First `count` occurrences beginning at `start`, stepping by calendar fields"""
    validate_frequency(frequency)
    if count <= 0:
        return []
    if frequency == "never":
        return [start]

    occurrences = [start]
    for _ in range(count - 1):
        occurrences.append(add_calendar_step(occurrences[-1], frequency))
    return occurrences


def approximate_interval_days(frequency: str) -> int:
    """Fixed day count for one period (0 for one-time items)"""
    return APPROX_INTERVAL_DAYS[validate_frequency(frequency)]


def _forecast_item(on: date, scheduled: ScheduledTransaction) -> ScheduledItem:
    return ScheduledItem(
        date=on,
        amount_milliunits=scheduled.amount_milliunits,
        type="income" if scheduled.amount_milliunits >= 0 else "expense",
        frequency_label=FORECAST_LABELS.get(scheduled.frequency, scheduled.frequency),
        payee_name=scheduled.payee_name,
    )


def project_forecast_items(
    scheduled: Iterable[ScheduledTransaction],
    today: LocalDate,
    horizon_end: date,
) -> List[ScheduledItem]:
    """
    Expand scheduled transactions into dated items within [today, horizon_end].

    Repeats use fixed day counts (monthly = 30 days). Each series is expanded
    at most ceil(horizon / interval) + 1 steps past its next date.
    """
    horizon_days = (horizon_end - today).days
    items: List[ScheduledItem] = []

    for st in scheduled:
        if st.deleted:
            continue
        validate_frequency(st.frequency)
        if st.date_next > horizon_end:
            continue

        if st.date_next >= today:
            items.append(_forecast_item(st.date_next, st))

        interval_days = APPROX_INTERVAL_DAYS[st.frequency]
        if interval_days <= 0:
            continue

        current = st.date_next
        for _ in range(math.ceil(horizon_days / interval_days) + 1):
            current = current + timedelta(days=interval_days)
            if current > horizon_end:
                break
            if current < today:
                continue
            items.append(_forecast_item(current, st))

    items.sort(key=lambda item: item.date)
    return items


def scheduled_from_recurring(
    payments: Iterable[RecurringPayment],
    direction: str = "outflow",
) -> List[ScheduledTransaction]:
    """
    Treat detected recurrences as scheduled transactions so they can be forecast.

    Payments with an unknown next date are left out.
    """
    sign = -1 if direction == "outflow" else 1
    scheduled = []
    for payment in payments:
        if payment.next_expected is None:
            continue
        scheduled.append(
            ScheduledTransaction(
                scheduled_id=f"detected:{payment.payee_id}",
                account_id="",
                date_next=payment.next_expected,
                amount_milliunits=sign * payment.average_amount_milliunits,
                frequency=DETECTED_TO_FREQUENCY[payment.frequency],
                payee_name=payment.payee_name,
                payee_id=payment.payee_id,
                category_name=payment.category_name,
            )
        )
    return scheduled


def estimate_costs(amount_milliunits: int, frequency: str) -> Tuple[int, int]:
    """
    (monthly, annual) cost of a recurring amount, in milliunits.

    Uses fixed per-month multipliers (weekly = 4.33, every4Weeks = 30/28).
    Annual is twelve times the unrounded monthly figure.
    """
    multiplier = MONTHLY_MULTIPLIERS[validate_frequency(frequency)]
    monthly = Fraction(abs(amount_milliunits)) * multiplier
    return round_half_up(monthly), round_half_up(monthly * 12)


def default_start_date(frequency: str, today: Optional[UtcDate] = None) -> date:
    """One period from today; sub-monthly schedules other than daily/weekly start next month"""
    validate_frequency(frequency)
    today = today or utc_today()
    if frequency in ("never", "twiceAMonth", "every4Weeks"):
        return today + relativedelta(months=1)
    return add_calendar_step(today, frequency)


def validate_scheduled_date(value: date, today: Optional[UtcDate] = None) -> Optional[str]:
    """Error message when a scheduled date is not in the future or too far out, else None"""
    today = today or utc_today()
    if value <= today:
        return "Date must be in the future"
    if value > today + relativedelta(years=MAX_SCHEDULE_YEARS):
        return f"Date must be within {MAX_SCHEDULE_YEARS} years from today"
    return None


def preview_scheduled_transaction(
    amount,
    frequency: str,
    *,
    start_date: Union[str, date, None] = None,
    payee_id: Optional[str] = None,
    payee_name: Optional[str] = None,
    today: Optional[UtcDate] = None,
    occurrence_count: int = DEFAULT_PREVIEW_OCCURRENCES,
) -> ScheduledPreview:
    """
    Dry run of a scheduled transaction: next dates and estimated costs.

    Malformed amount, frequency or date strings raise InvalidInputError
    subclasses. Business-rule problems (date in the past, no payee) are
    collected in validation_errors instead.
    """
    validate_frequency(frequency)
    amount_milliunits = from_display_amount(amount)
    today = today or utc_today()

    if start_date is None:
        start = default_start_date(frequency, today)
    elif isinstance(start_date, str):
        start = parse_iso_date(start_date)
    else:
        start = start_date

    errors: List[str] = []
    date_error = validate_scheduled_date(start, today)
    if date_error:
        errors.append(date_error)
    if not payee_id and not payee_name:
        errors.append("Either payee_id or payee_name must be provided")

    monthly, annual = estimate_costs(amount_milliunits, frequency)
    try:
        occurrences = next_occurrences(start, frequency, occurrence_count)
    except (OverflowError, ValueError) as e:
        raise InvalidDateError(f"Date out of range: no {frequency} occurrences fit after {start.isoformat()}") from e

    return ScheduledPreview(
        valid=not errors,
        validation_errors=errors,
        amount_milliunits=amount_milliunits,
        frequency=frequency,
        frequency_label=DISPLAY_NAMES[frequency],
        start_date=start,
        next_occurrences=occurrences,
        estimated_monthly_milliunits=monthly,
        estimated_annual_milliunits=annual,
        payee_id=payee_id,
        payee_name=payee_name,
    )
