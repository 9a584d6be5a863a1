"""Unit tests for occurrence projection and scheduled-transaction preview"""

import pytest
from datetime import date, timedelta
from ledger_insights.domain.exceptions import (
    InvalidAmountError,
    InvalidDateError,
    UnsupportedFrequencyError,
)
from ledger_insights.domain.frequencies import FREQUENCIES
from ledger_insights.domain.models import RecurringPayment, ScheduledTransaction
from ledger_insights.domain.projection import (
    approximate_interval_days,
    default_start_date,
    estimate_costs,
    next_occurrences,
    preview_scheduled_transaction,
    project_forecast_items,
    scheduled_from_recurring,
    validate_scheduled_date,
)

TODAY = date(2026, 1, 15)


def _scheduled(date_next, amount, frequency, payee_name="Payee", deleted=False):
    return ScheduledTransaction(
        scheduled_id=f"sched_{payee_name}",
        account_id="acct",
        date_next=date_next,
        amount_milliunits=amount,
        frequency=frequency,
        payee_name=payee_name,
        deleted=deleted,
    )


def test_next_occurrences_calendar_steps():
    assert next_occurrences(date(2024, 1, 31), "monthly", 3) == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 29),  # each step clamps from the previous date
    ]
    assert next_occurrences(date(2026, 1, 1), "weekly", 3) == [date(2026, 1, 1), date(2026, 1, 8), date(2026, 1, 15)]
    assert next_occurrences(date(2026, 1, 1), "never", 3) == [date(2026, 1, 1)]
    assert next_occurrences(date(2026, 1, 1), "yearly", 0) == []


def test_approximate_interval_days_table():
    expected = {
        "never": 0,
        "daily": 1,
        "weekly": 7,
        "everyOtherWeek": 14,
        "twiceAMonth": 15,
        "every4Weeks": 28,
        "monthly": 30,
        "everyOtherMonth": 60,
        "every3Months": 90,
        "every4Months": 120,
        "twiceAYear": 180,
        "yearly": 365,
        "everyOtherYear": 730,
    }
    assert {code: approximate_interval_days(code) for code in FREQUENCIES} == expected


def test_unknown_frequency_raises():
    with pytest.raises(UnsupportedFrequencyError, match="fortnightly"):
        approximate_interval_days("fortnightly")


def test_project_forecast_items_fixed_day_counts():
    """Monthly repeats every 30 days, not on the same day of month"""
    items = project_forecast_items([_scheduled(date(2026, 1, 31), -100000, "monthly")], TODAY, date(2026, 4, 15))
    assert [i.date for i in items] == [date(2026, 1, 31), date(2026, 3, 2), date(2026, 4, 1)]
    assert all(i.type == "expense" and i.frequency_label == "Monthly" for i in items)


def test_project_forecast_items_window_and_order():
    scheduled = [
        _scheduled(date(2026, 1, 10), -5000, "weekly", payee_name="Gym"),  # starts before today
        _scheduled(date(2026, 1, 20), 200000, "never", payee_name="Refund"),
        _scheduled(date(2026, 3, 1), -9000, "monthly", payee_name="Too Late"),
        _scheduled(date(2026, 1, 16), -1000, "daily", payee_name="Gone", deleted=True),
    ]

    items = project_forecast_items(scheduled, TODAY, date(2026, 1, 31))

    assert [(i.date, i.payee_name) for i in items] == [
        (date(2026, 1, 17), "Gym"),
        (date(2026, 1, 20), "Refund"),
        (date(2026, 1, 24), "Gym"),
        (date(2026, 1, 31), "Gym"),
    ]
    refund = items[1]
    assert refund.type == "income"
    assert refund.frequency_label == "One-time"


def test_estimate_costs():
    assert estimate_costs(-10000, "weekly") == (43300, 519600)
    assert estimate_costs(10000, "monthly") == (10000, 120000)
    assert estimate_costs(-120000, "yearly") == (10000, 120000)
    assert estimate_costs(-28000, "every4Weeks") == (30000, 360000)
    assert estimate_costs(-10000, "never") == (0, 0)
    assert estimate_costs(-1000, "daily") == (30000, 360000)


def test_scheduled_from_recurring():
    payments = [
        RecurringPayment(
            payee_id="p1",
            payee_name="StreamFlix",
            category_name="Subscriptions",
            frequency="biweekly",
            confidence="high",
            occurrence_count=5,
            average_amount_milliunits=15990,
            total_milliunits=79950,
            monthly_cost_milliunits=34698,
            mean_interval_days=14.0,
            last_date=date(2026, 1, 10),
            next_expected=date(2026, 1, 24),
        ),
        RecurringPayment(
            payee_id="p2",
            payee_name="Lapsed Gym",
            category_name=None,
            frequency="monthly",
            confidence="high",
            occurrence_count=3,
            average_amount_milliunits=30000,
            total_milliunits=90000,
            monthly_cost_milliunits=30000,
            mean_interval_days=30.0,
            last_date=date(2025, 6, 1),
            next_expected=None,
        ),
    ]

    scheduled = scheduled_from_recurring(payments)

    assert len(scheduled) == 1
    assert scheduled[0].frequency == "everyOtherWeek"
    assert scheduled[0].amount_milliunits == -15990
    assert scheduled[0].date_next == date(2026, 1, 24)
    assert scheduled_from_recurring(payments, direction="inflow")[0].amount_milliunits == 15990


def test_default_start_date():
    assert default_start_date("weekly", TODAY) == date(2026, 1, 22)
    assert default_start_date("monthly", TODAY) == date(2026, 2, 15)
    assert default_start_date("twiceAMonth", TODAY) == date(2026, 2, 15)
    assert default_start_date("never", TODAY) == date(2026, 2, 15)


def test_validate_scheduled_date():
    assert validate_scheduled_date(TODAY, TODAY) == "Date must be in the future"
    assert validate_scheduled_date(TODAY + timedelta(days=1), TODAY) is None
    assert validate_scheduled_date(date(2031, 1, 15), TODAY) is None
    assert validate_scheduled_date(date(2031, 1, 16), TODAY) == "Date must be within 5 years from today"


def test_preview_scheduled_transaction():
    preview = preview_scheduled_transaction(
        "-15.99",
        "monthly",
        start_date="2026-01-31",
        payee_name="StreamFlix",
        today=TODAY,
    )

    assert preview.valid is True
    assert preview.validation_errors == []
    assert preview.amount_milliunits == -15990
    assert preview.frequency_label == "Monthly"
    assert preview.next_occurrences == [date(2026, 1, 31), date(2026, 2, 28), date(2026, 3, 28)]
    assert preview.estimated_monthly_milliunits == 15990
    assert preview.estimated_annual_milliunits == 191880


def test_preview_collects_business_rule_errors():
    """Past dates and a missing payee are reported, not raised"""
    preview = preview_scheduled_transaction(-50, "weekly", start_date=date(2025, 12, 1), today=TODAY)

    assert preview.valid is False
    assert preview.validation_errors == [
        "Date must be in the future",
        "Either payee_id or payee_name must be provided",
    ]
    assert preview.estimated_monthly_milliunits == 216500


def test_preview_rejects_malformed_input():
    with pytest.raises(InvalidDateError):
        preview_scheduled_transaction("-10", "monthly", start_date="2026-02-30", payee_name="X", today=TODAY)
    with pytest.raises(InvalidAmountError):
        preview_scheduled_transaction("ten", "monthly", payee_name="X", today=TODAY)
    with pytest.raises(UnsupportedFrequencyError):
        preview_scheduled_transaction("-10", "hourly", payee_name="X", today=TODAY)


def test_preview_start_near_end_of_calendar_raises():
    """A start date with no room for later occurrences is a date error"""
    with pytest.raises(InvalidDateError, match="out of range"):
        preview_scheduled_transaction("-10", "yearly", start_date="9999-06-01", payee_name="X", today=TODAY)
    with pytest.raises(InvalidDateError, match="out of range"):
        preview_scheduled_transaction("-10", "daily", start_date="9999-12-31", payee_name="X", today=TODAY)
