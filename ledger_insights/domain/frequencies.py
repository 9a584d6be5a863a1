"""Scheduled-transaction frequency codes and their per-code constants"""

from fractions import Fraction
from typing import Dict, Tuple

from dateutil.relativedelta import relativedelta

from ledger_insights.domain.exceptions import UnsupportedFrequencyError

FREQUENCIES: Tuple[str, ...] = (
    "never",
    "daily",
    "weekly",
    "everyOtherWeek",
    "twiceAMonth",
    "every4Weeks",
    "monthly",
    "everyOtherMonth",
    "every3Months",
    "every4Months",
    "twiceAYear",
    "yearly",
    "everyOtherYear",
)

# True calendar increments, used when generating dates a user will see
CALENDAR_STEPS: Dict[str, relativedelta] = {
    "never": relativedelta(),
    "daily": relativedelta(days=1),
    "weekly": relativedelta(weeks=1),
    "everyOtherWeek": relativedelta(weeks=2),
    "twiceAMonth": relativedelta(days=15),
    "every4Weeks": relativedelta(weeks=4),
    "monthly": relativedelta(months=1),
    "everyOtherMonth": relativedelta(months=2),
    "every3Months": relativedelta(months=3),
    "every4Months": relativedelta(months=4),
    "twiceAYear": relativedelta(months=6),
    "yearly": relativedelta(years=1),
    "everyOtherYear": relativedelta(years=2),
}

# Fixed day counts for the cash-flow forecast (monthly = 30)
APPROX_INTERVAL_DAYS: Dict[str, int] = {
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

# Occurrences per month, for monthly/annual cost estimates
MONTHLY_MULTIPLIERS: Dict[str, Fraction] = {
    "never": Fraction(0),
    "daily": Fraction(30),
    "weekly": Fraction("4.33"),
    "everyOtherWeek": Fraction("2.17"),
    "twiceAMonth": Fraction(2),
    "every4Weeks": Fraction(30, 28),
    "monthly": Fraction(1),
    "everyOtherMonth": Fraction(1, 2),
    "every3Months": Fraction(1, 3),
    "every4Months": Fraction(1, 4),
    "twiceAYear": Fraction(1, 6),
    "yearly": Fraction(1, 12),
    "everyOtherYear": Fraction(1, 24),
}

# Short labels shown next to forecast items
FORECAST_LABELS: Dict[str, str] = {
    "never": "One-time",
    "daily": "Daily",
    "weekly": "Weekly",
    "everyOtherWeek": "Bi-weekly",
    "twiceAMonth": "Twice monthly",
    "every4Weeks": "Every 4 weeks",
    "monthly": "Monthly",
    "everyOtherMonth": "Every 2 months",
    "every3Months": "Quarterly",
    "every4Months": "Every 4 months",
    "twiceAYear": "Twice yearly",
    "yearly": "Yearly",
    "everyOtherYear": "Every 2 years",
}

DISPLAY_NAMES: Dict[str, str] = {
    "never": "One-time",
    "daily": "Daily",
    "weekly": "Weekly",
    "everyOtherWeek": "Every Other Week",
    "twiceAMonth": "Twice a Month",
    "every4Weeks": "Every 4 Weeks",
    "monthly": "Monthly",
    "everyOtherMonth": "Every Other Month",
    "every3Months": "Quarterly",
    "every4Months": "Every 4 Months",
    "twiceAYear": "Twice a Year",
    "yearly": "Yearly",
    "everyOtherYear": "Every Other Year",
}

# Detected recurrence class -> frequency code used to project it forward
DETECTED_TO_FREQUENCY: Dict[str, str] = {
    "weekly": "weekly",
    "biweekly": "everyOtherWeek",
    "monthly": "monthly",
    "quarterly": "every3Months",
    "annual": "yearly",
    "irregular": "never",
}


def validate_frequency(frequency: str) -> str:
    """Return the code unchanged, or raise for anything outside FREQUENCIES"""
    if frequency not in FREQUENCIES:
        raise UnsupportedFrequencyError(
            f"Unsupported frequency: {frequency!r}. Expected one of: {', '.join(FREQUENCIES)}"
        )
    return frequency
