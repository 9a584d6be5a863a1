"""
Date manipulation utilities

Two date universes are kept apart:

- LocalDate: anything a person typed or reads ("today", "past 30 days",
  the forecast day loop). Derived from the server's local clock.
- UtcDate: anything that must not depend on the server timezone (month keys,
  recurrence intervals, scheduled-date validation). Derived from UTC.

Both are plain datetime.date values at runtime; the NewType wrappers make
the universe of each function signature explicit to type checkers.
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import List, NewType, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from ledger_insights.domain.exceptions import InvalidDateError, InvalidDateExpressionError
from ledger_insights.domain.frequencies import CALENDAR_STEPS, validate_frequency

LocalDate = NewType("LocalDate", date)
UtcDate = NewType("UtcDate", date)

DateLike = Union[str, date, datetime]

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_RELATIVE_RE = re.compile(r"^(?:past|last)\s+(\d+)\s+(day|week|month|year)s?$")


def local_today() -> LocalDate:
    """Today's date on the server's local clock"""
    return LocalDate(date.today())


def utc_today() -> UtcDate:
    """Today's date in UTC"""
    return UtcDate(datetime.now(timezone.utc).date())


def is_valid_iso_date(value: str) -> bool:
    """True for a real calendar date in YYYY-MM-DD form (rejects 2024-02-30)"""
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_iso_date(value: str) -> date:
    """
    Parse a strict YYYY-MM-DD string.

    Raises:
        InvalidDateError: not in YYYY-MM-DD form or not a real calendar date
    """
    if not is_valid_iso_date(value):
        raise InvalidDateError(f"Invalid date: {value!r}. Expected a calendar date in YYYY-MM-DD format.")
    return date.fromisoformat(value)


def format_date(value: date) -> str:
    return value.isoformat()


def _to_utc_day(value: DateLike) -> date:
    if isinstance(value, str):
        return parse_iso_date(value)
    if isinstance(value, datetime):
        # Naive datetimes are taken as already being UTC wall time
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def days_between(start: DateLike, end: DateLike) -> int:
    """
    Absolute number of days between two dates.

    Both operands are reduced to their UTC calendar day first, so DST
    transitions in the server timezone never shift the result by one.
    """
    return abs((_to_utc_day(end) - _to_utc_day(start)).days)


def parse_relative_expression(expression: str, today: Optional[LocalDate] = None) -> str:
    """
    Resolve a natural-language date expression to YYYY-MM-DD (local universe).

    Supported:
    - "today", "yesterday"
    - "this week", "last week": start of week (Sunday)
    - "this month", "last month": first of the month
    - "this year", "last year": January 1st
    - "past|last N days", "past|last N weeks": N (or N*7) days ago
    - "past|last N months": first of the month N months ago
    - "past|last N years": same day N years ago (Feb 29 becomes Feb 28)
    - ISO dates (YYYY-MM-DD), validated and passed through

    Raises:
        InvalidDateExpressionError: the expression is not recognised
    """
    if not isinstance(expression, str):
        raise InvalidDateExpressionError(f"Unrecognized date format: {expression!r}")

    normalized = " ".join(expression.lower().split())
    today = today or local_today()

    if is_valid_iso_date(normalized):
        return normalized

    # date.weekday() is Monday=0; weeks here start on Sunday
    days_since_sunday = (today.weekday() + 1) % 7

    if normalized == "today":
        return format_date(today)
    if normalized == "yesterday":
        return format_date(today - timedelta(days=1))
    if normalized == "this week":
        return format_date(today - timedelta(days=days_since_sunday))
    if normalized == "last week":
        return format_date(today - timedelta(days=days_since_sunday + 7))
    if normalized == "this month":
        return format_date(today.replace(day=1))
    if normalized == "last month":
        return format_date(today.replace(day=1) - relativedelta(months=1))
    if normalized == "this year":
        return format_date(date(today.year, 1, 1))
    if normalized == "last year":
        return format_date(date(today.year - 1, 1, 1))

    match = _RELATIVE_RE.match(normalized)
    if match:
        count = int(match.group(1))
        unit = match.group(2)
        try:
            if unit == "day":
                return format_date(today - timedelta(days=count))
            if unit == "week":
                return format_date(today - timedelta(weeks=count))
            if unit == "month":
                # Clamp to day 1 first so Mar 31 - 1 month never overflows into March
                return format_date(today.replace(day=1) - relativedelta(months=count))
            return format_date(today - relativedelta(years=count))
        except (OverflowError, ValueError) as e:
            raise InvalidDateExpressionError(f"Date expression out of range: {expression!r}") from e

    raise InvalidDateExpressionError(
        f'Unrecognized date format: "{expression}". Use ISO format (YYYY-MM-DD) or natural '
        f'language like "past 7 days", "this month", "last week".'
    )


def get_date_range(expression: str, today: Optional[LocalDate] = None) -> Tuple[str, str]:
    """(start, end) for an expression, ending today (local universe)"""
    today = today or local_today()
    return parse_relative_expression(expression, today=today), format_date(today)


def add_calendar_step(value: date, frequency: str) -> date:
    """
    Advance a date by one period of a frequency code using calendar fields.

    "monthly" moves the month field (Jan 31 -> Feb 28/29), "yearly" the year
    field. "never" returns the date unchanged.

    Raises:
        UnsupportedFrequencyError: unknown frequency code
    """
    return value + CALENDAR_STEPS[validate_frequency(frequency)]


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def month_start(value: date) -> date:
    return value.replace(day=1)


def month_key(value: DateLike) -> str:
    """Month bucket key ("YYYY-MM-01") in the UTC universe"""
    return format_date(month_start(_to_utc_day(value)))


def trailing_month_starts(count: int, today: Optional[UtcDate] = None) -> List[str]:
    """The last `count` month keys including the current month, oldest first"""
    first = month_start(today or utc_today())
    return [format_date(first - relativedelta(months=offset)) for offset in range(count - 1, -1, -1)]


def months_ago(months: int, today: Optional[UtcDate] = None) -> UtcDate:
    """Same day `months` months back (clamped to month end), UTC universe"""
    return UtcDate((today or utc_today()) - relativedelta(months=months))
