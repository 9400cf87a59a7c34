"""
Calendar helpers shared by the budget core and the API layer.

Dates cross the HTTP/persistence boundary as ISO-8601 strings and are handled
as ``datetime.date`` everywhere else. Nothing here reads the system clock; the
caller always passes the reference date.
"""
from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta


def as_date(value: date | datetime) -> date:
    """Reduce a datetime to its calendar date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_iso_date(value: str | date | datetime | None) -> date | None:
    """
    Parse ``YYYY-MM-DD`` or a full ISO timestamp (``2024-01-15T00:00:00.000Z``).
    Returns None for empty input; raises ValueError on garbage.
    """
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return as_date(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    return as_date(datetime.fromisoformat(text.replace("Z", "+00:00")))


def to_iso_date(d: date | datetime) -> str:
    return as_date(d).isoformat()


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def add_months(d: date, months: int) -> date:
    """
    Add calendar months keeping the day-of-month and rolling any overflow
    into the following month: 2024-01-31 + 1 month -> 2024-03-02.
    """
    total = d.month - 1 + months
    year = d.year + total // 12
    month = total % 12 + 1
    return date(year, month, 1) + timedelta(days=d.day - 1)


def add_years(d: date, years: int) -> date:
    """Same overflow rule as add_months: 2024-02-29 + 1 year -> 2025-03-01."""
    return add_months(d, 12 * years)


def month_range(reference: date) -> tuple[date, date]:
    """(first_day, last_day) of the month containing ``reference``."""
    last_day = calendar.monthrange(reference.year, reference.month)[1]
    return reference.replace(day=1), reference.replace(day=last_day)


def previous_month_range(reference: date) -> tuple[date, date]:
    last_prev = reference.replace(day=1) - timedelta(days=1)
    return month_range(last_prev)


def days_between(start: date, end: date) -> int:
    return (as_date(end) - as_date(start)).days
