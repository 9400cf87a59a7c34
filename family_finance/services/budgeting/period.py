"""
Budget period resolution.

A budget's end date is derived from its start date and period kind. Custom
periods are never derived: the end date the user picked is kept as-is.
Overflow past the end of a month rolls forward (see ``add_months``), so
2024-01-31 + monthly is 2024-03-02 rather than the last day of February.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date

from family_finance.utils.dates import add_days, add_months, add_years


class PeriodKind(str, enum.Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: "str | PeriodKind") -> "PeriodKind":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown budget period: {value!r}")
        key = value.strip().lower()
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown budget period: {value!r}") from None


DEFAULT_PERIOD = PeriodKind.MONTHLY


def resolve_end_date(
    start_date: date,
    period: PeriodKind | str,
    previous_end_date: date | None = None,
) -> date | None:
    """
    End date for a budget starting on ``start_date``.

    Never validates that the result is after the start; the form does that on
    submit so half-edited values are allowed in between.
    """
    kind = PeriodKind.parse(period)
    if kind is PeriodKind.WEEKLY:
        return add_days(start_date, 7)
    if kind is PeriodKind.MONTHLY:
        return add_months(start_date, 1)
    if kind is PeriodKind.QUARTERLY:
        return add_months(start_date, 3)
    if kind is PeriodKind.YEARLY:
        return add_years(start_date, 1)
    return previous_end_date


def end_date_on_period_change(
    start_date: date | None,
    new_period: PeriodKind | str,
    current_end_date: date | None,
    *,
    edit_mode: bool = False,
) -> date | None:
    """
    End date after the period selector changes.

    Creating: recomputed from the current start date, except that switching to
    custom keeps whatever end date is already there. Editing: left untouched.
    """
    kind = PeriodKind.parse(new_period)
    if edit_mode or start_date is None:
        return current_end_date
    return resolve_end_date(start_date, kind, current_end_date)


@dataclass(frozen=True)
class BudgetDates:
    start_date: date
    end_date: date | None


def default_budget_dates(
    today: date,
    period: PeriodKind | str = DEFAULT_PERIOD,
    start_date: date | None = None,
    end_date: date | None = None,
) -> BudgetDates:
    """Fill in the dates of a new budget: start defaults to today, end is derived if unset."""
    start = start_date or today
    if end_date is not None:
        return BudgetDates(start, end_date)
    return BudgetDates(start, resolve_end_date(start, period))
