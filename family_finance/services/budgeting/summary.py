from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol, TypeVar

from family_finance.services.budgeting.progress import is_active


class BudgetLike(Protocol):
    amount: float
    spent: float | None
    end_date: date


B = TypeVar("B", bound=BudgetLike)


class BudgetTab(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ALL = "all"


@dataclass(frozen=True)
class BudgetSummary:
    total_budgeted: float
    total_spent: float
    over_budget_count: int


def active_budgets(budgets: Iterable[B], now: date | datetime) -> list[B]:
    return [b for b in budgets if is_active(b.end_date, now)]


def summarize(budgets: Iterable[BudgetLike], now: date | datetime) -> BudgetSummary:
    """
    Totals over active budgets only. Over-budget counting compares the raw
    spend with the amount, so a budget at exactly 100% is not counted.
    """
    total_budgeted = 0.0
    total_spent = 0.0
    over = 0
    for b in active_budgets(budgets, now):
        spent = b.spent or 0.0
        total_budgeted += b.amount
        total_spent += spent
        if spent > b.amount:
            over += 1
    return BudgetSummary(total_budgeted=total_budgeted, total_spent=total_spent, over_budget_count=over)


def top_active(budgets: Iterable[B], now: date | datetime, limit: int = 3) -> tuple[list[B], int]:
    """First ``limit`` active budgets in the order given, plus how many were left out."""
    active = active_budgets(budgets, now)
    return active[:limit], max(len(active) - limit, 0)


def filter_budgets(budgets: Iterable[B], tab: BudgetTab | str, now: date | datetime) -> list[B]:
    tab = BudgetTab(tab)
    if tab is BudgetTab.ACTIVE:
        return active_budgets(budgets, now)
    if tab is BudgetTab.COMPLETED:
        return [b for b in budgets if not is_active(b.end_date, now)]
    return list(budgets)


def usage_ratio(budget: BudgetLike) -> float:
    """Uncapped spend / amount; 0 for a non-positive amount."""
    if budget.amount <= 0:
        return 0.0
    return (budget.spent or 0.0) / budget.amount


def rank_by_usage(budgets: Sequence[B]) -> list[B]:
    """Highest usage first; ties keep their original order."""
    return sorted(budgets, key=usage_ratio, reverse=True)
