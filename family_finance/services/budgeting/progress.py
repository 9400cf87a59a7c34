"""
Budget progress evaluation: how much of a budget is used and what state it is in.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime

from family_finance.core.errors import InvalidBudgetAmount
from family_finance.utils.dates import as_date

# Color tier threshold for the progress bar.
NEAR_LIMIT_PERCENT = 75.0
# "Near limit" warning text threshold, distinct from the color tier.
WARNING_TEXT_PERCENT = 90.0
OVER_BUDGET_PERCENT = 100.0


class StatusTier(str, enum.Enum):
    ON_TRACK = "on-track"
    NEAR_LIMIT = "near-limit"
    OVER_BUDGET = "over-budget"
    EXPIRED = "expired"


TIER_COLORS: dict[StatusTier, str] = {
    StatusTier.ON_TRACK: "green",
    StatusTier.NEAR_LIMIT: "yellow",
    StatusTier.OVER_BUDGET: "red",
    StatusTier.EXPIRED: "gray",
}


@dataclass(frozen=True)
class BudgetProgress:
    percent_spent: float
    remaining: float
    status_tier: StatusTier
    is_active: bool


def is_active(end_date: date | datetime, now: date | datetime) -> bool:
    """A budget ending today is still active for the whole day."""
    return as_date(end_date) >= as_date(now)


def classify(percent_spent: float) -> StatusTier:
    if percent_spent >= OVER_BUDGET_PERCENT:
        return StatusTier.OVER_BUDGET
    if percent_spent >= NEAR_LIMIT_PERCENT:
        return StatusTier.NEAR_LIMIT
    return StatusTier.ON_TRACK


def evaluate(amount: float, spent: float | None, end_date: date | datetime, now: date | datetime) -> BudgetProgress:
    if amount is None or not amount > 0:
        raise InvalidBudgetAmount(f"Budget amount must be positive, got {amount!r}")
    spent = max(spent or 0.0, 0.0)
    percent = min(spent / amount * 100.0, OVER_BUDGET_PERCENT)
    remaining = max(amount - spent, 0.0)
    active = is_active(end_date, now)
    tier = classify(percent) if active else StatusTier.EXPIRED
    return BudgetProgress(percent_spent=percent, remaining=remaining, status_tier=tier, is_active=active)


def tier_color(tier: StatusTier) -> str:
    return TIER_COLORS[tier]


def warning_text(progress: BudgetProgress) -> str | None:
    """Short status line shown under the progress bar, or None when there is nothing to say."""
    if not progress.is_active:
        return "Budget period ended"
    if progress.percent_spent >= OVER_BUDGET_PERCENT:
        return "Over budget"
    if progress.percent_spent >= WARNING_TEXT_PERCENT:
        return "Near limit"
    return None


def list_status(progress: BudgetProgress) -> tuple[str, str]:
    """(label, color) for a row of the budget list."""
    if not progress.is_active:
        return "Completed", "gray"
    if progress.percent_spent >= OVER_BUDGET_PERCENT:
        return "Over Budget", "red"
    if progress.percent_spent >= WARNING_TEXT_PERCENT:
        return "Near Limit", "yellow"
    return "On Track", "green"


def detail_badge(progress: BudgetProgress) -> tuple[str, str]:
    """(label, color) for the budget detail header; splits on-track at 75%."""
    if not progress.is_active:
        return "Expired", "gray"
    if progress.percent_spent >= OVER_BUDGET_PERCENT:
        return "Over Budget", "red"
    if progress.percent_spent >= WARNING_TEXT_PERCENT:
        return "Near Limit", "yellow"
    if progress.percent_spent >= NEAR_LIMIT_PERCENT:
        return "On Track", "orange"
    return "Under Budget", "green"
