from family_finance.services.budgeting.period import (
    PeriodKind,
    default_budget_dates,
    end_date_on_period_change,
    resolve_end_date,
)
from family_finance.services.budgeting.progress import (
    NEAR_LIMIT_PERCENT,
    OVER_BUDGET_PERCENT,
    WARNING_TEXT_PERCENT,
    BudgetProgress,
    StatusTier,
    evaluate,
)
from family_finance.services.budgeting.summary import BudgetSummary, BudgetTab, summarize

__all__ = [
    "NEAR_LIMIT_PERCENT",
    "OVER_BUDGET_PERCENT",
    "WARNING_TEXT_PERCENT",
    "BudgetProgress",
    "BudgetSummary",
    "BudgetTab",
    "PeriodKind",
    "StatusTier",
    "default_budget_dates",
    "end_date_on_period_change",
    "evaluate",
    "resolve_end_date",
    "summarize",
]
