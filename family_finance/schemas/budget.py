from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from family_finance.schemas.expense import ExpenseRead
from family_finance.services.budgeting.period import DEFAULT_PERIOD, PeriodKind
from family_finance.services.budgeting.progress import StatusTier
from family_finance.utils.dates import parse_iso_date


class BudgetFormInput(BaseModel):
    """Raw create/edit form. Per-field checks happen in services.budgeting.forms."""

    account_id: UUID
    name: str = ""
    amount: str | float | None = None
    category: str = "all"
    period: PeriodKind = DEFAULT_PERIOD
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = None

    @field_validator("period", mode="before")
    @classmethod
    def _parse_period(cls, v):
        return PeriodKind.parse(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, v):
        # Blank inputs are reported per-field later, not as a schema error.
        return parse_iso_date(v)


class BudgetWrite(BaseModel):
    """Validated, normalized budget record ready to persist."""

    account_id: UUID
    name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    category: str
    period: PeriodKind
    start_date: date
    end_date: date
    notes: str | None = None


class BudgetRead(BaseModel):
    id: UUID
    account_id: UUID
    name: str
    amount: float
    category: str
    period: PeriodKind
    start_date: date
    end_date: date
    notes: str | None
    spent: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class BudgetProgressRead(BaseModel):
    percent_spent: float
    remaining: float
    status_tier: StatusTier
    is_active: bool
    color: str
    warning: str | None
    status_label: str


class BudgetWithProgress(BaseModel):
    budget: BudgetRead
    progress: BudgetProgressRead


class BudgetDetailResponse(BudgetWithProgress):
    badge_label: str
    badge_color: str
    days_remaining: int
    expenses: list[ExpenseRead]


class BudgetSummaryResponse(BaseModel):
    total_budgeted: float
    total_spent: float
    over_budget_count: int
    currency: str
    total_budgeted_display: str
    total_spent_display: str
    top: list[BudgetWithProgress]
    more_count: int


class BudgetOverviewRow(BaseModel):
    id: UUID
    name: str
    category: str
    amount: float
    spent: float
    remaining: float
    percent_used: float
    is_over_budget: bool
    color: str


class BudgetOverviewResponse(BaseModel):
    rows: list[BudgetOverviewRow]
    active_count: int
    over_budget_count: int
    total_spent: float


class PeriodEndPreview(BaseModel):
    start_date: date | None
    period: PeriodKind
    end_date: date | None
