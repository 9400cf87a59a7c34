from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, Field


class ExpenseCreate(BaseModel):
    account_id: UUID
    amount: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    date: dt.date
    notes: str | None = None


class ExpenseRead(ExpenseCreate):
    id: UUID
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    model_config = {"from_attributes": True}


class CategoryTotal(BaseModel):
    category: str
    total: float
    count: int


class MonthTotal(BaseModel):
    month: str  # YYYY-MM
    total: float
    count: int


class MonthlySpendingResponse(BaseModel):
    month_start: dt.date
    month_end: dt.date
    this_month: float
    last_month: float
    percentage_change: float
