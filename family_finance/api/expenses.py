from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from family_finance.api.deps import get_today
from family_finance.db.session import get_db
from family_finance.models.account import Account
from family_finance.models.expense import Expense
from family_finance.schemas.expense import (
    CategoryTotal,
    ExpenseCreate,
    ExpenseRead,
    MonthlySpendingResponse,
    MonthTotal,
)
from family_finance.services import expense_repository as repo
from family_finance.utils.currency import calculate_percentage_change, round_currency
from family_finance.utils.dates import month_range, previous_month_range

router = APIRouter(prefix="/expenses", tags=["expenses"])
logger = logging.getLogger(__name__)


def _apply(row: Expense, payload: ExpenseCreate) -> None:
    row.account_id = payload.account_id
    row.amount = round_currency(payload.amount)
    row.category = payload.category.strip()
    row.description = payload.description.strip()
    row.date = payload.date
    row.notes = (payload.notes or "").strip() or None


def _require_account(db: Session, account_id: UUID) -> None:
    if not db.get(Account, account_id):
        raise HTTPException(status_code=404, detail="Account not found")


@router.get("", response_model=list[ExpenseRead])
def list_expenses(
    db: Session = Depends(get_db),
    account_id: UUID | None = Query(None),
    category: str | None = Query(None),
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[ExpenseRead]:
    q = select(Expense).order_by(Expense.date.desc(), Expense.created_at.desc())
    if account_id:
        q = q.where(Expense.account_id == account_id)
    if category:
        q = q.where(Expense.category == category.strip())
    if from_date:
        q = q.where(Expense.date >= from_date)
    if to_date:
        q = q.where(Expense.date <= to_date)
    rows = db.execute(q.offset(skip).limit(limit)).scalars().all()
    return [ExpenseRead.model_validate(r) for r in rows]


@router.post("", response_model=ExpenseRead, status_code=201)
def create_expense(payload: ExpenseCreate, db: Session = Depends(get_db)) -> ExpenseRead:
    _require_account(db, payload.account_id)
    row = Expense()
    _apply(row, payload)
    db.add(row)
    db.commit()
    db.refresh(row)
    return ExpenseRead.model_validate(row)


@router.get("/monthly", response_model=MonthlySpendingResponse)
def monthly_spending(
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    account_id: UUID | None = Query(None),
) -> MonthlySpendingResponse:
    """Month-to-date spending against the whole previous month."""
    first, last = month_range(today)
    prev_first, prev_last = previous_month_range(today)
    this_month = round_currency(repo.total_between(db, account_id, first, today))
    last_month = round_currency(repo.total_between(db, account_id, prev_first, prev_last))
    return MonthlySpendingResponse(
        month_start=first,
        month_end=last,
        this_month=this_month,
        last_month=last_month,
        percentage_change=calculate_percentage_change(last_month, this_month),
    )


@router.get("/by-category", response_model=list[CategoryTotal])
def spending_by_category(
    db: Session = Depends(get_db),
    account_id: UUID | None = Query(None),
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
) -> list[CategoryTotal]:
    rows = repo.totals_by_category(db, account_id, from_date, to_date)
    return [CategoryTotal(category=c, total=round_currency(t), count=n) for c, t, n in rows]


@router.get("/by-month", response_model=list[MonthTotal])
def spending_by_month(
    db: Session = Depends(get_db),
    account_id: UUID | None = Query(None),
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
) -> list[MonthTotal]:
    rows = repo.totals_by_month(db, account_id, from_date, to_date)
    return [MonthTotal(month=f"{y:04d}-{m:02d}", total=round_currency(t), count=n) for y, m, t, n in rows]


@router.put("/{expense_id}", response_model=ExpenseRead)
def update_expense(expense_id: UUID, payload: ExpenseCreate, db: Session = Depends(get_db)) -> ExpenseRead:
    row = db.get(Expense, expense_id)
    if not row:
        raise HTTPException(status_code=404, detail="Expense not found")
    _require_account(db, payload.account_id)
    _apply(row, payload)
    db.commit()
    db.refresh(row)
    logger.info("expense_updated id=%s account=%s", row.id, row.account_id)
    return ExpenseRead.model_validate(row)


@router.delete("/{expense_id}", status_code=204)
def delete_expense(expense_id: UUID, db: Session = Depends(get_db)) -> None:
    row = db.get(Expense, expense_id)
    if not row:
        raise HTTPException(status_code=404, detail="Expense not found")
    db.delete(row)
    db.commit()
