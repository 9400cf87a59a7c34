"""
Persistence for budgets. Every budget read comes back with ``spent`` filled in
from the expenses of the same account that fall inside the budget window and
match its category ("All" matches every category).
"""
from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from family_finance.models.budget import ALL_CATEGORIES, Budget
from family_finance.models.expense import Expense
from family_finance.schemas.budget import BudgetRead, BudgetWrite


def _matches_budget():
    return and_(
        Expense.account_id == Budget.account_id,
        Expense.date >= Budget.start_date,
        Expense.date <= Budget.end_date,
        or_(Budget.category == ALL_CATEGORIES, Expense.category == Budget.category),
    )


def _spent_column():
    return (
        select(func.coalesce(func.sum(Expense.amount), 0))
        .where(_matches_budget())
        .correlate(Budget)
        .scalar_subquery()
    )


def _to_read(row: Budget, spent) -> BudgetRead:
    out = BudgetRead.model_validate(row)
    out.spent = float(spent or 0)
    return out


def list_budgets(db: Session, account_id: UUID | None = None) -> list[BudgetRead]:
    """Budgets in creation order; sorting for display is the caller's job."""
    q = select(Budget, _spent_column().label("spent")).order_by(Budget.created_at, Budget.id)
    if account_id:
        q = q.where(Budget.account_id == account_id)
    return [_to_read(row, spent) for row, spent in db.execute(q).all()]


def get_budget(db: Session, budget_id: UUID) -> BudgetRead | None:
    q = select(Budget, _spent_column().label("spent")).where(Budget.id == budget_id)
    found = db.execute(q).first()
    if not found:
        return None
    row, spent = found
    return _to_read(row, spent)


def expenses_for_budget(db: Session, budget_id: UUID) -> list[Expense]:
    q = (
        select(Expense)
        .join(Budget, Budget.id == budget_id)
        .where(_matches_budget())
        .order_by(Expense.date.desc(), Expense.created_at.desc())
    )
    return db.execute(q).scalars().all()


def save_budget(db: Session, payload: BudgetWrite, budget_id: UUID | None = None) -> Budget | None:
    """Create, or overwrite every field of an existing budget. None if ``budget_id`` is unknown."""
    if budget_id is None:
        row = Budget()
        db.add(row)
    else:
        row = db.get(Budget, budget_id)
        if not row:
            return None
    row.account_id = payload.account_id
    row.name = payload.name
    row.amount = payload.amount
    row.category = payload.category
    row.period = payload.period.value
    row.start_date = payload.start_date
    row.end_date = payload.end_date
    row.notes = payload.notes
    db.commit()
    db.refresh(row)
    return row


def delete_budget(db: Session, budget_id: UUID) -> bool:
    row = db.get(Budget, budget_id)
    if not row:
        return False
    db.delete(row)
    db.commit()
    return True
