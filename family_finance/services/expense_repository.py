from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import extract, func, select
from sqlalchemy.orm import Session

from family_finance.models.expense import Expense


def _scoped(q, account_id: UUID | None, from_date: date | None, to_date: date | None):
    if account_id:
        q = q.where(Expense.account_id == account_id)
    if from_date:
        q = q.where(Expense.date >= from_date)
    if to_date:
        q = q.where(Expense.date <= to_date)
    return q


def total_between(db: Session, account_id: UUID | None, from_date: date, to_date: date) -> float:
    q = _scoped(select(func.coalesce(func.sum(Expense.amount), 0)), account_id, from_date, to_date)
    return float(db.execute(q).scalar() or 0)


def totals_by_category(
    db: Session,
    account_id: UUID | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
) -> list[tuple[str, float, int]]:
    """(category, total, count), largest total first."""
    total = func.coalesce(func.sum(Expense.amount), 0)
    q = _scoped(
        select(Expense.category, total, func.count(Expense.id)).group_by(Expense.category),
        account_id,
        from_date,
        to_date,
    ).order_by(total.desc(), Expense.category)
    return [(c, float(t or 0), int(n)) for c, t, n in db.execute(q).all()]


def totals_by_month(
    db: Session,
    account_id: UUID | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
) -> list[tuple[int, int, float, int]]:
    """(year, month, total, count), oldest month first."""
    year = extract("year", Expense.date)
    month = extract("month", Expense.date)
    q = _scoped(
        select(year, month, func.coalesce(func.sum(Expense.amount), 0), func.count(Expense.id))
        .group_by(year, month)
        .order_by(year, month),
        account_id,
        from_date,
        to_date,
    )
    return [(int(y), int(m), float(t or 0), int(n)) for y, m, t, n in db.execute(q).all()]
