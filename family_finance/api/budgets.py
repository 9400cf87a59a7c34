from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from family_finance.api.deps import get_today
from family_finance.core.config import settings
from family_finance.db.session import get_db
from family_finance.models.account import Account
from family_finance.schemas.budget import (
    BudgetDetailResponse,
    BudgetFormInput,
    BudgetOverviewResponse,
    BudgetOverviewRow,
    BudgetProgressRead,
    BudgetRead,
    BudgetSummaryResponse,
    BudgetWithProgress,
    PeriodEndPreview,
)
from family_finance.schemas.expense import ExpenseRead
from family_finance.services import budget_repository as repo
from family_finance.services.budgeting.forms import clean_budget_form
from family_finance.services.budgeting.period import PeriodKind, end_date_on_period_change
from family_finance.services.budgeting.progress import detail_badge, evaluate, list_status, tier_color, warning_text
from family_finance.services.budgeting.summary import (
    BudgetTab,
    active_budgets,
    filter_budgets,
    rank_by_usage,
    summarize,
    top_active,
)
from family_finance.services.notifications import NotificationCenter, get_notification_center
from family_finance.utils.currency import format_currency, round_currency
from family_finance.utils.dates import days_between

router = APIRouter(prefix="/budgets", tags=["budgets"])
logger = logging.getLogger(__name__)


def _progress(budget: BudgetRead, today: date) -> BudgetProgressRead:
    p = evaluate(budget.amount, budget.spent, budget.end_date, today)
    label, _ = list_status(p)
    return BudgetProgressRead(
        percent_spent=p.percent_spent,
        remaining=round_currency(p.remaining),
        status_tier=p.status_tier,
        is_active=p.is_active,
        color=tier_color(p.status_tier),
        warning=warning_text(p),
        status_label=label,
    )


def _with_progress(budget: BudgetRead, today: date) -> BudgetWithProgress:
    return BudgetWithProgress(budget=budget, progress=_progress(budget, today))


def _require_account(db: Session, account_id: UUID) -> Account:
    acc = db.get(Account, account_id)
    if not acc:
        raise HTTPException(status_code=404, detail="Account not found")
    return acc


def _persist(
    db: Session,
    notifications: NotificationCenter,
    form: BudgetFormInput,
    today: date,
    budget_id: UUID | None = None,
) -> BudgetWithProgress:
    action = "update" if budget_id else "create"
    payload = clean_budget_form(form, today, edit_mode=budget_id is not None)
    _require_account(db, payload.account_id)
    try:
        row = repo.save_budget(db, payload, budget_id)
        if row is None:
            raise HTTPException(status_code=404, detail="Budget not found")
        saved = repo.get_budget(db, row.id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("budget_%s_failed budget_id=%s", action, budget_id)
        notifications.error(f"Failed to {action} budget")
        raise HTTPException(status_code=500, detail=f"Failed to {action} budget") from None
    notifications.success(f"Budget {action}d successfully")
    logger.info("budget_%sd id=%s account=%s", action, saved.id, saved.account_id)
    return _with_progress(saved, today)


@router.get("", response_model=list[BudgetWithProgress])
def list_budgets(
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    account_id: UUID | None = Query(None),
    tab: BudgetTab = Query(BudgetTab.ALL),
) -> list[BudgetWithProgress]:
    budgets = filter_budgets(repo.list_budgets(db, account_id), tab, today)
    return [_with_progress(b, today) for b in budgets]


@router.post("", response_model=BudgetWithProgress, status_code=201)
def create_budget(
    payload: BudgetFormInput,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    notifications: NotificationCenter = Depends(get_notification_center),
) -> BudgetWithProgress:
    return _persist(db, notifications, payload, today)


@router.get("/summary", response_model=BudgetSummaryResponse)
def budget_summary(
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    account_id: UUID | None = Query(None),
) -> BudgetSummaryResponse:
    currency = settings.default_currency
    if account_id:
        currency = _require_account(db, account_id).base_currency
    budgets = repo.list_budgets(db, account_id)
    totals = summarize(budgets, today)
    top, more = top_active(budgets, today, limit=settings.summary_top_n)
    return BudgetSummaryResponse(
        total_budgeted=round_currency(totals.total_budgeted),
        total_spent=round_currency(totals.total_spent),
        over_budget_count=totals.over_budget_count,
        currency=currency,
        total_budgeted_display=format_currency(round_currency(totals.total_budgeted, 0), currency, 0),
        total_spent_display=format_currency(round_currency(totals.total_spent, 0), currency, 0),
        top=[_with_progress(b, today) for b in top],
        more_count=more,
    )


@router.get("/overview", response_model=BudgetOverviewResponse)
def budget_overview(
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    account_id: UUID | None = Query(None),
    show_all: bool = Query(False),
) -> BudgetOverviewResponse:
    budgets = repo.list_budgets(db, account_id)
    active = active_budgets(budgets, today)
    ranked = rank_by_usage(active)
    if not show_all:
        ranked = ranked[: settings.overview_top_n]
    rows: list[BudgetOverviewRow] = []
    for b in ranked:
        p = evaluate(b.amount, b.spent, b.end_date, today)
        rows.append(
            BudgetOverviewRow(
                id=b.id,
                name=b.name,
                category=b.category,
                amount=b.amount,
                spent=b.spent,
                remaining=round_currency(p.remaining),
                percent_used=round(p.percent_spent, 2),
                is_over_budget=b.spent > b.amount,
                color=tier_color(p.status_tier),
            )
        )
    totals = summarize(budgets, today)
    return BudgetOverviewResponse(
        rows=rows,
        active_count=len(active),
        over_budget_count=totals.over_budget_count,
        total_spent=round_currency(totals.total_spent),
    )


@router.get("/period-end", response_model=PeriodEndPreview)
def preview_period_end(
    period: PeriodKind = Query(...),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    edit_mode: bool = Query(False),
) -> PeriodEndPreview:
    """End date the form should show after the period selector changes."""
    new_end = end_date_on_period_change(start_date, period, end_date, edit_mode=edit_mode)
    return PeriodEndPreview(start_date=start_date, period=period, end_date=new_end)


@router.get("/{budget_id}", response_model=BudgetDetailResponse)
def get_budget(
    budget_id: UUID,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
) -> BudgetDetailResponse:
    budget = repo.get_budget(db, budget_id)
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")
    p = evaluate(budget.amount, budget.spent, budget.end_date, today)
    badge_label, badge_color = detail_badge(p)
    expenses = repo.expenses_for_budget(db, budget_id)
    return BudgetDetailResponse(
        budget=budget,
        progress=_progress(budget, today),
        badge_label=badge_label,
        badge_color=badge_color,
        days_remaining=max(days_between(today, budget.end_date), 0),
        expenses=[ExpenseRead.model_validate(e) for e in expenses],
    )


@router.put("/{budget_id}", response_model=BudgetWithProgress)
def update_budget(
    budget_id: UUID,
    payload: BudgetFormInput,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    notifications: NotificationCenter = Depends(get_notification_center),
) -> BudgetWithProgress:
    return _persist(db, notifications, payload, today, budget_id)


@router.delete("/{budget_id}", status_code=204)
def delete_budget(
    budget_id: UUID,
    db: Session = Depends(get_db),
    notifications: NotificationCenter = Depends(get_notification_center),
) -> None:
    try:
        deleted = repo.delete_budget(db, budget_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("budget_delete_failed budget_id=%s", budget_id)
        notifications.error("Failed to delete budget")
        raise HTTPException(status_code=500, detail="Failed to delete budget") from None
    if not deleted:
        raise HTTPException(status_code=404, detail="Budget not found")
    notifications.success("Budget deleted successfully")
