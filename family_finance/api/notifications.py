from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from family_finance.api.deps import get_today
from family_finance.core.config import settings
from family_finance.db.session import get_db
from family_finance.schemas.notification import (
    BudgetAlertItem,
    NotificationCheckResponse,
    NotificationListResponse,
    NotificationRead,
)
from family_finance.services import budget_repository as repo
from family_finance.services.budgeting.progress import StatusTier, evaluate, warning_text
from family_finance.services.budgeting.summary import active_budgets
from family_finance.services.notifications import NotificationCenter, get_notification_center, send_slack
from family_finance.utils.currency import format_currency

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _fmt(items: list[BudgetAlertItem]) -> str:
    if not items:
        return "No active alerts."
    return "\n".join(f"- [{i.level.upper()}] {i.title}: {i.message}" for i in items)


def budget_alerts(db: Session, today: date, account_id: UUID | None = None) -> list[BudgetAlertItem]:
    items: list[BudgetAlertItem] = []
    for b in active_budgets(repo.list_budgets(db, account_id), today):
        p = evaluate(b.amount, b.spent, b.end_date, today)
        text = warning_text(p)
        if not text:
            continue
        level = "error" if p.status_tier is StatusTier.OVER_BUDGET else "warning"
        items.append(
            BudgetAlertItem(
                level=level,
                title=b.name,
                message=f"{text}: {format_currency(b.spent)} of {format_currency(b.amount)} spent",
            )
        )
    return items


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    notifications: NotificationCenter = Depends(get_notification_center),
) -> NotificationListResponse:
    return NotificationListResponse(
        items=[NotificationRead.model_validate(n) for n in notifications.active()],
        ttl_seconds=settings.notification_ttl_seconds,
    )


@router.post("/{notification_id}/dismiss", status_code=204)
def dismiss_notification(
    notification_id: str,
    notifications: NotificationCenter = Depends(get_notification_center),
) -> None:
    if not notifications.dismiss(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")


@router.delete("", status_code=204)
def clear_notifications(
    notifications: NotificationCenter = Depends(get_notification_center),
) -> None:
    notifications.clear()


@router.post("/check", response_model=NotificationCheckResponse)
async def check_notifications(
    deliver: bool = True,
    account_id: UUID | None = Query(None),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
) -> NotificationCheckResponse:
    items = budget_alerts(db, today, account_id)
    delivered: list[str] = []
    if deliver and items:
        if await send_slack("Budget alerts\n" + _fmt(items)):
            delivered.append("slack")
    return NotificationCheckResponse(items=items, delivered=delivered)
