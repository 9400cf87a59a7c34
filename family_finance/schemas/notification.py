from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from family_finance.services.notifications import NotificationKind


class NotificationRead(BaseModel):
    id: str
    kind: NotificationKind
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    items: list[NotificationRead]
    ttl_seconds: int


class BudgetAlertItem(BaseModel):
    level: str
    title: str
    message: str


class NotificationCheckResponse(BaseModel):
    items: list[BudgetAlertItem]
    delivered: list[str]
