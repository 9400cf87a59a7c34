"""
User-facing notifications.

Budget create/update/delete outcomes are pushed here as plain
``{kind, message}`` events. Clients poll the list and dismiss items, which
removes them. How long a toast stays on screen is up to the client.
"""
from __future__ import annotations

import enum
import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx

from family_finance.core.config import settings

logger = logging.getLogger(__name__)


class NotificationKind(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


@dataclass
class Notification:
    kind: NotificationKind
    message: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationCenter:
    """Most recent notifications; the oldest is dropped once ``max_items`` is reached."""

    def __init__(self, max_items: int | None = None) -> None:
        self._items: deque[Notification] = deque(maxlen=max_items or settings.notification_max_items)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def push(self, kind: NotificationKind | str, message: str) -> Notification:
        item = Notification(kind=NotificationKind(kind), message=message)
        with self._lock:
            self._items.append(item)
        logger.info("notification kind=%s message=%s", item.kind.value, message)
        return item

    def success(self, message: str) -> Notification:
        return self.push(NotificationKind.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.push(NotificationKind.ERROR, message)

    def active(self) -> list[Notification]:
        with self._lock:
            return list(self._items)

    def dismiss(self, notification_id: str) -> bool:
        with self._lock:
            for n in self._items:
                if n.id == notification_id:
                    self._items.remove(n)
                    return True
        return False

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


notification_center = NotificationCenter()


def get_notification_center() -> NotificationCenter:
    return notification_center


async def send_slack(text: str) -> bool:
    if not settings.slack_webhook_url:
        return False
    try:
        async with httpx.AsyncClient(timeout=15) as c:
            r = await c.post(settings.slack_webhook_url, json={"text": text})
    except httpx.HTTPError:
        logger.exception("slack_delivery_failed")
        return False
    return r.status_code < 300
