"""Notification sink for Ploi client outcomes.

Notifier is an ABC so tests can record notifications without a UI.
MemoryNotifier logs each notification and keeps the most recent ones for
the panel's GET /notifications endpoint.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from datetime import UTC, datetime

from app.schemas.panel import Notification, NotificationStyle

log = logging.getLogger(__name__)


class Notifier(ABC):
    @abstractmethod
    async def notify(self, notification: Notification) -> None: ...

    async def success(self, title: str, message: str | None = None) -> Notification:
        notification = Notification(
            style=NotificationStyle.SUCCESS,
            title=title,
            message=message,
            created_at=datetime.now(UTC),
        )
        await self.notify(notification)
        return notification

    async def failure(self, title: str, message: str | None = None) -> Notification:
        notification = Notification(
            style=NotificationStyle.FAILURE,
            title=title,
            message=message,
            created_at=datetime.now(UTC),
        )
        await self.notify(notification)
        return notification


class MemoryNotifier(Notifier):
    def __init__(self, history: int = 50) -> None:
        self._recent: deque[Notification] = deque(maxlen=history)

    async def notify(self, notification: Notification) -> None:
        level = logging.WARNING
        if notification.style is NotificationStyle.SUCCESS:
            level = logging.INFO
        log.log(level, "%s: %s", notification.style.value, notification.title)
        self._recent.append(notification)

    def recent(self) -> list[Notification]:
        return list(self._recent)
