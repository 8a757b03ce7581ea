"""
Transient user-visible notifications.

Failures of remote calls never propagate to the front end as exceptions;
they are turned into notifications here and the UI stays interactive.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from taskboard.config import get_settings
from taskboard.exceptions import TaskboardException
from taskboard.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Notification:
    """A single toast-style message."""
    level: str  # "info" | "warning" | "error"
    error: str | None  # Error code of the failure, None for plain info
    message: str
    created_at: datetime = field(default_factory=datetime.now)


def notification_from_exception(exc: TaskboardException) -> Notification:
    """Build the notification shown for a failed operation."""
    level = "warning" if exc.error_code == "invalid_target" else "error"
    return Notification(level=level, error=exc.error_code, message=exc.message)


class Notifier:
    """Bounded queue of pending notifications plus listener fan-out."""

    def __init__(self, limit: int | None = None):
        self._pending: deque[Notification] = deque(
            maxlen=limit or get_settings().notification_limit
        )
        self._listeners: list[Callable[[Notification], None]] = []

    def subscribe(self, listener: Callable[[Notification], None]) -> None:
        self._listeners.append(listener)

    def push(self, notification: Notification) -> None:
        self._pending.append(notification)
        for listener in self._listeners:
            listener(notification)

    def info(self, message: str) -> None:
        self.push(Notification(level="info", error=None, message=message))

    def failure(self, exc: TaskboardException) -> None:
        """Surface a failed operation to the user."""
        logger.debug(f"Notifying {exc.error_code}: {exc.message}")
        self.push(notification_from_exception(exc))

    def drain(self) -> list[Notification]:
        """Pop every pending notification, oldest first."""
        items = list(self._pending)
        self._pending.clear()
        return items

    def __len__(self) -> int:
        return len(self._pending)
