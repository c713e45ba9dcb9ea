"""User-facing outcome notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Protocol

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    CONFIRMATION_EXPIRED = "confirmation_expired"
    PRECONDITION_FAILED = "precondition_failed"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    message: str
    details: Mapping[str, Any] = field(default_factory=dict)


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        ...


class LoggingNotifier:
    """Writes notifications to the application log."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def notify(self, notification: Notification) -> None:
        level = logging.INFO if notification.kind is NotificationKind.SUCCESS else logging.WARNING
        self._log.log(
            level,
            "[%s] %s: %s",
            notification.kind.value,
            notification.title,
            notification.message,
        )


class RecordingNotifier:
    """Keeps notifications in memory, in delivery order."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def of_kind(self, kind: NotificationKind) -> list[Notification]:
        return [n for n in self.notifications if n.kind is kind]

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        self.notifications.clear()
