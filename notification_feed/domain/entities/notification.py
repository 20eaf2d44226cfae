"""Domain entity representing a notification delivered to the feed."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any


class NotificationPriority(str, Enum):
    """Optional display hint. It never changes the feed ordering."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class NotificationAction:
    """Follow-up the UI may offer for a notification."""

    label: str
    action: str
    data: Any = None


@dataclass(frozen=True)
class Notification:
    """Information message pushed to the current user.

    Records are immutable; reading a notification produces a copy with
    ``read`` set.
    """

    id: str
    type: str
    title: str
    message: str
    timestamp: datetime
    read: bool = False
    priority: NotificationPriority | None = None
    data: Any = None
    actions: tuple[NotificationAction, ...] = ()

    def as_unread(self) -> "Notification":
        """Return this notification with ``read`` cleared."""

        return self if not self.read else replace(self, read=False)

    def as_read(self) -> "Notification":
        """Return this notification with ``read`` set."""

        return self if self.read else replace(self, read=True)


__all__ = ["Notification", "NotificationAction", "NotificationPriority"]
