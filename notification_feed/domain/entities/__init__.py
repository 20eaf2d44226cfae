"""Domain entities exposed by the application."""

from .connection import ConnectionState
from .identity import Identity
from .notification import Notification, NotificationAction, NotificationPriority

__all__ = [
    "ConnectionState",
    "Identity",
    "Notification",
    "NotificationAction",
    "NotificationPriority",
]
