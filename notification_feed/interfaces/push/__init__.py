"""Server side of the notification channel."""

from .server import NotificationPushServer, create_push_api, create_push_app

__all__ = ["NotificationPushServer", "create_push_api", "create_push_app"]
