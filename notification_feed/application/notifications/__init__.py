"""Client-side notification subsystem: store, ingestion, handshake and lifecycle."""

from .feed import FeedSnapshot, NotificationFeed, build_notification_feed
from .handshake import AuthenticationHandshake, HandshakeStatus
from .ingestion import NotificationIngestor
from .lifecycle import LifecycleController
from .store import DEFAULT_RETENTION_LIMIT, NotificationStore

__all__ = [
    "DEFAULT_RETENTION_LIMIT",
    "AuthenticationHandshake",
    "FeedSnapshot",
    "HandshakeStatus",
    "LifecycleController",
    "NotificationFeed",
    "NotificationIngestor",
    "NotificationStore",
    "build_notification_feed",
]
