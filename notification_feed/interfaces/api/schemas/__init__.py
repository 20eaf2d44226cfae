from .notification import FeedSnapshotRead, NotificationActionRead, NotificationRead
from .session import ConnectionStatusRead, SessionRequest

__all__ = [
    "ConnectionStatusRead",
    "FeedSnapshotRead",
    "NotificationActionRead",
    "NotificationRead",
    "SessionRequest",
]
