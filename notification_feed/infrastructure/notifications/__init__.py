"""Realtime helpers that keep local UI clients in sync with the feed."""

from .manager import FeedConnectionManager
from .publisher import (
    SNAPSHOT_MESSAGE_TYPE,
    SnapshotPublisher,
    serialize_notification,
    serialize_snapshot,
    snapshot_message,
)

__all__ = [
    "FeedConnectionManager",
    "SNAPSHOT_MESSAGE_TYPE",
    "SnapshotPublisher",
    "serialize_notification",
    "serialize_snapshot",
    "snapshot_message",
]
