"""Utility helpers to push feed snapshots to websocket subscribers."""

from __future__ import annotations

import asyncio
from typing import Any

from anyio import from_thread

from notification_feed.application.notifications import FeedSnapshot
from notification_feed.domain.entities import Notification

from .manager import FeedConnectionManager

SNAPSHOT_MESSAGE_TYPE = "snapshot"


class SnapshotPublisher:
    """Serialize feed snapshots and schedule their delivery."""

    def __init__(self, manager: FeedConnectionManager) -> None:
        self._manager = manager

    def dispatch(self, snapshot: FeedSnapshot) -> None:
        """Schedule ``snapshot`` to be delivered to every connected UI."""

        if not len(self._manager):
            return

        message = snapshot_message(snapshot)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if hasattr(from_thread, "start_soon"):
                from_thread.start_soon(self._manager.broadcast, message)
            else:
                from_thread.run(self._manager.broadcast, message)
        else:
            loop.create_task(self._manager.broadcast(message))


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the JSON representation of ``notification`` used by the UI."""

    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "timestamp": notification.timestamp.isoformat(),
        "read": notification.read,
        "priority": notification.priority.value if notification.priority else None,
        "data": notification.data,
        "actions": [
            {"label": action.label, "action": action.action, "data": action.data}
            for action in notification.actions
        ],
    }


def serialize_snapshot(snapshot: FeedSnapshot) -> dict[str, Any]:
    """Return the JSON representation of a whole feed snapshot."""

    return {
        "notifications": [serialize_notification(n) for n in snapshot.notifications],
        "unreadCount": snapshot.unread_count,
        "isConnected": snapshot.is_connected,
        "connectionState": snapshot.connection_state.value,
    }


def snapshot_message(snapshot: FeedSnapshot) -> dict[str, Any]:
    """Wrap ``snapshot`` in the websocket envelope."""

    return {"type": SNAPSHOT_MESSAGE_TYPE, "data": serialize_snapshot(snapshot)}


__all__ = [
    "SNAPSHOT_MESSAGE_TYPE",
    "SnapshotPublisher",
    "serialize_notification",
    "serialize_snapshot",
    "snapshot_message",
]
