"""Utility helpers to push notifications to authenticated Socket.IO sessions."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

import socketio
from anyio import from_thread

from notification_feed.domain.entities import Notification
from notification_feed.schemas import NOTIFICATION_EVENT, NotificationMessage

from .registry import target_rooms

logger = logging.getLogger(__name__)


class NotificationPushPublisher:
    """Serialize notifications and schedule their delivery to rooms."""

    def __init__(self, server: socketio.AsyncServer) -> None:
        self._server = server

    def dispatch(
        self,
        notification: Notification,
        *,
        user_ids: Iterable[str] = (),
        business_ids: Iterable[str] = (),
        roles: Iterable[str] = (),
    ) -> list[str]:
        """Schedule ``notification`` for every addressed room.

        Returns the rooms the event was scheduled for.
        """

        rooms = target_rooms(user_ids=user_ids, business_ids=business_ids, roles=roles)
        if not rooms:
            logger.debug("Notification %s has no recipients; skipping", notification.id)
            return rooms

        payload = serialize_push_notification(notification)
        for room in rooms:
            self._schedule_emit(room, payload)
        return rooms

    def _schedule_emit(self, room: str, payload: dict[str, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if hasattr(from_thread, "start_soon"):
                from_thread.start_soon(self._emit, room, dict(payload))
            else:
                from_thread.run(self._emit, room, dict(payload))
        else:
            loop.create_task(self._emit(room, dict(payload)))

    async def _emit(self, room: str, payload: dict[str, Any]) -> None:
        try:
            await self._server.emit(NOTIFICATION_EVENT, payload, room=room)
        except Exception:
            logger.exception("Could not push notification %s to %s", payload.get("id"), room)


def serialize_push_notification(notification: Notification) -> dict[str, Any]:
    """Return the ``notification`` event body for ``notification``."""

    return NotificationMessage.from_entity(notification).to_wire()


__all__ = ["NotificationPushPublisher", "serialize_push_notification"]
