"""Endpoints and websocket handler exposing the notification feed to the UI."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from notification_feed.application.notifications import NotificationFeed
from notification_feed.infrastructure.notifications import (
    serialize_snapshot,
    snapshot_message,
)
from notification_feed.interfaces.api.dependencies import get_notification_feed
from notification_feed.interfaces.api.schemas import (
    ConnectionStatusRead,
    FeedSnapshotRead,
)

from .session import connection_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _snapshot_to_schema(feed: NotificationFeed) -> FeedSnapshotRead:
    return FeedSnapshotRead.model_validate(serialize_snapshot(feed.snapshot()))


@router.get("/", response_model=FeedSnapshotRead)
async def read_notifications(
    feed: NotificationFeed = Depends(get_notification_feed),
) -> FeedSnapshotRead:
    """Return the notifications currently held in memory, newest first."""

    return _snapshot_to_schema(feed)


@router.get("/status", response_model=ConnectionStatusRead)
async def read_connection_status(
    feed: NotificationFeed = Depends(get_notification_feed),
) -> ConnectionStatusRead:
    """Return whether the channel to the notification server is up."""

    return connection_status(feed)


@router.post("/read-all", response_model=FeedSnapshotRead)
async def mark_all_notifications_as_read(
    feed: NotificationFeed = Depends(get_notification_feed),
) -> FeedSnapshotRead:
    feed.mark_all_as_read()
    return _snapshot_to_schema(feed)


@router.post("/{notification_id}/read", response_model=FeedSnapshotRead)
async def mark_notification_as_read(
    notification_id: str,
    feed: NotificationFeed = Depends(get_notification_feed),
) -> FeedSnapshotRead:
    """Mark one notification as read. Unknown ids are ignored."""

    feed.mark_as_read(notification_id)
    return _snapshot_to_schema(feed)


@router.delete("/{notification_id}", response_model=FeedSnapshotRead)
async def remove_notification(
    notification_id: str,
    feed: NotificationFeed = Depends(get_notification_feed),
) -> FeedSnapshotRead:
    """Remove one notification. Unknown ids are ignored."""

    feed.remove_notification(notification_id)
    return _snapshot_to_schema(feed)


@router.delete("/", response_model=FeedSnapshotRead)
async def clear_notifications(
    feed: NotificationFeed = Depends(get_notification_feed),
) -> FeedSnapshotRead:
    feed.clear_all_notifications()
    return _snapshot_to_schema(feed)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams feed snapshots to the UI."""

    feed: NotificationFeed | None = getattr(websocket.app.state, "notification_feed", None)
    manager = getattr(websocket.app.state, "feed_connections", None)
    if feed is None or manager is None:
        await websocket.close(code=1011)
        return

    await manager.connect(websocket)
    try:
        await websocket.send_json(snapshot_message(feed.snapshot()))
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            reply = _handle_command(feed, message)
            if reply is not None:
                await websocket.send_json(reply)
    except WebSocketDisconnect:
        manager.disconnect(websocket)
    except Exception:
        manager.disconnect(websocket)
        raise


def _handle_command(feed: NotificationFeed, message: dict[str, Any]) -> dict[str, Any] | None:
    message_type = message.get("type")
    if message_type == "ping":
        return {"type": "pong"}

    if message_type == "ack":
        ids = message.get("ids", [])
        if isinstance(ids, list):
            for notification_id in ids:
                feed.mark_as_read(str(notification_id))
        return None

    if message_type == "read_all":
        feed.mark_all_as_read()
        return None

    if message_type == "remove":
        notification_id = message.get("id")
        if notification_id is not None:
            feed.remove_notification(str(notification_id))
        return None

    if message_type == "clear":
        feed.clear_all_notifications()
        return None

    logger.debug("Ignoring unknown feed command %r", message_type)
    return None
