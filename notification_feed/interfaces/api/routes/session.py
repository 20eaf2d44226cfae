"""Endpoints receiving the identity signal from the authentication layer."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from notification_feed.application.notifications import NotificationFeed
from notification_feed.interfaces.api.dependencies import get_notification_feed
from notification_feed.interfaces.api.schemas import ConnectionStatusRead, SessionRequest

router = APIRouter(prefix="/session", tags=["session"])


def connection_status(feed: NotificationFeed) -> ConnectionStatusRead:
    handshake = feed.controller.handshake
    identity = feed.identity
    return ConnectionStatusRead(
        is_connected=feed.is_connected,
        connection_state=feed.connection_state.value,
        user_id=identity.user_id if identity else None,
        handshake_status=handshake.status.value if handshake else None,
        handshake_error=handshake.error if handshake else None,
    )


@router.get("/", response_model=ConnectionStatusRead)
async def read_session(
    feed: NotificationFeed = Depends(get_notification_feed),
) -> ConnectionStatusRead:
    return connection_status(feed)


@router.put("/", response_model=ConnectionStatusRead)
async def open_session(
    payload: SessionRequest,
    feed: NotificationFeed = Depends(get_notification_feed),
) -> ConnectionStatusRead:
    """Bind the feed to a logged-in user, replacing any previous user."""

    await feed.set_identity(payload.to_identity())
    return connection_status(feed)


@router.delete("/", response_model=ConnectionStatusRead)
async def close_session(
    feed: NotificationFeed = Depends(get_notification_feed),
) -> ConnectionStatusRead:
    """Drop the current user: close the channel and forget its notifications."""

    await feed.set_identity(None)
    return connection_status(feed)
