"""Socket.IO server that authenticates channels and pushes notifications."""

from __future__ import annotations

import logging
from typing import Any, Sequence
from uuid import uuid4

import socketio
from fastapi import APIRouter, FastAPI, HTTPException, status
from pydantic import ValidationError

from notification_feed.config import Settings, get_settings
from notification_feed.domain.entities import Notification
from notification_feed.infrastructure.push import (
    NotificationPushPublisher,
    PushSessionRegistry,
    PushSessionStats,
    rooms_for_identity,
    serialize_push_notification,
)
from notification_feed.schemas import (
    AUTHENTICATE_EVENT,
    AUTHENTICATED_EVENT,
    AUTHENTICATION_ERROR_EVENT,
    NOTIFICATION_EVENT,
    TEST_NOTIFICATION_EVENT,
    AuthenticateMessage,
)
from notification_feed.utils import now_utc

from .schemas import PushNotificationRequest, PushNotificationResponse, PushStatsResponse

logger = logging.getLogger(__name__)


class NotificationPushServer:
    """Server half of the notification channel.

    A session only joins delivery rooms after a valid ``authenticate``
    message, so unauthenticated channels never receive notifications.
    """

    def __init__(
        self,
        *,
        cors_allowed_origins: Sequence[str] | str = (),
        sio: socketio.AsyncServer | None = None,
    ) -> None:
        origins: list[str] | str = (
            cors_allowed_origins
            if isinstance(cors_allowed_origins, str)
            else list(cors_allowed_origins)
        )
        self.sio = sio or socketio.AsyncServer(
            async_mode="asgi",
            cors_allowed_origins=origins,
        )
        self.registry = PushSessionRegistry()
        self.publisher = NotificationPushPublisher(self.sio)

        self.sio.on("connect", self.on_connect)
        self.sio.on("disconnect", self.on_disconnect)
        self.sio.on(AUTHENTICATE_EVENT, self.on_authenticate)
        self.sio.on(TEST_NOTIFICATION_EVENT, self.on_test_notification)

    def stats(self) -> PushSessionStats:
        return self.registry.stats()

    async def on_connect(self, sid: str, environ: dict[str, Any], auth: Any = None) -> None:
        logger.info("Notification channel %s connected", sid)

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        identity = self.registry.unregister(sid)
        if identity is not None:
            logger.info(
                "Notification channel %s for user %s disconnected", sid, identity.user_id
            )

    async def on_authenticate(self, sid: str, data: Any = None) -> None:
        try:
            message = AuthenticateMessage.model_validate(data or {})
        except ValidationError as exc:
            logger.warning(
                "Rejected authentication on channel %s (%s error(s))", sid, exc.error_count()
            )
            await self.sio.emit(
                AUTHENTICATION_ERROR_EVENT,
                {"error": "Invalid authentication payload"},
                to=sid,
            )
            return

        identity = message.to_identity()
        previous = self.registry.register(sid, identity)
        if previous is not None:
            for room in rooms_for_identity(previous):
                await self.sio.leave_room(sid, room)
        for room in rooms_for_identity(identity):
            await self.sio.enter_room(sid, room)

        logger.info("Channel %s authenticated as user %s", sid, identity.user_id)
        await self.sio.emit(AUTHENTICATED_EVENT, {"success": True}, to=sid)

    async def on_test_notification(self, sid: str, data: Any = None) -> None:
        """Echo a test notification back to the requesting channel only."""

        identity = self.registry.identity_for(sid)
        logger.info(
            "Sending test notification to channel %s (user %s)",
            sid,
            identity.user_id if identity else "unauthenticated",
        )
        notification = Notification(
            id=uuid4().hex,
            type="test",
            title="Test Notification",
            message="This is a test notification",
            timestamp=now_utc(),
        )
        await self.sio.emit(NOTIFICATION_EVENT, serialize_push_notification(notification), to=sid)


def create_push_api(push_server: NotificationPushServer) -> FastAPI:
    """Return the HTTP API used by producers to publish notifications."""

    router = APIRouter(prefix="/notifications", tags=["push"])

    @router.post(
        "/",
        response_model=PushNotificationResponse,
        status_code=status.HTTP_202_ACCEPTED,
    )
    async def publish_notification(payload: PushNotificationRequest) -> PushNotificationResponse:
        """Schedule a notification for the requested users, businesses and roles."""

        if not (payload.user_ids or payload.business_ids or payload.roles):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="At least one of userIds, businessIds or roles is required",
            )
        notification = payload.to_entity()
        rooms = push_server.publisher.dispatch(
            notification,
            user_ids=payload.user_ids,
            business_ids=payload.business_ids,
            roles=payload.roles,
        )
        return PushNotificationResponse(id=notification.id, rooms=rooms)

    @router.get("/stats", response_model=PushStatsResponse)
    async def read_push_stats() -> PushStatsResponse:
        """Report how many channels are authenticated and for whom."""

        stats = push_server.stats()
        return PushStatsResponse(
            total_connections=stats.total_connections,
            business_connections=stats.business_connections,
            connected_users=list(stats.connected_users),
        )

    api = FastAPI(title="Notification push server")
    api.include_router(router)
    api.state.push_server = push_server
    return api


def create_push_app(
    settings: Settings | None = None,
    push_server: NotificationPushServer | None = None,
) -> socketio.ASGIApp:
    """Return the ASGI application serving Socket.IO and the producer API."""

    settings = settings or get_settings()
    push_server = push_server or NotificationPushServer(
        cors_allowed_origins=settings.push_cors_allowed_origins
    )
    return socketio.ASGIApp(
        push_server.sio,
        other_asgi_app=create_push_api(push_server),
        socketio_path=settings.notification_socketio_path,
    )


__all__ = ["NotificationPushServer", "create_push_api", "create_push_app"]
