"""Consumer-facing surface of the notification subsystem."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence
from uuid import uuid4

from notification_feed.config import Settings
from notification_feed.domain.entities import (
    ConnectionState,
    Identity,
    Notification,
    NotificationAction,
    NotificationPriority,
)
from notification_feed.infrastructure.host import (
    NotifierSink,
    SoundSink,
    build_notifier_sink,
    build_sound_sink,
)
from notification_feed.infrastructure.transport import build_transport_factory
from notification_feed.utils import now_utc

from .ingestion import NotificationIngestor
from .lifecycle import LifecycleController, TransportFactory
from .store import DEFAULT_RETENTION_LIMIT, NotificationStore

logger = logging.getLogger(__name__)

FeedListener = Callable[["FeedSnapshot"], None]


@dataclass(frozen=True)
class FeedSnapshot:
    """Read-only view handed to the UI."""

    notifications: tuple[Notification, ...]
    unread_count: int
    is_connected: bool
    connection_state: ConnectionState


class NotificationFeed:
    """Expose notifications, unread count and connectivity plus the UI commands.

    The feed owns its store. Callers only ever see immutable snapshots and
    change it through the command methods.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        *,
        notifier: NotifierSink | None = None,
        sound: SoundSink | None = None,
        retention_limit: int = DEFAULT_RETENTION_LIMIT,
    ) -> None:
        self._store = NotificationStore(limit=retention_limit)
        self._ingestor = NotificationIngestor(self._store, notifier=notifier, sound=sound)
        self._controller = LifecycleController(self._store, self._ingestor, transport_factory)
        self._listeners: list[FeedListener] = []
        self._store.subscribe(lambda _store: self._notify())
        self._controller.subscribe(lambda _state: self._notify())
        self._started = False

    async def __aenter__(self) -> "NotificationFeed":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @property
    def controller(self) -> LifecycleController:
        return self._controller

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self._store.notifications

    @property
    def unread_count(self) -> int:
        return self._store.unread_count

    @property
    def is_connected(self) -> bool:
        return self._controller.is_connected

    @property
    def connection_state(self) -> ConnectionState:
        return self._controller.state

    @property
    def identity(self) -> Identity | None:
        return self._controller.identity

    def snapshot(self) -> FeedSnapshot:
        return FeedSnapshot(
            notifications=self._store.notifications,
            unread_count=self._store.unread_count,
            is_connected=self._controller.is_connected,
            connection_state=self._controller.state,
        )

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every change."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    async def start(self) -> None:
        """Mount the feed: ask once for desktop notification permission."""

        if self._started:
            return
        self._started = True
        await self._ingestor.request_permission_if_undecided()

    async def set_identity(self, identity: Identity | None) -> None:
        await self._controller.set_identity(identity)

    async def aclose(self) -> None:
        """Unmount the feed, closing the channel and dropping all state."""

        await self._controller.close()
        self._listeners.clear()

    def mark_as_read(self, notification_id: str) -> None:
        self._store.mark_as_read(notification_id)

    def mark_all_as_read(self) -> None:
        self._store.mark_all_as_read()

    def remove_notification(self, notification_id: str) -> None:
        self._store.remove(notification_id)

    def clear_all_notifications(self) -> None:
        self._store.clear()

    def push_local(
        self,
        *,
        type: str,
        title: str,
        message: str,
        priority: NotificationPriority | None = None,
        data: Any = None,
        actions: Sequence[NotificationAction] = (),
    ) -> Notification:
        """Add a notification produced by this client rather than the server."""

        notification = Notification(
            id=uuid4().hex,
            type=type,
            title=title,
            message=message,
            timestamp=now_utc(),
            priority=priority,
            data=data,
            actions=tuple(actions),
        )
        self._store.add(notification)
        return notification

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Notification feed listener %r failed", listener)


def build_notification_feed(settings: Settings) -> NotificationFeed:
    """Create a feed wired to the Socket.IO transport and host capabilities."""

    return NotificationFeed(
        build_transport_factory(settings),
        notifier=build_notifier_sink(settings),
        sound=build_sound_sink(settings),
        retention_limit=settings.notification_retention_limit,
    )


__all__ = ["FeedListener", "FeedSnapshot", "NotificationFeed", "build_notification_feed"]
