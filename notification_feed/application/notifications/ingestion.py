"""Turn inbound ``notification`` messages into store entries and host alerts."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from notification_feed.domain.entities import Notification
from notification_feed.infrastructure.host import (
    NotifierSink,
    NullNotifierSink,
    NullSoundSink,
    PermissionState,
    SoundSink,
)
from notification_feed.schemas import NotificationMessage

from .store import NotificationStore

logger = logging.getLogger(__name__)


class NotificationIngestor:
    """Feed pushed notifications into the store and fire side effects.

    Side effects run as detached tasks. They can fail or hang without
    affecting ingestion, and their failures are never reported.
    """

    def __init__(
        self,
        store: NotificationStore,
        *,
        notifier: NotifierSink | None = None,
        sound: SoundSink | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier or NullNotifierSink()
        self._sound = sound or NullSoundSink()
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def store(self) -> NotificationStore:
        return self._store

    @property
    def pending_side_effects(self) -> int:
        return len(self._pending)

    def ingest(self, payload: Any) -> Notification | None:
        """Validate ``payload`` and prepend it to the store.

        Returns the stored notification, or ``None`` when the payload was
        malformed and dropped.
        """

        try:
            message = NotificationMessage.model_validate(payload)
        except ValidationError as exc:
            logger.warning(
                "Dropping malformed notification payload (%s error(s)): %r",
                exc.error_count(),
                payload,
            )
            return None

        notification = message.to_entity()
        logger.debug("New notification received: %s (%s)", notification.id, notification.type)
        self._store.add(notification)

        if self._notifier.permission() is PermissionState.GRANTED:
            self._fire_and_forget("desktop notification", lambda: self._notifier.show(notification))
        self._fire_and_forget("notification sound", self._sound.play)
        return notification

    async def request_permission_if_undecided(self) -> PermissionState:
        """Ask the host for desktop notification permission once.

        The request is skipped when a decision already exists.
        """

        current = self._notifier.permission()
        if current is not PermissionState.DEFAULT:
            return current
        try:
            decision = await self._notifier.request_permission()
        except Exception as exc:
            logger.debug("Could not request notification permission: %s", exc)
            return PermissionState.DEFAULT
        logger.info("Notification permission: %s", decision.value)
        return decision

    def cancel_pending(self) -> None:
        """Cancel side effects that have not finished yet."""

        for task in list(self._pending):
            task.cancel()
        self._pending.clear()

    def _fire_and_forget(self, name: str, factory: Callable[[], Awaitable[None]]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; skipping %s", name)
            return

        task = loop.create_task(self._run_side_effect(name, factory))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @staticmethod
    async def _run_side_effect(name: str, factory: Callable[[], Awaitable[None]]) -> None:
        try:
            await factory()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.debug("Could not play %s: %s", name, exc)


__all__ = ["NotificationIngestor"]
