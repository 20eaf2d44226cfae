"""Bounded, observable collection of notifications with read state."""

from __future__ import annotations

import logging
from typing import Callable

from notification_feed.domain.entities import Notification

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_LIMIT = 50

StoreListener = Callable[["NotificationStore"], None]


class NotificationStore:
    """Keep the most recent notifications, newest first.

    Every mutation swaps the underlying tuple for a new one, so a snapshot
    returned by :attr:`notifications` never changes after it was read.
    Commands that target an unknown id are no-ops, because eviction can
    remove a record at any time.
    """

    def __init__(self, limit: int = DEFAULT_RETENTION_LIMIT) -> None:
        if limit <= 0:
            raise ValueError("limit must be a positive integer")
        self._limit = limit
        self._notifications: tuple[Notification, ...] = ()
        self._generation = 0
        self._listeners: list[StoreListener] = []

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def notifications(self) -> tuple[Notification, ...]:
        """Return the current records, most recently received first."""

        return self._notifications

    @property
    def unread_count(self) -> int:
        """Return how many records are still unread."""

        return sum(1 for notification in self._notifications if not notification.read)

    @property
    def generation(self) -> int:
        """Return a counter bumped every time the store is reset for a new identity."""

        return self._generation

    def __len__(self) -> int:
        return len(self._notifications)

    def get(self, notification_id: str) -> Notification | None:
        for notification in self._notifications:
            if notification.id == notification_id:
                return notification
        return None

    def add(self, notification: Notification) -> None:
        """Prepend ``notification`` as unread, evicting the oldest past the limit."""

        updated = (notification.as_unread(),) + self._notifications
        if len(updated) > self._limit:
            evicted = updated[self._limit :]
            updated = updated[: self._limit]
            logger.debug(
                "Evicted %s notification(s) beyond the retention limit of %s",
                len(evicted),
                self._limit,
            )
        self._replace(updated)

    def mark_as_read(self, notification_id: str) -> None:
        """Flag the matching record as read."""

        changed = False
        updated: list[Notification] = []
        for notification in self._notifications:
            if notification.id == notification_id and not notification.read:
                notification = notification.as_read()
                changed = True
            updated.append(notification)
        if changed:
            self._replace(tuple(updated))

    def mark_all_as_read(self) -> None:
        """Flag every record as read."""

        if not any(not notification.read for notification in self._notifications):
            return
        self._replace(tuple(notification.as_read() for notification in self._notifications))

    def remove(self, notification_id: str) -> None:
        """Delete the matching record."""

        updated = tuple(
            notification
            for notification in self._notifications
            if notification.id != notification_id
        )
        if len(updated) != len(self._notifications):
            self._replace(updated)

    def clear(self) -> None:
        """Drop every record."""

        if self._notifications:
            self._replace(())

    def reset(self) -> None:
        """Start a fresh collection for a different identity."""

        self._generation += 1
        self._notifications = ()
        self._notify()

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register ``listener`` for change notifications.

        Returns a callable that removes the listener again.
        """

        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    def _replace(self, notifications: tuple[Notification, ...]) -> None:
        self._notifications = notifications
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Notification store listener %r failed", listener)


__all__ = ["DEFAULT_RETENTION_LIMIT", "NotificationStore", "StoreListener"]
