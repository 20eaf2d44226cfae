"""Host capabilities used for best-effort alerts: desktop popups and sounds."""

from __future__ import annotations

import importlib
import logging
from enum import Enum
from typing import Any, Protocol

import anyio

from notification_feed.config import Settings
from notification_feed.domain.entities import Notification

logger = logging.getLogger(__name__)


class PermissionState(str, Enum):
    """Decision about showing desktop notifications on this host."""

    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class NotifierSink(Protocol):
    def permission(self) -> PermissionState: ...

    async def request_permission(self) -> PermissionState: ...

    async def show(self, notification: Notification) -> None: ...


class SoundSink(Protocol):
    async def play(self) -> None: ...


class NullNotifierSink:
    """Headless notifier: permission is always denied and nothing is shown."""

    def permission(self) -> PermissionState:
        return PermissionState.DENIED

    async def request_permission(self) -> PermissionState:
        return PermissionState.DENIED

    async def show(self, notification: Notification) -> None:
        return None


class NullSoundSink:
    """Headless sound sink that stays silent."""

    async def play(self) -> None:
        return None


class DesktopNotifierSink:
    """Show desktop notifications through :mod:`plyer`.

    Permission starts undecided. Requesting it checks that ``plyer`` can be
    loaded on this host; the answer is kept for the lifetime of the sink.
    """

    def __init__(
        self,
        *,
        app_name: str,
        icon_path: str | None = None,
        timeout: int = 10,
    ) -> None:
        self._app_name = app_name
        self._icon_path = icon_path
        self._timeout = timeout
        self._permission = PermissionState.DEFAULT
        self._backend: Any | None = None

    def permission(self) -> PermissionState:
        return self._permission

    async def request_permission(self) -> PermissionState:
        if self._permission is not PermissionState.DEFAULT:
            return self._permission
        try:
            plyer = importlib.import_module("plyer")
        except ImportError:
            logger.info("plyer is not installed; desktop notifications are disabled")
            self._permission = PermissionState.DENIED
        else:
            self._backend = plyer.notification
            self._permission = PermissionState.GRANTED
        return self._permission

    async def show(self, notification: Notification) -> None:
        if self._permission is not PermissionState.GRANTED or self._backend is None:
            return
        await anyio.to_thread.run_sync(self._notify, notification)

    def _notify(self, notification: Notification) -> None:
        kwargs: dict[str, Any] = {
            "title": notification.title,
            "message": notification.message,
            "app_name": self._app_name,
            "timeout": self._timeout,
        }
        if self._icon_path:
            kwargs["app_icon"] = self._icon_path
        self._backend.notify(**kwargs)


class PygameSoundSink:
    """Play a short audio asset through :mod:`pygame.mixer`."""

    def __init__(self, *, sound_path: str, volume: float) -> None:
        self._sound_path = sound_path
        self._volume = volume
        self._sound: Any | None = None

    async def play(self) -> None:
        await anyio.to_thread.run_sync(self._play)

    def _play(self) -> None:
        if self._sound is None:
            pygame = importlib.import_module("pygame")
            if not pygame.mixer.get_init():
                pygame.mixer.init()
            sound = pygame.mixer.Sound(self._sound_path)
            sound.set_volume(self._volume)
            self._sound = sound
        self._sound.play()


def build_notifier_sink(settings: Settings) -> NotifierSink:
    """Return the notifier configured for this host."""

    if not settings.desktop_notifications_enabled:
        return NullNotifierSink()
    return DesktopNotifierSink(
        app_name=settings.notification_app_name,
        icon_path=settings.notification_icon_path,
    )


def build_sound_sink(settings: Settings) -> SoundSink:
    """Return the sound sink configured for this host."""

    if not settings.notification_sound_enabled:
        return NullSoundSink()
    return PygameSoundSink(
        sound_path=settings.notification_sound_path,
        volume=settings.notification_sound_volume,
    )


__all__ = [
    "DesktopNotifierSink",
    "NotifierSink",
    "NullNotifierSink",
    "NullSoundSink",
    "PermissionState",
    "PygameSoundSink",
    "SoundSink",
    "build_notifier_sink",
    "build_sound_sink",
]
