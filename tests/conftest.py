"""Shared fixtures and fakes for the notification feed tests."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any

import pytest

from notification_feed.domain.entities import Notification
from notification_feed.infrastructure.host import PermissionState


class FakeTransport:
    """In-memory stand-in for :class:`SocketIOTransport`.

    ``fire`` delivers an event to the registered handler even after
    ``disconnect`` so tests can simulate events that were already in flight.
    """

    def __init__(self, *, fail_on_connect: bool = False) -> None:
        self.handlers: dict[str, Any] = {}
        self.emitted: list[tuple[str, Any]] = []
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.fail_on_connect = fail_on_connect

    @property
    def disconnected(self) -> bool:
        return self.disconnect_calls > 0

    def on(self, event: str, handler: Any) -> None:
        self.handlers[event] = handler

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.fail_on_connect:
            raise OSError("network unreachable")

    async def disconnect(self) -> None:
        self.disconnect_calls += 1

    async def emit(self, event: str, data: Any) -> None:
        self.emitted.append((event, data))

    async def fire(self, event: str, data: Any = None) -> None:
        handler = self.handlers.get(event)
        if handler is None:
            return
        result = handler(data)
        if inspect.isawaitable(result):
            await result


class TransportFactory:
    """Callable handing out a new :class:`FakeTransport` per channel."""

    def __init__(self) -> None:
        self.created: list[FakeTransport] = []
        self.fail_on_connect = False

    def __call__(self) -> FakeTransport:
        transport = FakeTransport(fail_on_connect=self.fail_on_connect)
        self.created.append(transport)
        return transport

    @property
    def latest(self) -> FakeTransport:
        return self.created[-1]


class RecordingNotifier:
    """Notifier sink that records what it was asked to show."""

    def __init__(
        self,
        permission: PermissionState = PermissionState.GRANTED,
        *,
        decision: PermissionState = PermissionState.GRANTED,
        fail: bool = False,
    ) -> None:
        self._permission = permission
        self._decision = decision
        self.fail = fail
        self.shown: list[Notification] = []
        self.permission_requests = 0

    def permission(self) -> PermissionState:
        return self._permission

    async def request_permission(self) -> PermissionState:
        self.permission_requests += 1
        self._permission = self._decision
        return self._permission

    async def show(self, notification: Notification) -> None:
        if self.fail:
            raise RuntimeError("notifications are blocked")
        self.shown.append(notification)


class RecordingSound:
    """Sound sink that counts playbacks."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.plays = 0

    async def play(self) -> None:
        if self.fail:
            raise RuntimeError("autoplay blocked")
        self.plays += 1


def notification_payload(notification_id: str = "n-1", **overrides: Any) -> dict[str, Any]:
    """Return a wire ``notification`` body as the server would send it."""

    payload: dict[str, Any] = {
        "id": notification_id,
        "type": "review",
        "title": "New Review Received",
        "message": "Sarah Johnson left a 5-star review",
        "timestamp": "2024-05-01T12:00:00Z",
        "priority": "high",
        "data": {"businessName": "Amazing Italian Restaurant", "rating": 5},
        "actions": [{"label": "Respond", "action": "open_review", "data": {"reviewId": "r-1"}}],
    }
    payload.update(overrides)
    return payload


async def _drain() -> None:
    """Let detached side-effect tasks run to completion."""

    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def transport_factory() -> TransportFactory:
    return TransportFactory()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def sound() -> RecordingSound:
    return RecordingSound()


@pytest.fixture
def make_payload():
    return notification_payload


@pytest.fixture
def drain():
    return _drain


@pytest.fixture
def notifier_factory():
    return RecordingNotifier


@pytest.fixture
def sound_factory():
    return RecordingSound
