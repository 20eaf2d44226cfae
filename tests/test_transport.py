"""Tests for the Socket.IO transport wrapper."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from notification_feed.config import Settings
from notification_feed.infrastructure.transport import (
    SocketIOTransport,
    build_transport_factory,
)


class FakeSocketClient:
    """Minimal stand-in for :class:`socketio.AsyncClient`."""

    def __init__(self, *, fail: bool = False) -> None:
        self.handlers: dict[str, Any] = {}
        self.connected = False
        self.connect_calls: list[dict[str, Any]] = []
        self.disconnect_calls = 0
        self.shutdown_calls = 0
        self.reconnect_task: asyncio.Task[None] | None = None
        self.emitted: list[tuple[str, Any]] = []
        self.fail = fail
        self.gate = asyncio.Event()

    def on(self, event: str, handler: Any = None, namespace: str | None = None) -> None:
        self.handlers[event] = handler

    async def connect(self, url: str, **kwargs: Any) -> None:
        self.connect_calls.append({"url": url, **kwargs})
        if self.fail:
            raise SocketIOConnectionError("Connection refused by the server")
        await self.gate.wait()
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False

    async def shutdown(self) -> None:
        self.shutdown_calls += 1
        if self.connected:
            await self.disconnect()
        elif self.reconnect_task is not None:
            self.reconnect_task.cancel()
            try:
                await self.reconnect_task
            except asyncio.CancelledError:
                pass

    def start_reconnecting(self) -> None:
        """Simulate the server dropping the channel while retries keep running."""

        self.connected = False
        self.reconnect_task = asyncio.get_running_loop().create_task(self._reconnect())

    async def _reconnect(self) -> None:
        while True:
            await asyncio.sleep(0.01)

    async def emit(self, event: str, data: Any = None) -> None:
        self.emitted.append((event, data))


async def _settle() -> None:
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.mark.anyio
async def test_connect_is_idempotent_and_uses_configured_transports() -> None:
    client = FakeSocketClient()
    transport = SocketIOTransport(
        "http://notifications.test", transports=("websocket", "polling"), client=client
    )

    await transport.connect()
    await transport.connect()
    await _settle()

    assert len(client.connect_calls) == 1
    call = client.connect_calls[0]
    assert call["url"] == "http://notifications.test"
    assert call["transports"] == ["websocket", "polling"]
    assert call["retry"] is True

    client.gate.set()
    await _settle()
    await transport.connect()

    assert transport.connected is True
    assert len(client.connect_calls) == 1
    await transport.disconnect()


@pytest.mark.anyio
async def test_disconnect_cancels_a_pending_connect() -> None:
    client = FakeSocketClient()
    transport = SocketIOTransport("http://notifications.test", client=client)

    await transport.connect()
    await _settle()
    await transport.disconnect()
    await transport.disconnect()

    assert transport.closed is True
    assert client.shutdown_calls == 1
    with pytest.raises(RuntimeError):
        await transport.connect()


@pytest.mark.anyio
async def test_events_after_disconnect_are_dropped() -> None:
    client = FakeSocketClient()
    transport = SocketIOTransport("http://notifications.test", client=client)
    received: list[Any] = []
    transport.on("notification", received.append)

    await client.handlers["notification"]({"id": "n-1"})
    await transport.disconnect()
    await client.handlers["notification"]({"id": "n-2"})
    await transport.emit("authenticate", {"userId": "u1"})

    assert received == [{"id": "n-1"}]
    assert client.emitted == []


@pytest.mark.anyio
async def test_handlers_receive_none_for_events_without_payload() -> None:
    client = FakeSocketClient()
    transport = SocketIOTransport("http://notifications.test", client=client)
    received: list[Any] = []

    async def on_connect(data: Any) -> None:
        received.append(data)

    transport.on("connect", on_connect)
    await client.handlers["connect"]()

    assert received == [None]


@pytest.mark.anyio
async def test_connection_failures_are_logged_not_raised(caplog) -> None:
    client = FakeSocketClient(fail=True)
    transport = SocketIOTransport("http://notifications.test", client=client)

    await transport.connect()
    await _settle()

    assert transport.connected is False
    assert "Could not connect to notification server" in caplog.text
    await transport.disconnect()


def test_factory_builds_independent_transports() -> None:
    settings = Settings(notification_server_url="http://push.test", notification_transports=["polling"])
    factory = build_transport_factory(settings)

    first = factory()
    second = factory()

    assert isinstance(first, SocketIOTransport)
    assert first is not second


@pytest.mark.anyio
async def test_disconnect_stops_reconnection_after_server_drop() -> None:
    client = FakeSocketClient()
    client.gate.set()
    transport = SocketIOTransport("http://notifications.test", client=client)
    await transport.connect()
    await _settle()
    assert transport.connected is True

    client.start_reconnecting()
    await _settle()
    reconnect_task = client.reconnect_task
    assert reconnect_task is not None and not reconnect_task.done()

    await transport.disconnect()

    assert reconnect_task.done()
    assert client.shutdown_calls == 1
    assert transport.connected is False
