"""Persistent Socket.IO channel to the notification server."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Protocol, Sequence

import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from notification_feed.config import Settings

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], "Awaitable[None] | None"]


class Transport(Protocol):
    """Bidirectional channel used by the lifecycle controller."""

    def on(self, event: str, handler: EventHandler) -> None: ...

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def emit(self, event: str, data: Any) -> None: ...


class SocketIOTransport:
    """Wrap :class:`socketio.AsyncClient` with idempotent connect and close.

    Reconnection and transport negotiation (websocket upgrade with
    long-polling fallback) are left to the Socket.IO client. Once
    :meth:`disconnect` has been called the instance is closed for good and
    drops any event that is still in flight.
    """

    def __init__(
        self,
        url: str,
        *,
        transports: Sequence[str] = ("websocket", "polling"),
        socketio_path: str = "socket.io",
        wait_timeout: float = 5.0,
        reconnection_attempts: int = 0,
        reconnection_delay: float = 1.0,
        reconnection_delay_max: float = 5.0,
        client: socketio.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._transports = list(transports)
        self._socketio_path = socketio_path
        self._wait_timeout = wait_timeout
        self._client = client or socketio.AsyncClient(
            reconnection=True,
            reconnection_attempts=reconnection_attempts,
            reconnection_delay=reconnection_delay,
            reconnection_delay_max=reconnection_delay_max,
            logger=False,
            engineio_logger=False,
        )
        self._connect_task: asyncio.Task[None] | None = None
        self._closed = False
        self._client.on("connect_error", self._wrap("connect_error", self._log_connect_error))

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def connected(self) -> bool:
        return bool(self._client.connected)

    def on(self, event: str, handler: EventHandler) -> None:
        """Register ``handler`` for ``event``; it receives the payload or ``None``."""

        self._client.on(event, self._wrap(event, handler))

    async def connect(self) -> None:
        """Start connecting in the background. Calling it again is a no-op."""

        if self._closed:
            raise RuntimeError("Transport was disconnected and cannot be reused")
        if self._client.connected:
            return
        if self._connect_task is not None and not self._connect_task.done():
            return
        self._connect_task = asyncio.get_running_loop().create_task(self._run_connect())

    async def disconnect(self) -> None:
        """Close the channel, cancelling any pending connect or retry."""

        if self._closed:
            return
        self._closed = True
        task, self._connect_task = self._connect_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        try:
            # shutdown() also stops a reconnect loop started by the client.
            await self._client.shutdown()
        except Exception as exc:  # pragma: no cover - best effort shutdown
            logger.debug("Error while closing notification channel: %s", exc)

    async def emit(self, event: str, data: Any) -> None:
        if self._closed:
            return
        await self._client.emit(event, data)

    async def _run_connect(self) -> None:
        logger.info("Connecting to notification server at %s", self._url)
        try:
            await self._client.connect(
                self._url,
                transports=self._transports,
                socketio_path=self._socketio_path,
                wait_timeout=self._wait_timeout,
                retry=True,
            )
        except SocketIOConnectionError as exc:
            logger.warning("Could not connect to notification server: %s", exc)

    def _wrap(self, event: str, handler: EventHandler) -> Callable[..., Awaitable[None]]:
        async def dispatch(*args: Any) -> None:
            if self._closed:
                logger.debug("Dropping %r event received after disconnect", event)
                return
            result = handler(args[0] if args else None)
            if inspect.isawaitable(result):
                await result

        return dispatch

    @staticmethod
    def _log_connect_error(data: Any) -> None:
        logger.warning("Notification server connection error: %s", data)


def build_transport_factory(settings: Settings) -> Callable[[], Transport]:
    """Return a factory creating a fresh transport for every channel."""

    def factory() -> Transport:
        return SocketIOTransport(
            settings.notification_server_url,
            transports=settings.notification_transports,
            socketio_path=settings.notification_socketio_path,
            wait_timeout=settings.notification_connect_timeout,
            reconnection_attempts=settings.notification_reconnection_attempts,
            reconnection_delay=settings.notification_reconnection_delay,
            reconnection_delay_max=settings.notification_reconnection_delay_max,
        )

    return factory


__all__ = ["EventHandler", "SocketIOTransport", "Transport", "build_transport_factory"]
