"""Bind the notification channel to the current identity."""

from __future__ import annotations

import logging
from typing import Any, Callable

import anyio

from notification_feed.domain.entities import ConnectionState, Identity
from notification_feed.infrastructure.transport import Transport
from notification_feed.schemas import (
    AUTHENTICATE_EVENT,
    AUTHENTICATED_EVENT,
    AUTHENTICATION_ERROR_EVENT,
    NOTIFICATION_EVENT,
)

from .handshake import AuthenticationHandshake
from .ingestion import NotificationIngestor
from .store import NotificationStore

logger = logging.getLogger(__name__)

StateListener = Callable[[ConnectionState], None]
TransportFactory = Callable[[], Transport]


class _ChannelSession:
    """Transport and handshake opened for one identity."""

    def __init__(self, identity: Identity, transport: Transport) -> None:
        self.identity = identity
        self.transport = transport
        self.handshake = AuthenticationHandshake(identity)
        self.closed = False


class LifecycleController:
    """Open, authenticate and tear down channels as the identity changes.

    Every channel belongs to exactly one identity. Switching users closes
    the old channel before the new one is opened, and the store is reset in
    between so nothing leaks from one session to the next.
    """

    def __init__(
        self,
        store: NotificationStore,
        ingestor: NotificationIngestor,
        transport_factory: TransportFactory,
    ) -> None:
        self._store = store
        self._ingestor = ingestor
        self._transport_factory = transport_factory
        self._identity: Identity | None = None
        self._session: _ChannelSession | None = None
        self._state = ConnectionState.DISCONNECTED
        self._listeners: list[StateListener] = []
        self._lock = anyio.Lock()
        self._closed = False

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state.is_connected

    @property
    def handshake(self) -> AuthenticationHandshake | None:
        return self._session.handshake if self._session is not None else None

    @property
    def transport(self) -> Transport | None:
        return self._session.transport if self._session is not None else None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` for connection state changes."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    async def set_identity(self, identity: Identity | None) -> None:
        """React to a login, logout or account switch."""

        async with self._lock:
            if self._closed:
                raise RuntimeError("Lifecycle controller is closed")
            if identity is not None and identity == self._identity:
                return

            previous = self._identity
            await self._teardown()
            self._identity = identity
            self._store.reset()

            if identity is None:
                logger.info("Identity cleared; notification channel closed")
                return

            if previous is not None:
                logger.info(
                    "Identity switched from user %s to user %s",
                    previous.user_id,
                    identity.user_id,
                )
            await self._open(identity)

    async def close(self) -> None:
        """Tear everything down regardless of the current identity."""

        async with self._lock:
            if self._closed:
                return
            self._closed = True
            await self._teardown()
            self._identity = None
            self._store.reset()
            self._listeners.clear()

    async def _open(self, identity: Identity) -> None:
        session = _ChannelSession(identity, self._transport_factory())
        self._session = session

        transport = session.transport
        transport.on("connect", lambda _data: self._on_connect(session))
        transport.on("disconnect", lambda _data: self._on_disconnect(session))
        transport.on(AUTHENTICATED_EVENT, lambda data: self._on_authenticated(session, data))
        transport.on(
            AUTHENTICATION_ERROR_EVENT,
            lambda data: self._on_authentication_error(session, data),
        )
        transport.on(NOTIFICATION_EVENT, lambda data: self._on_notification(session, data))

        self._set_state(ConnectionState.CONNECTING)
        try:
            await transport.connect()
        except Exception:
            logger.exception("Could not start notification channel for user %s", identity.user_id)
            self._set_state(ConnectionState.DISCONNECTED)

    async def _teardown(self) -> None:
        session, self._session = self._session, None
        if session is None:
            self._set_state(ConnectionState.DISCONNECTED)
            return

        # Flip the flag first so events already in flight are dropped.
        session.closed = True
        self._ingestor.cancel_pending()
        self._set_state(ConnectionState.DISCONNECTED)
        try:
            await session.transport.disconnect()
        except Exception as exc:
            logger.warning(
                "Error while closing channel for user %s: %s",
                session.identity.user_id,
                exc,
            )

    def _is_current(self, session: _ChannelSession) -> bool:
        return not session.closed and session is self._session

    async def _on_connect(self, session: _ChannelSession) -> None:
        if not self._is_current(session):
            return
        logger.info("Connected to notification server")
        self._set_state(ConnectionState.CONNECTED_UNAUTHENTICATED)
        payload = session.handshake.begin()
        await session.transport.emit(AUTHENTICATE_EVENT, payload)

    def _on_disconnect(self, session: _ChannelSession) -> None:
        if not self._is_current(session):
            return
        logger.info("Disconnected from notification server")
        self._set_state(ConnectionState.DISCONNECTED)

    def _on_authenticated(self, session: _ChannelSession, data: Any) -> None:
        if not self._is_current(session):
            return
        if session.handshake.complete(data):
            self._set_state(ConnectionState.AUTHENTICATED)

    def _on_authentication_error(self, session: _ChannelSession, data: Any) -> None:
        if not self._is_current(session):
            return
        session.handshake.fail(data)

    def _on_notification(self, session: _ChannelSession, data: Any) -> None:
        if not self._is_current(session):
            return
        self._ingestor.ingest(data)

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Connection state listener %r failed", listener)


__all__ = ["LifecycleController", "StateListener", "TransportFactory"]
