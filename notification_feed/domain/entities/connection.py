"""Connection states reported by the notification channel."""

from __future__ import annotations

from enum import Enum


class ConnectionState(str, Enum):
    """Lifecycle of the channel bound to the current identity."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED_UNAUTHENTICATED = "connected-unauthenticated"
    AUTHENTICATED = "authenticated"

    @property
    def is_connected(self) -> bool:
        """Return ``True`` when the transport is up, authenticated or not."""

        return self in (
            ConnectionState.CONNECTED_UNAUTHENTICATED,
            ConnectionState.AUTHENTICATED,
        )


__all__ = ["ConnectionState"]
