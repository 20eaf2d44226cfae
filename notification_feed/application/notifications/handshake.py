"""Authentication exchange performed right after the channel connects."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import ValidationError

from notification_feed.domain.entities import Identity
from notification_feed.schemas import (
    AuthenticatedMessage,
    AuthenticateMessage,
    AuthenticationErrorMessage,
)

logger = logging.getLogger(__name__)


class HandshakeStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AuthenticationHandshake:
    """Track the ``authenticate`` round-trip for a single channel.

    The outcome is informational: a failed handshake is logged and reported,
    but the channel stays open and the server decides what to deliver.
    """

    def __init__(self, identity: Identity) -> None:
        self._identity = identity
        self._status = HandshakeStatus.IDLE
        self._error: str | None = None
        self._attempts = 0

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def status(self) -> HandshakeStatus:
        return self._status

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def succeeded(self) -> bool:
        return self._status is HandshakeStatus.SUCCEEDED

    def request_payload(self) -> dict[str, Any]:
        """Return the body of the ``authenticate`` event for this identity."""

        return AuthenticateMessage.from_identity(self._identity).to_wire()

    def begin(self) -> dict[str, Any]:
        """Mark a new attempt as pending and return the payload to send."""

        self._attempts += 1
        self._status = HandshakeStatus.PENDING
        self._error = None
        return self.request_payload()

    def complete(self, data: Any) -> bool:
        """Record the ``authenticated`` acknowledgment. Returns ``True`` on success."""

        try:
            message = AuthenticatedMessage.model_validate(data or {})
        except ValidationError:
            logger.warning("Ignoring malformed authentication acknowledgment: %r", data)
            return False

        if message.success:
            self._status = HandshakeStatus.SUCCEEDED
            self._error = None
            logger.info(
                "Authenticated with notification server as user %s",
                self._identity.user_id,
            )
            return True

        self._status = HandshakeStatus.FAILED
        self._error = "Server did not confirm authentication"
        logger.error(
            "Notification server declined authentication for user %s",
            self._identity.user_id,
        )
        return False

    def fail(self, data: Any) -> None:
        """Record an ``authentication_error`` reply."""

        if isinstance(data, dict):
            try:
                error = AuthenticationErrorMessage.model_validate(data).error
            except ValidationError:
                error = str(data)
        elif data is None:
            error = AuthenticationErrorMessage().error
        else:
            error = str(data)

        self._status = HandshakeStatus.FAILED
        self._error = error
        logger.error(
            "Authentication with notification server failed for user %s: %s",
            self._identity.user_id,
            error,
        )


__all__ = ["AuthenticationHandshake", "HandshakeStatus"]
