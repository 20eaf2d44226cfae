"""Pydantic models describing the messages exchanged over the channel."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from notification_feed.domain.entities import (
    Identity,
    Notification,
    NotificationAction,
    NotificationPriority,
)
from notification_feed.utils import ensure_utc

AUTHENTICATE_EVENT = "authenticate"
AUTHENTICATED_EVENT = "authenticated"
AUTHENTICATION_ERROR_EVENT = "authentication_error"
NOTIFICATION_EVENT = "notification"
TEST_NOTIFICATION_EVENT = "test_notification"


def _coerce_identifier(value: Any) -> Any:
    # Producers written in JavaScript happily send numeric ids.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class AuthenticateMessage(BaseModel):
    """Client to server: binds a freshly opened channel to a user."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(..., alias="userId", min_length=1)
    user_role: str = Field(..., alias="userRole", min_length=1)
    business_ids: list[str] = Field(default_factory=list, alias="businessIds")

    @field_validator("user_id", mode="before")
    @classmethod
    def _normalize_user_id(cls, value: Any) -> Any:
        return _coerce_identifier(value)

    @field_validator("business_ids", mode="before")
    @classmethod
    def _normalize_business_ids(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [_coerce_identifier(item) for item in value]
        return value

    @classmethod
    def from_identity(cls, identity: Identity) -> "AuthenticateMessage":
        return cls(
            user_id=identity.user_id,
            user_role=identity.role,
            business_ids=list(identity.business_ids),
        )

    def to_identity(self) -> Identity:
        return Identity(
            user_id=self.user_id,
            role=self.user_role,
            business_ids=tuple(self.business_ids),
        )

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON body sent with the ``authenticate`` event."""

        return self.model_dump(by_alias=True)


class AuthenticatedMessage(BaseModel):
    """Server to client: acknowledgment of the handshake."""

    model_config = ConfigDict(extra="ignore")

    success: bool = False


class AuthenticationErrorMessage(BaseModel):
    """Server to client: the handshake was rejected."""

    model_config = ConfigDict(extra="ignore")

    error: str = "Unknown authentication error"

    @field_validator("error", mode="before")
    @classmethod
    def _stringify_error(cls, value: Any) -> Any:
        if value is None:
            return "Unknown authentication error"
        return value if isinstance(value, str) else str(value)


class NotificationActionMessage(BaseModel):
    """Wire representation of a :class:`NotificationAction`."""

    model_config = ConfigDict(extra="ignore")

    label: str
    action: str
    data: Any = None


class NotificationMessage(BaseModel):
    """Server to client: a notification without its ``read`` flag."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = Field(default=None, min_length=1)
    type: str
    title: str
    message: str
    timestamp: datetime
    priority: NotificationPriority | None = None
    data: Any = None
    actions: list[NotificationActionMessage] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> Any:
        return _coerce_identifier(value)

    @model_validator(mode="before")
    @classmethod
    def _accept_metadata_alias(cls, values: Any) -> Any:
        if isinstance(values, dict) and values.get("data") is None and "metadata" in values:
            values = dict(values)
            values["data"] = values.pop("metadata")
        return values

    @field_validator("actions", mode="before")
    @classmethod
    def _default_actions(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_entity(self) -> Notification:
        """Return the domain notification, always unread.

        Messages sent without an ``id`` get one generated locally.
        """

        return Notification(
            id=self.id or uuid4().hex,
            type=self.type,
            title=self.title,
            message=self.message,
            timestamp=ensure_utc(self.timestamp),
            read=False,
            priority=self.priority,
            data=self.data,
            actions=tuple(
                NotificationAction(label=item.label, action=item.action, data=item.data)
                for item in self.actions
            ),
        )

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationMessage":
        return cls(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            timestamp=notification.timestamp,
            priority=notification.priority,
            data=notification.data,
            actions=[
                NotificationActionMessage(label=item.label, action=item.action, data=item.data)
                for item in notification.actions
            ],
        )

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON body emitted with the ``notification`` event."""

        return self.model_dump(mode="json", exclude_none=True)


__all__ = [
    "AUTHENTICATE_EVENT",
    "AUTHENTICATED_EVENT",
    "AUTHENTICATION_ERROR_EVENT",
    "NOTIFICATION_EVENT",
    "TEST_NOTIFICATION_EVENT",
    "AuthenticateMessage",
    "AuthenticatedMessage",
    "AuthenticationErrorMessage",
    "NotificationActionMessage",
    "NotificationMessage",
]
