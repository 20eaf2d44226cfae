"""Pydantic models accepted by the push producer API."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from notification_feed.domain.entities import (
    Notification,
    NotificationAction,
    NotificationPriority,
)
from notification_feed.schemas import NotificationActionMessage
from notification_feed.utils import ensure_utc, now_utc


class PushNotificationRequest(BaseModel):
    """Notification to deliver together with the audience it targets."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, description="Producer identifier; generated when absent")
    type: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    message: str
    timestamp: datetime | None = None
    priority: NotificationPriority | None = None
    data: Any = None
    actions: list[NotificationActionMessage] = Field(default_factory=list)
    user_ids: list[str] = Field(default_factory=list, alias="userIds")
    business_ids: list[str] = Field(default_factory=list, alias="businessIds")
    roles: list[str] = Field(default_factory=list)

    def to_entity(self) -> Notification:
        return Notification(
            id=self.id or uuid4().hex,
            type=self.type,
            title=self.title,
            message=self.message,
            timestamp=ensure_utc(self.timestamp) if self.timestamp else now_utc(),
            priority=self.priority,
            data=self.data,
            actions=tuple(
                NotificationAction(label=item.label, action=item.action, data=item.data)
                for item in self.actions
            ),
        )


class PushNotificationResponse(BaseModel):
    """Result of scheduling a notification."""

    id: str
    rooms: list[str] = Field(default_factory=list)


class PushStatsResponse(BaseModel):
    """Authenticated channels currently held by the push server."""

    model_config = ConfigDict(populate_by_name=True)

    total_connections: int = Field(..., alias="totalConnections")
    business_connections: int = Field(..., alias="businessConnections")
    connected_users: list[str] = Field(default_factory=list, alias="connectedUsers")
    is_active: bool = Field(default=True, alias="isActive")


__all__ = ["PushNotificationRequest", "PushNotificationResponse", "PushStatsResponse"]
