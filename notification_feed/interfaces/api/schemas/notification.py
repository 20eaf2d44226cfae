"""Pydantic models describing the feed exposed to the local UI."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from notification_feed.domain.entities import NotificationPriority


class NotificationActionRead(BaseModel):
    """Follow-up offered by a notification."""

    label: str
    action: str
    data: Any = None


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the UI."""

    id: str
    type: str
    title: str
    message: str
    timestamp: datetime
    read: bool
    priority: NotificationPriority | None = None
    data: Any = None
    actions: list[NotificationActionRead] = Field(default_factory=list)


class FeedSnapshotRead(BaseModel):
    """Current notifications together with the derived counters."""

    model_config = ConfigDict(populate_by_name=True)

    notifications: list[NotificationRead] = Field(default_factory=list)
    unread_count: int = Field(..., alias="unreadCount", ge=0)
    is_connected: bool = Field(..., alias="isConnected")
    connection_state: str = Field(..., alias="connectionState")


__all__ = ["FeedSnapshotRead", "NotificationActionRead", "NotificationRead"]
