"""Server-side helpers for the Socket.IO notification push channel."""

from .publisher import NotificationPushPublisher, serialize_push_notification
from .registry import (
    PushSessionRegistry,
    PushSessionStats,
    business_room,
    role_room,
    rooms_for_identity,
    target_rooms,
    user_room,
)

__all__ = [
    "NotificationPushPublisher",
    "PushSessionRegistry",
    "PushSessionStats",
    "business_room",
    "role_room",
    "rooms_for_identity",
    "serialize_push_notification",
    "target_rooms",
    "user_room",
]
