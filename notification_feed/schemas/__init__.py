"""Message schemas shared by the channel client and the push server."""

from .messages import (
    AUTHENTICATE_EVENT,
    AUTHENTICATED_EVENT,
    AUTHENTICATION_ERROR_EVENT,
    NOTIFICATION_EVENT,
    TEST_NOTIFICATION_EVENT,
    AuthenticateMessage,
    AuthenticatedMessage,
    AuthenticationErrorMessage,
    NotificationActionMessage,
    NotificationMessage,
)

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
