"""FastAPI dependency utilities."""

from fastapi import HTTPException, Request, status

from notification_feed.application.notifications import NotificationFeed


def get_notification_feed(request: Request) -> NotificationFeed:
    """Return the feed mounted by the application lifespan."""

    feed = getattr(request.app.state, "notification_feed", None)
    if feed is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification feed is not running",
        )
    return feed

