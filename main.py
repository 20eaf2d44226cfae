import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notification_feed.application.notifications import (
    NotificationFeed,
    build_notification_feed,
)
from notification_feed.config import Settings, get_settings
from notification_feed.infrastructure.notifications import (
    FeedConnectionManager,
    SnapshotPublisher,
)
from notification_feed.interfaces.api.routes import register_routes


def create_app(
    feed: NotificationFeed | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing the notification feed to the UI."""

    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Mount the feed on startup and tear its channel down on shutdown."""

        active_feed = feed or build_notification_feed(settings)
        connections = FeedConnectionManager()
        active_feed.subscribe(SnapshotPublisher(connections).dispatch)

        app.state.notification_feed = active_feed
        app.state.feed_connections = connections
        try:
            async with active_feed:
                yield
        finally:
            app.state.notification_feed = None
            app.state.feed_connections = None

    app = FastAPI(lifespan=lifespan)

    # Local UI served from another origin during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
