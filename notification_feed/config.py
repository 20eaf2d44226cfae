"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

SUPPORTED_TRANSPORTS = ("websocket", "polling")


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    notification_server_url: str = Field(
        default="http://localhost:5000",
        description="Base URL of the Socket.IO server that pushes notifications",
        min_length=1,
    )
    notification_transports: list[str] = Field(
        default_factory=lambda: list(SUPPORTED_TRANSPORTS),
        description="Transports offered to the server, in order of preference",
        min_length=1,
    )
    notification_socketio_path: str = Field(
        default="socket.io",
        description="Endpoint path of the Socket.IO server",
    )
    notification_connect_timeout: float = Field(
        default=5.0,
        description="Seconds to wait for namespace connection before giving up on an attempt",
        gt=0,
    )
    notification_reconnection_attempts: int = Field(
        default=0,
        description="Maximum reconnection attempts; 0 retries forever",
        ge=0,
    )
    notification_reconnection_delay: float = Field(
        default=1.0,
        description="Initial delay in seconds between reconnection attempts",
        gt=0,
    )
    notification_reconnection_delay_max: float = Field(
        default=5.0,
        description="Upper bound in seconds for the reconnection delay",
        gt=0,
    )
    notification_retention_limit: int = Field(
        default=50,
        description="Maximum number of notifications kept in memory",
        gt=0,
    )
    desktop_notifications_enabled: bool = Field(
        default=True,
        description="Show a desktop notification for every incoming event",
    )
    notification_app_name: str = Field(
        default="Notification Feed",
        description="Application name displayed by desktop notifications",
    )
    notification_icon_path: str | None = Field(
        default=None,
        description="Optional icon file shown next to desktop notifications",
    )
    notification_sound_enabled: bool = Field(
        default=True,
        description="Play a short sound for every incoming event",
    )
    notification_sound_path: str = Field(
        default="notification-sound.mp3",
        description="Audio asset played when a notification arrives",
    )
    notification_sound_volume: float = Field(
        default=0.3,
        description="Playback volume for the notification sound, between 0 and 1",
        ge=0,
        le=1,
    )
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the local notification API",
    )
    push_cors_allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to open Socket.IO channels on the push server",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level applied by the entrypoints",
    )

    @model_validator(mode="after")
    def _validate_transport_options(self) -> "Settings":
        unknown = [
            transport
            for transport in self.notification_transports
            if transport not in SUPPORTED_TRANSPORTS
        ]
        if unknown:
            raise ValueError(
                "NOTIFICATION_TRANSPORTS only accepts "
                f"{', '.join(SUPPORTED_TRANSPORTS)}; got {', '.join(unknown)}"
            )
        if self.notification_reconnection_delay_max < self.notification_reconnection_delay:
            raise ValueError(
                "NOTIFICATION_RECONNECTION_DELAY_MAX must be greater than or equal to "
                "NOTIFICATION_RECONNECTION_DELAY"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["SUPPORTED_TRANSPORTS", "Settings", "get_settings", "reset_settings_cache"]
