"""Pydantic models for the identity signal and the channel status."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notification_feed.domain.entities import Identity


class SessionRequest(BaseModel):
    """Identity published by the authentication collaborator after login."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    role: str = Field(..., min_length=1)
    business_ids: list[str] = Field(default_factory=list, alias="businessIds")

    @field_validator("user_id", mode="before")
    @classmethod
    def _stringify_user_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_identity(self) -> Identity:
        return Identity(
            user_id=self.user_id,
            role=self.role,
            business_ids=tuple(dict.fromkeys(self.business_ids)),
        )


class ConnectionStatusRead(BaseModel):
    """Connectivity of the notification channel."""

    model_config = ConfigDict(populate_by_name=True)

    is_connected: bool = Field(..., alias="isConnected")
    connection_state: str = Field(..., alias="connectionState")
    user_id: str | None = Field(default=None, alias="userId")
    handshake_status: str | None = Field(default=None, alias="handshakeStatus")
    handshake_error: str | None = Field(default=None, alias="handshakeError")


__all__ = ["ConnectionStatusRead", "SessionRequest"]
