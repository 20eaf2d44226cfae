"""Domain entity describing the authenticated identity bound to a channel."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Identity:
    """User session supplied by the authentication collaborator."""

    user_id: str
    role: str
    business_ids: tuple[str, ...] = field(default_factory=tuple)


__all__ = ["Identity"]
