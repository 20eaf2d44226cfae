"""Track which Socket.IO sessions are authenticated and for whom."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import DefaultDict, Iterable, Set

from notification_feed.domain.entities import Identity


def user_room(user_id: str) -> str:
    return f"user:{user_id}"


def business_room(business_id: str) -> str:
    return f"business:{business_id}"


def role_room(role: str) -> str:
    return f"role:{role}"


def rooms_for_identity(identity: Identity) -> list[str]:
    """Return every room a session authenticated as ``identity`` joins."""

    rooms = [user_room(identity.user_id), role_room(identity.role)]
    rooms.extend(business_room(business_id) for business_id in identity.business_ids)
    return rooms


def target_rooms(
    *,
    user_ids: Iterable[str] = (),
    business_ids: Iterable[str] = (),
    roles: Iterable[str] = (),
) -> list[str]:
    """Return the unique rooms addressed by a dispatch, preserving order."""

    rooms: list[str] = []
    candidates = (
        [user_room(user_id) for user_id in user_ids if user_id]
        + [business_room(business_id) for business_id in business_ids if business_id]
        + [role_room(role) for role in roles if role]
    )
    for room in candidates:
        if room not in rooms:
            rooms.append(room)
    return rooms


@dataclass(frozen=True)
class PushSessionStats:
    """Snapshot of the sessions currently authenticated on the push server."""

    total_connections: int
    business_connections: int
    connected_users: tuple[str, ...]


class PushSessionRegistry:
    """Map Socket.IO session ids to the identity they authenticated as."""

    def __init__(self) -> None:
        self._identities: dict[str, Identity] = {}
        self._sessions: DefaultDict[str, Set[str]] = defaultdict(set)

    def register(self, sid: str, identity: Identity) -> Identity | None:
        """Bind ``sid`` to ``identity``; return the identity it replaced, if any."""

        previous = self.unregister(sid)
        self._identities[sid] = identity
        self._sessions[identity.user_id].add(sid)
        return previous

    def unregister(self, sid: str) -> Identity | None:
        """Forget ``sid``; return its identity if it had authenticated."""

        identity = self._identities.pop(sid, None)
        if identity is None:
            return None
        sessions = self._sessions.get(identity.user_id)
        if sessions is not None:
            sessions.discard(sid)
            if not sessions:
                self._sessions.pop(identity.user_id, None)
        return identity

    def identity_for(self, sid: str) -> Identity | None:
        return self._identities.get(sid)

    def sessions_for_user(self, user_id: str) -> set[str]:
        return set(self._sessions.get(user_id, set()))

    def stats(self) -> PushSessionStats:
        """Count authenticated sessions, the businesses they cover and their users."""

        businesses = {
            business_id
            for identity in self._identities.values()
            for business_id in identity.business_ids
        }
        return PushSessionStats(
            total_connections=sum(len(self.sessions_for_user(user)) for user in self._sessions),
            business_connections=len(businesses),
            connected_users=tuple(sorted(self._sessions)),
        )


__all__ = [
    "PushSessionRegistry",
    "PushSessionStats",
    "business_room",
    "role_room",
    "rooms_for_identity",
    "target_rooms",
    "user_room",
]
