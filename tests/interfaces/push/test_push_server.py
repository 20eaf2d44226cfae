"""Tests for the Socket.IO push producer."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from functools import partial
from typing import Any

import anyio
import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from notification_feed.domain.entities import Identity, Notification
from notification_feed.infrastructure.push import (
    PushSessionRegistry,
    rooms_for_identity,
    target_rooms,
)
from notification_feed.interfaces.push import NotificationPushServer, create_push_api


class FakeSocketServer:
    """Record what the push server asks Socket.IO to do."""

    def __init__(self) -> None:
        self.handlers: dict[str, Any] = {}
        self.emitted: list[tuple[str, Any, str | None]] = []
        self.rooms: defaultdict[str, set[str]] = defaultdict(set)

    def on(self, event: str, handler: Any = None, namespace: str | None = None) -> None:
        self.handlers[event] = handler

    async def emit(
        self, event: str, data: Any = None, to: str | None = None, room: str | None = None, **_: Any
    ) -> None:
        self.emitted.append((event, data, to or room))

    async def enter_room(self, sid: str, room: str, namespace: str | None = None) -> None:
        self.rooms[sid].add(room)

    async def leave_room(self, sid: str, room: str, namespace: str | None = None) -> None:
        self.rooms[sid].discard(room)


@pytest.fixture()
def sio() -> FakeSocketServer:
    return FakeSocketServer()


@pytest.fixture()
def push_server(sio) -> NotificationPushServer:
    return NotificationPushServer(sio=sio)


def test_handlers_are_registered(sio, push_server) -> None:
    assert {"connect", "disconnect", "authenticate"} <= set(sio.handlers)


@pytest.mark.anyio
async def test_authenticate_joins_rooms_and_acknowledges(sio, push_server) -> None:
    await push_server.on_authenticate(
        "sid-1", {"userId": "u1", "userRole": "business_owner", "businessIds": ["b1", "b2"]}
    )

    assert sio.rooms["sid-1"] == {"user:u1", "role:business_owner", "business:b1", "business:b2"}
    assert sio.emitted == [("authenticated", {"success": True}, "sid-1")]
    assert push_server.registry.identity_for("sid-1") == Identity(
        user_id="u1", role="business_owner", business_ids=("b1", "b2")
    )


@pytest.mark.anyio
async def test_invalid_authentication_is_reported(sio, push_server) -> None:
    await push_server.on_authenticate("sid-1", {"userRole": "user"})

    assert sio.rooms["sid-1"] == set()
    assert sio.emitted == [
        ("authentication_error", {"error": "Invalid authentication payload"}, "sid-1")
    ]
    assert push_server.registry.identity_for("sid-1") is None


@pytest.mark.anyio
async def test_reauthentication_leaves_previous_rooms(sio, push_server) -> None:
    await push_server.on_authenticate("sid-1", {"userId": "u1", "userRole": "user"})
    await push_server.on_authenticate("sid-1", {"userId": "u2", "userRole": "user"})

    assert sio.rooms["sid-1"] == {"user:u2", "role:user"}
    assert push_server.registry.sessions_for_user("u1") == set()


@pytest.mark.anyio
async def test_disconnect_forgets_the_session(push_server) -> None:
    await push_server.on_authenticate("sid-1", {"userId": "u1", "userRole": "user"})

    await push_server.on_disconnect("sid-1", "client disconnect")

    assert push_server.registry.identity_for("sid-1") is None


@pytest.mark.anyio
async def test_publisher_emits_to_each_target_room(sio, push_server, drain) -> None:
    notification = Notification(
        id="n-1",
        type="review",
        title="New Review Received",
        message="Five stars",
        timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )

    rooms = push_server.publisher.dispatch(
        notification, user_ids=["u1", "u1"], business_ids=["b1"]
    )
    await drain()

    assert rooms == ["user:u1", "business:b1"]
    assert [room for _, _, room in sio.emitted] == ["user:u1", "business:b1"]
    event, payload, _ = sio.emitted[0]
    assert event == "notification"
    assert payload["id"] == "n-1"
    assert payload["timestamp"].startswith("2024-05-01T12:00:00")
    assert "read" not in payload


def test_publisher_skips_notifications_without_recipients(sio, push_server) -> None:
    notification = Notification(
        id="n-1",
        type="system",
        title="Maintenance",
        message="Tonight",
        timestamp=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )

    assert push_server.publisher.dispatch(notification) == []
    assert sio.emitted == []


def test_publish_endpoint_schedules_delivery(push_server) -> None:
    client = TestClient(create_push_api(push_server))

    response = client.post(
        "/notifications/",
        json={
            "type": "business",
            "title": "New Business Follower",
            "message": "Mike Customer is now following your business",
            "businessIds": ["b1"],
            "roles": ["admin"],
        },
    )

    assert response.status_code == 202
    body = response.json()
    assert body["rooms"] == ["business:b1", "role:admin"]
    assert body["id"]


def test_publish_endpoint_requires_an_audience(push_server) -> None:
    client = TestClient(create_push_api(push_server))

    response = client.post(
        "/notifications/",
        json={"type": "system", "title": "Hello", "message": "Nobody"},
    )

    assert response.status_code == 422


def test_room_helpers() -> None:
    identity = Identity(user_id="u1", role="admin", business_ids=("b1",))

    assert rooms_for_identity(identity) == ["user:u1", "role:admin", "business:b1"]
    assert target_rooms(user_ids=["u1", ""], roles=["admin", "admin"]) == ["user:u1", "role:admin"]


def test_registry_tracks_sessions_per_user() -> None:
    registry = PushSessionRegistry()
    identity = Identity(user_id="u1", role="user")

    registry.register("a", identity)
    registry.register("b", identity)
    registry.unregister("a")

    assert registry.sessions_for_user("u1") == {"b"}
    assert registry.unregister("missing") is None


@pytest.mark.anyio
async def test_test_notification_is_echoed_to_the_caller_only(sio, push_server) -> None:
    await push_server.on_authenticate("sid-1", {"userId": "u1", "userRole": "user"})
    sio.emitted.clear()

    await push_server.on_test_notification("sid-1")

    assert len(sio.emitted) == 1
    event, payload, target = sio.emitted[0]
    assert (event, target) == ("notification", "sid-1")
    assert payload["type"] == "test"
    assert payload["title"] == "Test Notification"
    assert payload["id"]
    assert "test_notification" in sio.handlers


@pytest.mark.anyio
async def test_stats_count_authenticated_sessions(push_server) -> None:
    await push_server.on_authenticate(
        "sid-1", {"userId": "u1", "userRole": "business_owner", "businessIds": ["b1", "b2"]}
    )
    await push_server.on_authenticate(
        "sid-2", {"userId": "u1", "userRole": "business_owner", "businessIds": ["b1"]}
    )
    await push_server.on_authenticate("sid-3", {"userId": "u2", "userRole": "user"})
    await push_server.on_authenticate("sid-4", {"userRole": "user"})

    stats = push_server.stats()

    assert stats.total_connections == 3
    assert stats.business_connections == 2
    assert stats.connected_users == ("u1", "u2")

    await push_server.on_disconnect("sid-3")

    assert push_server.stats().connected_users == ("u1",)


def test_stats_endpoint_reports_connections(push_server) -> None:
    push_server.registry.register("sid-1", Identity(user_id="u1", role="admin"))
    client = TestClient(create_push_api(push_server))

    response = client.get("/notifications/stats")

    assert response.status_code == 200
    assert response.json() == {
        "totalConnections": 1,
        "businessConnections": 0,
        "connectedUsers": ["u1"],
        "isActive": True,
    }


@pytest.mark.anyio
async def test_publisher_schedules_from_worker_threads(sio, push_server, drain) -> None:
    notification = Notification(
        id="n-2",
        type="system",
        title="Maintenance",
        message="Tonight",
        timestamp=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )

    rooms = await anyio.to_thread.run_sync(
        partial(push_server.publisher.dispatch, notification, roles=["admin"])
    )
    await drain()

    assert rooms == ["role:admin"]
    assert [(event, room) for event, _, room in sio.emitted] == [("notification", "role:admin")]
