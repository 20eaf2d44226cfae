"""Tests for the channel message schemas."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from notification_feed.domain.entities import Identity, NotificationPriority
from notification_feed.schemas import AuthenticateMessage, NotificationMessage


def test_authenticate_message_uses_wire_field_names() -> None:
    identity = Identity(user_id="u1", role="business_owner", business_ids=("b1", "b2"))

    payload = AuthenticateMessage.from_identity(identity).to_wire()

    assert payload == {"userId": "u1", "userRole": "business_owner", "businessIds": ["b1", "b2"]}


def test_authenticate_message_round_trips_to_identity() -> None:
    message = AuthenticateMessage.model_validate(
        {"userId": 42, "userRole": "user", "businessIds": None}
    )

    assert message.to_identity() == Identity(user_id="42", role="user", business_ids=())


def test_authenticate_message_requires_user() -> None:
    with pytest.raises(ValidationError):
        AuthenticateMessage.model_validate({"userRole": "user"})


def test_notification_message_builds_an_unread_entity(make_payload) -> None:
    notification = NotificationMessage.model_validate(make_payload("n-1")).to_entity()

    assert notification.id == "n-1"
    assert notification.read is False
    assert notification.priority is NotificationPriority.HIGH
    assert notification.timestamp == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert notification.actions[0].action == "open_review"
    assert notification.data == {"businessName": "Amazing Italian Restaurant", "rating": 5}


def test_notification_message_accepts_numeric_ids_and_metadata(make_payload) -> None:
    payload = make_payload(7, data=None, metadata={"userName": "Mike Customer"})
    payload.pop("priority")
    payload.pop("actions")

    notification = NotificationMessage.model_validate(payload).to_entity()

    assert notification.id == "7"
    assert notification.data == {"userName": "Mike Customer"}
    assert notification.priority is None
    assert notification.actions == ()


def test_naive_timestamps_are_treated_as_utc(make_payload) -> None:
    payload = make_payload(timestamp="2024-05-01T08:30:00")

    notification = NotificationMessage.model_validate(payload).to_entity()

    assert notification.timestamp.tzinfo is not None
    assert notification.timestamp.hour == 8


@pytest.mark.parametrize(
    "overrides",
    [
        {"id": ""},
        {"title": None},
        {"timestamp": "yesterday"},
        {"priority": "urgent"},
    ],
)
def test_notification_message_rejects_malformed_payloads(make_payload, overrides) -> None:
    with pytest.raises(ValidationError):
        NotificationMessage.model_validate(make_payload(**overrides))


def test_read_flag_from_the_wire_is_ignored(make_payload) -> None:
    notification = NotificationMessage.model_validate(make_payload(read=True)).to_entity()

    assert notification.read is False


def test_notification_without_id_gets_a_generated_one(make_payload) -> None:
    payload = make_payload()
    del payload["id"]

    first = NotificationMessage.model_validate(payload).to_entity()
    second = NotificationMessage.model_validate(payload).to_entity()

    assert first.id
    assert first.id != second.id
