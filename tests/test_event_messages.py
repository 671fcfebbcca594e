"""Tests for the broker wire format of notification events."""

import json

import pytest
from pydantic import ValidationError

from notification_service.domain.entities import NotificationEvent, NotificationType
from notification_service.infrastructure.notifications import parse_event_message, serialize_event


def _payload(**overrides):
    base = {
        "userIds": [7, 9],
        "type": "ASSIGNED",
        "message": "You have been assigned to task \"Deploy\"",
        "relatedId": "t1",
        "metadata": {"creatorName": "Ana"},
    }
    base.update(overrides)
    return json.dumps(base)


def test_parse_event_message_maps_wire_fields():
    event = parse_event_message(_payload())

    assert event.user_ids == (7, 9)
    assert event.type is NotificationType.ASSIGNED
    assert event.message == "You have been assigned to task \"Deploy\""
    assert event.related_id == "t1"
    assert event.metadata == {"creatorName": "Ana"}
    assert event.event_id is None


def test_parse_event_message_accepts_bytes_and_missing_metadata():
    raw = json.dumps({"userIds": [1], "type": "UPDATED", "message": "x", "relatedId": "t"})

    event = parse_event_message(raw.encode("utf-8"))

    assert event.metadata is None
    assert event.type is NotificationType.UPDATED


@pytest.mark.parametrize(
    ("legacy", "expected"),
    [
        ("TASK_ASSIGNED", NotificationType.ASSIGNED),
        ("TASK_UPDATED", NotificationType.UPDATED),
        ("COMMENT_ADDED", NotificationType.COMMENT_ADDED),
        ("TEAM_ADDED", NotificationType.MEMBERSHIP_ADDED),
    ],
)
def test_parse_event_message_normalizes_producer_type_names(legacy, expected):
    assert parse_event_message(_payload(type=legacy)).type is expected


def test_parse_event_message_stringifies_numeric_related_id():
    assert parse_event_message(_payload(relatedId=42)).related_id == "42"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        json.dumps({"userIds": [1], "message": "x", "relatedId": "t"}),
        _payload(type="DELETED"),
        _payload(userIds="7"),
        _payload(userIds=[True]),
        _payload(message=None),
    ],
)
def test_parse_event_message_rejects_malformed_payloads(raw):
    with pytest.raises(ValidationError):
        parse_event_message(raw)


def test_unique_user_ids_preserves_first_occurrence_order():
    event = NotificationEvent(user_ids=(9, 7, 9, 7, 3), type=NotificationType.UPDATED, message="x")

    assert event.unique_user_ids() == [9, 7, 3]


def test_dedup_key_requires_event_id():
    event = NotificationEvent(user_ids=(1,), type=NotificationType.UPDATED, message="x")
    tagged = NotificationEvent(
        user_ids=(1,), type=NotificationType.UPDATED, message="x", event_id="abc"
    )
    other_users = NotificationEvent(
        user_ids=(2, 3), type=NotificationType.UPDATED, message="x", event_id="abc"
    )

    assert event.dedup_key() is None
    assert tagged.dedup_key() is not None
    assert tagged.dedup_key() == other_users.dedup_key()


def test_serialize_event_uses_camel_case_wire_names():
    event = NotificationEvent(
        user_ids=(4,),
        type=NotificationType.MEMBERSHIP_ADDED,
        message="You have been added to team \"Core\"",
        related_id="team-1",
        metadata={"teamName": "Core"},
        event_id="nonce-1",
    )

    document = json.loads(serialize_event(event))

    assert document == {
        "userIds": [4],
        "type": "MEMBERSHIP_ADDED",
        "message": "You have been added to team \"Core\"",
        "relatedId": "team-1",
        "metadata": {"teamName": "Core"},
        "eventId": "nonce-1",
    }
    assert parse_event_message(serialize_event(event)) == event


def test_serialize_event_rejects_metadata_that_is_not_json():
    event = NotificationEvent(
        user_ids=(4,),
        type=NotificationType.UPDATED,
        message="x",
        metadata={"when": object()},
    )

    with pytest.raises(ValueError):
        serialize_event(event)
