"""Tests for the connection registry and the delivery fan-out."""

from datetime import datetime, timezone

import pytest

from notification_service.domain.entities import Notification, NotificationType
from notification_service.infrastructure.notifications import (
    NotificationConnectionManager,
    NotificationPublisher,
    serialize_notification,
)


class FakeWebSocket:
    """Minimal stand-in for a websocket connection."""

    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[dict] = []
        self.accepted = False
        self.fail = fail

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message: dict) -> None:
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(message)


def _notification(user_id: int = 7) -> Notification:
    return Notification(
        id=11,
        user_id=user_id,
        type=NotificationType.COMMENT_ADDED,
        message="New comment on task \"Deploy\"",
        related_id="t1",
        metadata={"commenterName": "Ana"},
        created_at=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
    )


def test_registry_supports_many_connections_per_user():
    manager = NotificationConnectionManager()
    tab_one, tab_two, other = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()

    manager.bind(7, tab_one)
    manager.bind(7, tab_two)
    manager.bind(9, other)

    assert set(manager.connections_for(7)) == {tab_one, tab_two}
    assert manager.connections_for(9) == [other]
    assert manager.connections_for(3) == []
    assert manager.connected_users() == {7, 9}


def test_unbind_by_handle_drops_empty_rooms():
    manager = NotificationConnectionManager()
    tab_one, tab_two = FakeWebSocket(), FakeWebSocket()
    manager.bind(7, tab_one)
    manager.bind(7, tab_two)

    assert manager.unbind(tab_one) == 7
    assert manager.connections_for(7) == [tab_two]
    assert manager.unbind(tab_two) == 7
    assert manager.connected_users() == set()
    assert manager.unbind(tab_two) is None


@pytest.mark.anyio
async def test_connect_accepts_before_binding():
    manager = NotificationConnectionManager()
    websocket = FakeWebSocket()

    await manager.connect(7, websocket)

    assert websocket.accepted
    assert manager.connections_for(7) == [websocket]
    manager.disconnect(websocket)
    assert manager.connections_for(7) == []


@pytest.mark.anyio
async def test_deliver_pushes_identical_payload_to_every_connection():
    manager = NotificationConnectionManager()
    publisher = NotificationPublisher(manager)
    tab_one, tab_two, stranger = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
    manager.bind(7, tab_one)
    manager.bind(7, tab_two)
    manager.bind(9, stranger)

    delivered = await publisher.deliver(_notification(7))

    assert delivered == 2
    expected = {"type": "notification", "data": serialize_notification(_notification(7))}
    assert tab_one.sent == [expected]
    assert tab_two.sent == [expected]
    assert stranger.sent == []


@pytest.mark.anyio
async def test_deliver_without_connections_is_a_noop():
    publisher = NotificationPublisher(NotificationConnectionManager())

    assert await publisher.deliver(_notification(7)) == 0


@pytest.mark.anyio
async def test_failed_push_unbinds_stale_handle_without_affecting_others():
    manager = NotificationConnectionManager()
    publisher = NotificationPublisher(manager)
    broken, healthy = FakeWebSocket(fail=True), FakeWebSocket()
    manager.bind(7, broken)
    manager.bind(7, healthy)

    delivered = await publisher.deliver(_notification(7))

    assert delivered == 1
    assert len(healthy.sent) == 1
    assert manager.connections_for(7) == [healthy]

    await publisher.deliver(_notification(7))
    assert len(healthy.sent) == 2


@pytest.mark.anyio
async def test_dispatch_schedules_delivery_on_running_loop():
    manager = NotificationConnectionManager()
    publisher = NotificationPublisher(manager)
    websocket = FakeWebSocket()
    manager.bind(7, websocket)

    publisher.dispatch(_notification(7))
    assert websocket.sent == []
    await publisher.drain()

    assert len(websocket.sent) == 1


def test_dispatch_outside_the_event_loop_is_rejected():
    manager = NotificationConnectionManager()
    publisher = NotificationPublisher(manager)
    websocket = FakeWebSocket()
    manager.bind(7, websocket)

    with pytest.raises(RuntimeError):
        publisher.dispatch(_notification(7))

    assert websocket.sent == []


def test_serialize_notification_uses_client_field_names():
    payload = serialize_notification(_notification(7))

    assert payload == {
        "id": 11,
        "userId": 7,
        "type": "COMMENT_ADDED",
        "message": "New comment on task \"Deploy\"",
        "relatedId": "t1",
        "metadata": {"commenterName": "Ana"},
        "read": False,
        "createdAt": "2026-01-01T12:00:00+00:00",
    }
