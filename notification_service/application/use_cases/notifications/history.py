"""Read-state operations behind the client sync API.

Every function is scoped to the user id taken from the caller's token.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_service.config import get_settings
from notification_service.domain.entities import Notification
from notification_service.infrastructure.repositories import NotificationRepository


def list_recent_notifications(session: Session, *, user_id: int) -> Sequence[Notification]:
    limit = get_settings().history_limit
    return NotificationRepository(session).list_for_user(user_id, limit=limit)


def mark_notification_read(
    session: Session, *, user_id: int, notification_id: int
) -> Notification | None:
    return NotificationRepository(session).mark_as_read(notification_id, user_id=user_id)


def mark_all_notifications_read(session: Session, *, user_id: int) -> int:
    return NotificationRepository(session).mark_all_as_read(user_id)


def clear_notifications(session: Session, *, user_id: int) -> int:
    return NotificationRepository(session).clear_for_user(user_id)


__all__ = [
    "clear_notifications",
    "list_recent_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
]
