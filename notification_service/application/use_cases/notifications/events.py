"""Materialize broker events into per-user notification records."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from notification_service.domain.entities import Notification, NotificationEvent
from notification_service.infrastructure.repositories import NotificationRepository
from notification_service.utils import now_utc

logger = logging.getLogger(__name__)


def store_event_notifications(session: Session, event: NotificationEvent) -> list[Notification]:
    """Persist one notification per distinct target user of ``event``.

    All records are written in a single transaction and share the same
    creation timestamp. Users that already received this event (same
    ``event_id``) are skipped. Returns the records that were created.
    """

    recipients = event.unique_user_ids()
    if not recipients:
        return []

    repository = NotificationRepository(session)
    dedup_key = event.dedup_key()
    if dedup_key is not None:
        already_notified = repository.users_with_dedup_key(recipients, dedup_key)
        if already_notified:
            logger.info(
                "Skipping redelivered event %s for users %s",
                event.event_id,
                sorted(already_notified),
            )
            recipients = [user_id for user_id in recipients if user_id not in already_notified]
        if not recipients:
            return []

    created_at = now_utc()
    notifications = [
        Notification(
            id=None,
            user_id=user_id,
            type=event.type,
            message=event.message,
            related_id=event.related_id,
            metadata=event.metadata,
            read=False,
            created_at=created_at,
            dedup_key=dedup_key,
        )
        for user_id in recipients
    ]
    return repository.create_many(notifications)


__all__ = ["store_event_notifications"]
