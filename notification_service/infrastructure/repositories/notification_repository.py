"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterable

from sqlalchemy.orm import Session

from notification_service.domain.entities import Notification, NotificationType
from notification_service.infrastructure.models import NotificationModel
from notification_service.utils import ensure_naive_utc, ensure_utc, now_utc


class NotificationRepository:
    """Provide the operations allowed on :class:`Notification` records.

    Records are append-only: besides creation, only the ``read`` flag can
    change and rows are only removed in bulk for a single user.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(
        self,
        user_id: int,
        *,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = self.session.query(NotificationModel)
        query = query.filter(NotificationModel.user_id == user_id)
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_unread_for_user(
        self, user_id: int, *, limit: int | None = 50
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.read.is_(False))
            .order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def create_many(self, notifications: Sequence[Notification]) -> list[Notification]:
        """Insert ``notifications`` in a single transaction."""

        if not notifications:
            return []
        models = []
        for notification in notifications:
            model = NotificationModel()
            self._apply_entity_to_model(model, notification)
            models.append(model)
        self.session.add_all(models)
        self.session.commit()
        for model in models:
            self.session.refresh(model)
        return [self._to_entity(model) for model in models]

    def users_with_dedup_key(self, user_ids: Iterable[int], dedup_key: str) -> set[int]:
        """Return the users in ``user_ids`` that already hold ``dedup_key``."""

        ids = list(user_ids)
        if not ids:
            return set()
        rows = (
            self.session.query(NotificationModel.user_id)
            .filter(NotificationModel.dedup_key == dedup_key)
            .filter(NotificationModel.user_id.in_(ids))
            .all()
        )
        return {row.user_id for row in rows}

    def mark_as_read(self, notification_id: int, *, user_id: int) -> Notification | None:
        """Flag one record as read.

        ``None`` is returned both when the record does not exist and when it
        belongs to another user.
        """

        model = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .filter(NotificationModel.user_id == user_id)
            .one_or_none()
        )
        if model is None:
            return None
        if not model.read:
            model.read = True
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def mark_many_as_read(self, notification_ids: Iterable[int], *, user_id: int) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id.in_(ids),
                NotificationModel.user_id == user_id,
                NotificationModel.read.is_(False),
            )
            .update({NotificationModel.read: True}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def mark_all_as_read(self, user_id: int) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.user_id == user_id,
                NotificationModel.read.is_(False),
            )
            .update({NotificationModel.read: True}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def clear_for_user(self, user_id: int) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel,
        notification: Notification,
    ) -> None:
        model.created_at = ensure_naive_utc(notification.created_at or now_utc())
        model.user_id = notification.user_id
        model.type = NotificationType(notification.type).value
        model.message = notification.message
        model.related_id = notification.related_id
        model.metadata_ = notification.metadata
        model.read = bool(notification.read)
        model.dedup_key = notification.dedup_key

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=NotificationType(model.type),
            message=model.message,
            related_id=model.related_id,
            metadata=model.metadata_,
            read=bool(model.read),
            created_at=ensure_utc(model.created_at),
            dedup_key=model.dedup_key,
        )


__all__ = ["NotificationRepository"]
