"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import logging

import anyio
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from notification_service.application.use_cases.notifications import (
    clear_notifications,
    list_recent_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)
from notification_service.domain.entities import AuthenticatedUser, Notification
from notification_service.infrastructure import database
from notification_service.infrastructure.database import get_db
from notification_service.infrastructure.notifications import notification_manager, serialize_notification
from notification_service.infrastructure.repositories import NotificationRepository
from notification_service.interfaces.api.dependencies import get_current_user, resolve_current_user
from notification_service.interfaces.api.schemas import NotificationActionResponse, NotificationRead

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)

# RFC 6455 "policy violation", used for rejected handshakes.
_WS_POLICY_VIOLATION = 1008


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or 0,
        user_id=notification.user_id,
        type=notification.type,
        message=notification.message,
        related_id=notification.related_id,
        metadata=notification.metadata,
        read=notification.read,
        created_at=notification.created_at,
    )


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> list[NotificationRead]:
    """Return the most recent notifications for the authenticated user."""

    notifications = list_recent_notifications(db, user_id=current_user.id)
    return [_notification_to_schema(notification) for notification in notifications]


@router.patch("/read-all", response_model=NotificationActionResponse)
def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> NotificationActionResponse:
    """Mark every unread notification of the authenticated user as read."""

    updated = mark_all_notifications_read(db, user_id=current_user.id)
    return NotificationActionResponse(
        message="All notifications marked as read", affected=updated
    )


@router.patch("/{notification_id}/read", response_model=NotificationRead)
def mark_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> NotificationRead:
    """Mark one notification owned by the authenticated user as read."""

    notification = mark_notification_read(
        db, user_id=current_user.id, notification_id=notification_id
    )
    if notification is None:
        # Same answer for unknown ids and ids owned by someone else.
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notificación no encontrada",
        )
    return _notification_to_schema(notification)


@router.delete("", response_model=NotificationActionResponse)
def clear_all(
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> NotificationActionResponse:
    """Delete every notification of the authenticated user."""

    deleted = clear_notifications(db, user_id=current_user.id)
    return NotificationActionResponse(message="Notifications cleared", affected=deleted)


def _load_unread(user_id: int) -> list[Notification]:
    session = database.SessionLocal()
    try:
        return list(NotificationRepository(session).list_unread_for_user(user_id))
    finally:
        session.close()


def _acknowledge(user_id: int, ids: list[int]) -> None:
    session = database.SessionLocal()
    try:
        NotificationRepository(session).mark_many_as_read(ids, user_id=user_id)
    finally:
        session.close()


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    try:
        user = resolve_current_user(token)
    except HTTPException:
        logger.info("Rejected notification socket without valid credentials")
        await websocket.close(code=_WS_POLICY_VIOLATION)
        return

    await notification_manager.connect(user.id, websocket)
    logger.info("User %s connected to notifications", user.id)
    try:
        pending_notifications = await anyio.to_thread.run_sync(_load_unread, user.id)
        if pending_notifications:
            await websocket.send_json(
                {"type": "init", "data": [serialize_notification(n) for n in pending_notifications]}
            )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except (KeyError, ValueError):
                # Binary frames have no "text" and non-JSON text fails to parse.
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    valid_ids = [i for i in ids if isinstance(i, int) and not isinstance(i, bool)]
                    await anyio.to_thread.run_sync(_acknowledge, user.id, valid_ids)
                continue
    except WebSocketDisconnect:
        logger.info("User %s disconnected from notifications", user.id)
    finally:
        notification_manager.disconnect(websocket)
