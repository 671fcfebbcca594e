"""Utility helpers to push notifications to websocket subscribers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from notification_service.domain.entities import Notification
from notification_service.utils import isoformat_or_none

from .manager import ConnectionRegistry, notification_manager

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Serialize notifications and fan them out to the owner's connections."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry
        self._pending: set[asyncio.Task[None]] = set()

    def dispatch(self, notification: Notification) -> None:
        """Schedule ``notification`` to be delivered to its user.

        Delivery is not awaited. The record is already stored, so a push that
        never reaches the client is recovered through the history endpoint.
        Must be called from the event loop; raises :class:`RuntimeError`
        otherwise.
        """

        task = asyncio.get_running_loop().create_task(self.deliver(notification))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def deliver(self, notification: Notification) -> int:
        """Send ``notification`` to every connection bound to its user.

        Returns the number of connections that accepted the message.
        """

        connections = self._registry.connections_for(notification.user_id)
        if not connections:
            return 0

        message = {"type": "notification", "data": self._serialize(notification)}
        delivered = 0
        for connection in connections:
            try:
                await connection.send_json(message)
            except Exception as exc:
                logger.warning(
                    "Dropping connection for user %s after failed push of notification %s: %s",
                    notification.user_id,
                    notification.id,
                    exc,
                )
                self._registry.unbind(connection)
            else:
                delivered += 1
        return delivered

    async def drain(self) -> None:
        """Wait for the deliveries scheduled so far."""

        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @staticmethod
    def _serialize(notification: Notification) -> dict[str, Any]:
        return {
            "id": notification.id,
            "userId": notification.user_id,
            "type": notification.type.value,
            "message": notification.message,
            "relatedId": notification.related_id,
            "metadata": notification.metadata,
            "read": notification.read,
            "createdAt": isoformat_or_none(notification.created_at),
        }


notification_publisher = NotificationPublisher(notification_manager)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return NotificationPublisher._serialize(notification)


__all__ = [
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
]
