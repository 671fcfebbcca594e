"""Redis pub/sub access shared by producers and the consumer."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from redis import asyncio as aioredis

from notification_service.config import get_settings
from notification_service.domain.entities import NotificationEvent, NotificationType

from .events import serialize_event

logger = logging.getLogger(__name__)


def create_redis_client(
    url: str | None = None, *, decode_responses: bool = True
) -> aioredis.Redis:
    """Return an asyncio Redis client for ``url`` or the configured broker.

    The consumer passes ``decode_responses=False`` so payloads reach it as raw
    bytes and undecodable ones are dropped by the parser.
    """

    return aioredis.from_url(
        url or get_settings().redis_url, decode_responses=decode_responses
    )


class NotificationEventPublisher:
    """Publish notification events for the consumer to materialize.

    Publishing is fire-and-forget: the broker keeps nothing for subscribers
    that are not connected when the message goes out.
    """

    def __init__(self, redis: Any, *, channel: str | None = None) -> None:
        self._redis = redis
        self._channel = channel or get_settings().notifications_channel

    async def publish(self, event: NotificationEvent) -> int:
        """Publish ``event`` and return the number of subscribers reached."""

        payload = serialize_event(event)
        receivers = await self._redis.publish(self._channel, payload)
        if not receivers:
            logger.warning(
                "Notification event %s published on '%s' with no subscribers",
                event.type.value,
                self._channel,
            )
        return receivers

    async def notify(
        self,
        user_ids: Iterable[int],
        *,
        type: NotificationType | str,
        message: str,
        related_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        event_id: str | None = None,
    ) -> int:
        """Build an event from keyword arguments and publish it."""

        event = NotificationEvent(
            user_ids=tuple(user_ids),
            type=NotificationType(type),
            message=message,
            related_id=related_id,
            metadata=metadata,
            event_id=event_id,
        )
        return await self.publish(event)


__all__ = ["NotificationEventPublisher", "create_redis_client"]
