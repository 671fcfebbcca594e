"""Broker subscription that turns events into stored and pushed notifications."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any

import anyio
from pydantic import ValidationError
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from notification_service.config import get_settings
from notification_service.domain.entities import Notification, NotificationEvent

from .events import parse_event_message
from .publisher import NotificationPublisher

logger = logging.getLogger(__name__)

StoreFunction = Callable[[Session, NotificationEvent], Sequence[Notification]]

_PAYLOAD_PREVIEW = 200


class NotificationEventConsumer:
    """Consume notification events one at a time from the broker channel.

    Each event is written to the store in one operation and every created
    record is then handed to the publisher. Failures are logged and never
    stop the subscription loop.
    """

    def __init__(
        self,
        *,
        redis: Any,
        session_factory: Callable[[], Session],
        store: StoreFunction,
        publisher: NotificationPublisher,
        channel: str | None = None,
        store_timeout: float | None = None,
        reconnect_delay: float | None = None,
    ) -> None:
        settings = get_settings()
        self._redis = redis
        self._session_factory = session_factory
        self._store = store
        self._publisher = publisher
        self._channel = channel or settings.notifications_channel
        self._store_timeout = (
            store_timeout if store_timeout is not None else settings.store_timeout_seconds
        )
        self._reconnect_delay = (
            reconnect_delay
            if reconnect_delay is not None
            else settings.broker_reconnect_delay_seconds
        )

    @property
    def channel(self) -> str:
        return self._channel

    async def run(self) -> None:
        """Subscribe to the channel and process messages until cancelled."""

        while True:
            pubsub = self._redis.pubsub()
            try:
                await pubsub.subscribe(self._channel)
                logger.info("Subscribed to notification channel '%s'", self._channel)
                async for message in pubsub.listen():
                    if message.get("type") != "message":
                        continue
                    await self.handle_message(message.get("data"))
            except (RedisError, OSError) as exc:
                logger.warning(
                    "Lost subscription to '%s': %s. Retrying in %.1fs",
                    self._channel,
                    exc,
                    self._reconnect_delay,
                )
            except Exception:
                logger.exception(
                    "Unexpected failure while consuming '%s'. Re-subscribing in %.1fs",
                    self._channel,
                    self._reconnect_delay,
                )
            finally:
                await pubsub.aclose()
            await asyncio.sleep(self._reconnect_delay)

    async def handle_message(self, raw: str | bytes | None) -> list[Notification]:
        """Process one raw channel payload and return the records created."""

        if raw is None:
            return []
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                logger.warning(
                    "Dropping malformed notification event (not UTF-8: %s) | payload=%r",
                    exc,
                    raw[:_PAYLOAD_PREVIEW],
                )
                return []
        try:
            event = parse_event_message(raw)
        except ValidationError as exc:
            logger.warning(
                "Dropping malformed notification event (%d error(s)): %s | payload=%r",
                exc.error_count(),
                "; ".join(
                    f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
                    for error in exc.errors()
                ),
                raw[:_PAYLOAD_PREVIEW],
            )
            return []

        if not event.user_ids:
            logger.debug("Ignoring %s event without recipients", event.type.value)
            return []

        try:
            with anyio.fail_after(self._store_timeout):
                created = await anyio.to_thread.run_sync(
                    self._store_event, event, abandon_on_cancel=True
                )
        except TimeoutError:
            logger.error(
                "Timed out after %.1fs storing %s event for users %s; outcome unknown, "
                "records may still be committed and only reach the user through history",
                self._store_timeout,
                event.type.value,
                event.unique_user_ids(),
            )
            return []
        except Exception:
            logger.exception(
                "Failed to store %s event for users %s; event lost",
                event.type.value,
                event.unique_user_ids(),
            )
            return []

        notifications = list(created)
        for notification in notifications:
            try:
                self._publisher.dispatch(notification)
            except Exception:
                logger.exception(
                    "Failed to schedule delivery of notification %s to user %s",
                    notification.id,
                    notification.user_id,
                )
        logger.info(
            "Stored %d %s notification(s) for related id %s",
            len(notifications),
            event.type.value,
            event.related_id,
        )
        return notifications

    def _store_event(self, event: NotificationEvent) -> Sequence[Notification]:
        session = self._session_factory()
        try:
            return self._store(session, event)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


__all__ = ["NotificationEventConsumer"]
