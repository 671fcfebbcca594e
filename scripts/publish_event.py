"""Utility script to publish a notification event on the broker channel."""

from __future__ import annotations

import argparse
import asyncio
import json
import uuid

from redis.exceptions import RedisError

from notification_service.domain.entities import NotificationEvent, NotificationType
from notification_service.infrastructure.notifications import (
    NotificationEventPublisher,
    create_redis_client,
)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the event to publish."""

    parser = argparse.ArgumentParser(
        description="Publish a notification event as a producer service would.",
    )
    parser.add_argument(
        "--user-id",
        dest="user_ids",
        type=int,
        action="append",
        required=True,
        help="Target user id (repeat the flag for several users)",
    )
    parser.add_argument(
        "--type",
        choices=[member.value for member in NotificationType],
        default=NotificationType.ASSIGNED.value,
        help="Event type (default: ASSIGNED)",
    )
    parser.add_argument("--message", required=True, help="Text shown to the user")
    parser.add_argument("--related-id", default=None, help="Task or team identifier")
    parser.add_argument(
        "--metadata",
        default=None,
        help="JSON object with producer context, e.g. '{\"creatorName\": \"Ana\"}'",
    )
    parser.add_argument(
        "--event-id",
        default=None,
        help="Producer nonce used to recognise redeliveries (default: random)",
    )
    parser.add_argument("--redis-url", default=None, help="Broker URL (default: REDIS_URL)")
    return parser.parse_args()


async def _publish(args: argparse.Namespace, event: NotificationEvent) -> int:
    redis = create_redis_client(args.redis_url)
    try:
        return await NotificationEventPublisher(redis).publish(event)
    finally:
        await redis.aclose()


def main() -> None:
    """Publish an event built from the command line arguments."""

    args = parse_args()

    metadata = None
    if args.metadata:
        try:
            metadata = json.loads(args.metadata)
        except json.JSONDecodeError as exc:
            raise SystemExit(f"--metadata is not valid JSON: {exc}") from exc
        if not isinstance(metadata, dict):
            raise SystemExit("--metadata must be a JSON object")

    event = NotificationEvent(
        user_ids=tuple(args.user_ids),
        type=NotificationType(args.type),
        message=args.message,
        related_id=args.related_id,
        metadata=metadata,
        event_id=args.event_id or uuid.uuid4().hex,
    )

    try:
        receivers = asyncio.run(_publish(args, event))
    except (RedisError, OSError) as exc:
        raise SystemExit(f"Could not publish the event: {exc}") from exc

    print(f"Event {event.event_id} published to {receivers} subscriber(s)")


if __name__ == "__main__":
    main()
