"""Realtime notification helpers for the infrastructure layer."""

from .broker import NotificationEventPublisher, create_redis_client
from .consumer import NotificationEventConsumer
from .events import NotificationEventMessage, parse_event_message, serialize_event
from .manager import ConnectionRegistry, NotificationConnectionManager, notification_manager
from .publisher import (
    NotificationPublisher,
    notification_publisher,
    serialize_notification,
)

__all__ = [
    "ConnectionRegistry",
    "NotificationConnectionManager",
    "notification_manager",
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
    "NotificationEventConsumer",
    "NotificationEventMessage",
    "parse_event_message",
    "serialize_event",
    "NotificationEventPublisher",
    "create_redis_client",
]
