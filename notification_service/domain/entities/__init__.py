"""Domain entities exposed by the application."""

from .notification import (
    LEGACY_NOTIFICATION_TYPES,
    Notification,
    NotificationEvent,
    NotificationType,
)
from .principal import AuthenticatedUser

__all__ = [
    "AuthenticatedUser",
    "LEGACY_NOTIFICATION_TYPES",
    "Notification",
    "NotificationEvent",
    "NotificationType",
]
