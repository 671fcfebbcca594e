"""Public helpers for notification use cases."""

from .events import store_event_notifications
from .history import (
    clear_notifications,
    list_recent_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)

__all__ = [
    "store_event_notifications",
    "list_recent_notifications",
    "mark_notification_read",
    "mark_all_notifications_read",
    "clear_notifications",
]
