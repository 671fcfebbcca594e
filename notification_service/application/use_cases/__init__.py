"""Aggregate application use cases."""

from .notifications import (
    clear_notifications,
    list_recent_notifications,
    mark_all_notifications_read,
    mark_notification_read,
    store_event_notifications,
)

__all__ = [
    "clear_notifications",
    "list_recent_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
    "store_event_notifications",
]
