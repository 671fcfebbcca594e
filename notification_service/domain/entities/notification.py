"""Domain entities describing notification events and records."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class NotificationType(str, Enum):
    """Kinds of domain events that produce notifications."""

    ASSIGNED = "ASSIGNED"
    UPDATED = "UPDATED"
    COMMENT_ADDED = "COMMENT_ADDED"
    MEMBERSHIP_ADDED = "MEMBERSHIP_ADDED"


# Names still published by the task and team services.
LEGACY_NOTIFICATION_TYPES: dict[str, NotificationType] = {
    "TASK_ASSIGNED": NotificationType.ASSIGNED,
    "TASK_UPDATED": NotificationType.UPDATED,
    "TEAM_ADDED": NotificationType.MEMBERSHIP_ADDED,
}


@dataclass(frozen=True)
class NotificationEvent:
    """A notification-worthy fact published once by a producer service."""

    user_ids: tuple[int, ...]
    type: NotificationType
    message: str
    related_id: str | None = None
    metadata: dict[str, Any] | None = None
    event_id: str | None = None

    def unique_user_ids(self) -> list[int]:
        """Return the target users without duplicates preserving order."""

        unique: list[int] = []
        seen: set[int] = set()
        for user_id in self.user_ids:
            if user_id in seen:
                continue
            seen.add(user_id)
            unique.append(user_id)
        return unique

    def dedup_key(self) -> str | None:
        """Return a stable key identifying redeliveries of this event.

        Only events carrying a producer-assigned ``event_id`` can be
        recognised when delivered again; for the rest ``None`` is returned.
        """

        if not self.event_id:
            return None
        fingerprint = json.dumps(
            [self.event_id, self.type.value, self.related_id, self.message],
            separators=(",", ":"),
        )
        return hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()


@dataclass
class Notification:
    """Durable, per-user materialization of one event."""

    id: int | None
    user_id: int
    type: NotificationType
    message: str
    related_id: str | None = None
    metadata: dict[str, Any] | None = None
    read: bool = False
    created_at: datetime | None = None
    dedup_key: str | None = field(default=None, repr=False)


__all__ = [
    "LEGACY_NOTIFICATION_TYPES",
    "Notification",
    "NotificationEvent",
    "NotificationType",
]
