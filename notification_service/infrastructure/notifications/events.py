"""Wire format of the notification events exchanged over the broker."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from notification_service.domain.entities import (
    LEGACY_NOTIFICATION_TYPES,
    NotificationEvent,
    NotificationType,
)


class NotificationEventMessage(BaseModel):
    """JSON payload published by producer services on the channel."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_ids: list[StrictInt] = Field(..., alias="userIds")
    type: NotificationType
    message: str
    related_id: str | None = Field(default=None, alias="relatedId")
    metadata: dict[str, Any] | None = None
    event_id: str | None = Field(default=None, alias="eventId", max_length=128)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_legacy_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return LEGACY_NOTIFICATION_TYPES.get(value, value)
        return value

    @field_validator("related_id", mode="before")
    @classmethod
    def _stringify_related_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_event(self) -> NotificationEvent:
        return NotificationEvent(
            user_ids=tuple(self.user_ids),
            type=self.type,
            message=self.message,
            related_id=self.related_id,
            metadata=self.metadata,
            event_id=self.event_id,
        )


def parse_event_message(raw: str | bytes) -> NotificationEvent:
    """Parse a raw channel payload.

    Raises :class:`pydantic.ValidationError` for malformed JSON, missing
    fields or an unknown ``type``.
    """

    return NotificationEventMessage.model_validate_json(raw).to_event()


def serialize_event(event: NotificationEvent) -> str:
    """Return the JSON document published for ``event``.

    Raises :class:`ValueError` when ``metadata`` cannot be encoded as JSON.
    """

    document: dict[str, Any] = {
        "userIds": list(event.user_ids),
        "type": event.type.value,
        "message": event.message,
        "relatedId": event.related_id,
    }
    if event.metadata is not None:
        document["metadata"] = event.metadata
    if event.event_id:
        document["eventId"] = event.event_id
    try:
        return json.dumps(document, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Notification metadata is not JSON serializable: {exc}") from exc


__all__ = ["NotificationEventMessage", "parse_event_message", "serialize_event"]
