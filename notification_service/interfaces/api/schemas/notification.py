"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from notification_service.domain.entities import NotificationType


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    user_id: int
    type: NotificationType
    message: str
    related_id: str | None = None
    metadata: dict[str, Any] | None = None
    read: bool = False
    created_at: datetime


class NotificationActionResponse(BaseModel):
    """Acknowledgement returned by bulk read-state operations."""

    message: str
    affected: int = Field(default=0, ge=0)


__all__ = ["NotificationActionResponse", "NotificationRead"]
