"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import expression

from notification_service.infrastructure.database import Base
from notification_service.utils import ensure_naive_utc, now_utc


def _naive_now():
    return ensure_naive_utc(now_utc())


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"
    __table_args__ = (
        UniqueConstraint("user_id", "dedup_key", name="uq_notification_user_dedup"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Users live in the user service, so there is no foreign key here.
    user_id = Column(Integer, nullable=False, index=True)
    type = Column(String(32), nullable=False)
    message = Column(Text, nullable=False)
    related_id = Column(String(64), nullable=True)
    # ``metadata`` is reserved on declarative classes.
    metadata_ = Column("metadata", JSON, nullable=True)
    read = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    created_at = Column(DateTime(), nullable=False, default=_naive_now, index=True)
    dedup_key = Column(String(64), nullable=True)


__all__ = ["NotificationModel"]
