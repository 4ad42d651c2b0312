"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Column, DateTime, Enum, Index, Integer, String, Text

from app.domain.entities import NotificationStatus, NotificationType
from app.infrastructure.database import Base


class NotificationModel(Base):
    """Database representation for recipient notifications."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_recipient_created", "recipient_id", "created_at", "id"),
        Index("ix_notifications_recipient_status", "recipient_id", "status"),
        # Identifiers are never handed out twice, even after deletes.
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    recipient_id = Column(String(255), nullable=False)
    status = Column(
        Enum(NotificationStatus, name="notification_status", native_enum=False, length=16),
        nullable=False,
        default=NotificationStatus.UNREAD,
    )
    type = Column(
        Enum(NotificationType, name="notification_type", native_enum=False, length=16),
        nullable=False,
    )
    created_at = Column(DateTime(), nullable=False)
    updated_at = Column(DateTime(), nullable=False)


__all__ = ["NotificationModel"]
