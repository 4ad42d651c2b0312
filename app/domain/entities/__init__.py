"""Domain entities exposed by the application."""

from .notification import (
    Notification,
    NotificationPage,
    NotificationStatus,
    NotificationType,
)

__all__ = [
    "Notification",
    "NotificationPage",
    "NotificationStatus",
    "NotificationType",
]
