"""Repository implementations for infrastructure layer."""

from .memory_notification_repository import InMemoryNotificationRepository
from .notification_repository import SqlAlchemyNotificationRepository

__all__ = [
    "InMemoryNotificationRepository",
    "SqlAlchemyNotificationRepository",
]
