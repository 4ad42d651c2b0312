"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any

from app.domain.exceptions import InvalidStatusTransitionError


class NotificationStatus(str, Enum):
    """Lifecycle states of a notification."""

    UNREAD = "UNREAD"
    READ = "READ"
    ARCHIVED = "ARCHIVED"


class NotificationType(str, Enum):
    """Severity category chosen by the creator."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


_ALLOWED_TRANSITIONS: dict[NotificationStatus, frozenset[NotificationStatus]] = {
    NotificationStatus.UNREAD: frozenset(
        {NotificationStatus.READ, NotificationStatus.ARCHIVED}
    ),
    NotificationStatus.READ: frozenset(
        {NotificationStatus.READ, NotificationStatus.ARCHIVED}
    ),
    NotificationStatus.ARCHIVED: frozenset({NotificationStatus.ARCHIVED}),
}


@dataclass(frozen=True)
class Notification:
    """Information message delivered to a specific recipient."""

    id: int | None
    title: str
    message: str
    recipient_id: str
    type: NotificationType
    status: NotificationStatus = NotificationStatus.UNREAD
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def transition_to(self, status: NotificationStatus) -> "Notification":
        """Return a copy of the notification moved to ``status``.

        ``READ -> READ`` and ``ARCHIVED -> ARCHIVED`` are accepted as no-ops so
        that repeated requests stay idempotent.
        """

        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError(self.status.value, status.value)
        return replace(self, status=status)

    @property
    def is_unread(self) -> bool:
        return self.status is NotificationStatus.UNREAD

    def to_payload(self) -> dict[str, Any]:
        """Return the canonical JSON-ready representation of the record."""

        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "recipient_id": self.recipient_id,
            "status": self.status.value,
            "type": self.type.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class NotificationPage:
    """Slice of a recipient's notifications plus the overall total."""

    items: list[Notification]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return -(-self.total // self.size)

    @property
    def is_first(self) -> bool:
        return self.page == 0

    @property
    def is_last(self) -> bool:
        return self.page + 1 >= self.total_pages


__all__ = [
    "Notification",
    "NotificationPage",
    "NotificationStatus",
    "NotificationType",
]
