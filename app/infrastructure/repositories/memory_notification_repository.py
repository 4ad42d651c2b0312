"""In-process notification store used for development and tests."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from dataclasses import replace

from app.domain.entities import Notification, NotificationStatus
from app.domain.exceptions import NotFoundError
from app.utils.timestamps import current_timestamp


class InMemoryNotificationRepository:
    """Keep notifications in a dictionary guarded by a lock.

    Identifiers come from a counter that never goes backwards, so an id freed
    by a delete is not handed out again.
    """

    def __init__(self) -> None:
        self._records: dict[int, Notification] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def save(self, notification: Notification) -> Notification:
        with self._lock:
            now = current_timestamp()
            stored = replace(
                notification, id=next(self._ids), created_at=now, updated_at=now
            )
            self._records[stored.id] = stored
            return stored

    def find_by_id(self, notification_id: int) -> Notification | None:
        with self._lock:
            return self._records.get(notification_id)

    def find_by_recipient_ordered(self, recipient_id: str) -> list[Notification]:
        with self._lock:
            return self._ordered_for(recipient_id)

    def find_by_recipient_ordered_page(
        self, recipient_id: str, offset: int, limit: int
    ) -> tuple[list[Notification], int]:
        with self._lock:
            ordered = self._ordered_for(recipient_id)
        return ordered[offset : offset + limit], len(ordered)

    def find_by_recipient_and_status(
        self, recipient_id: str, status: NotificationStatus
    ) -> list[Notification]:
        with self._lock:
            return [
                record
                for record in self._ordered_for(recipient_id)
                if record.status is status
            ]

    def count_by_recipient_and_status(
        self, recipient_id: str, status: NotificationStatus
    ) -> int:
        with self._lock:
            return sum(
                1
                for record in self._records.values()
                if record.recipient_id == recipient_id and record.status is status
            )

    def update(
        self, notification_id: int, mutator: Callable[[Notification], Notification]
    ) -> Notification:
        with self._lock:
            current = self._records.get(notification_id)
            if current is None:
                raise NotFoundError(notification_id)
            changed = mutator(current)
            stored = replace(
                current, status=changed.status, updated_at=current_timestamp()
            )
            self._records[notification_id] = stored
            return stored

    def delete_by_id(self, notification_id: int) -> bool:
        with self._lock:
            return self._records.pop(notification_id, None) is not None

    def exists_by_id(self, notification_id: int) -> bool:
        with self._lock:
            return notification_id in self._records

    def _ordered_for(self, recipient_id: str) -> list[Notification]:
        matches = [
            record
            for record in self._records.values()
            if record.recipient_id == recipient_id
        ]
        matches.sort(key=lambda record: (record.created_at, record.id), reverse=True)
        return matches


__all__ = ["InMemoryNotificationRepository"]
