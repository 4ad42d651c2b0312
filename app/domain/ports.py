"""Contracts the notification engine expects from its collaborators."""

from __future__ import annotations

from typing import Any, AsyncIterator, Callable, Protocol

from app.domain.entities import Notification, NotificationStatus

ADDRESS_PREFIX = "notifications"


def recipient_address(recipient_id: str) -> str:
    """Return the delivery channel address for ``recipient_id``."""

    return f"{ADDRESS_PREFIX}.{recipient_id}"


class NotificationStore(Protocol):
    """Durable storage for notifications.

    Implementations assign ``id``, ``created_at`` and ``updated_at`` themselves
    and raise :class:`~app.domain.exceptions.StoreUnavailableError` when the
    backing storage fails.
    """

    def save(self, notification: Notification) -> Notification:
        ...

    def find_by_id(self, notification_id: int) -> Notification | None:
        ...

    def find_by_recipient_ordered(self, recipient_id: str) -> list[Notification]:
        ...

    def find_by_recipient_ordered_page(
        self, recipient_id: str, offset: int, limit: int
    ) -> tuple[list[Notification], int]:
        ...

    def find_by_recipient_and_status(
        self, recipient_id: str, status: NotificationStatus
    ) -> list[Notification]:
        ...

    def count_by_recipient_and_status(
        self, recipient_id: str, status: NotificationStatus
    ) -> int:
        ...

    def update(
        self, notification_id: int, mutator: Callable[[Notification], Notification]
    ) -> Notification:
        ...

    def delete_by_id(self, notification_id: int) -> bool:
        ...

    def exists_by_id(self, notification_id: int) -> bool:
        ...


class Subscription(Protocol):
    """Live feed of payloads published to one address."""

    address: str

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        ...

    def close(self) -> None:
        ...


class DeliveryChannel(Protocol):
    """Publish/subscribe primitive addressed by recipient."""

    def publish(self, address: str, payload: dict[str, Any]) -> None:
        ...

    def subscribe(self, address: str) -> Subscription:
        ...


__all__ = [
    "ADDRESS_PREFIX",
    "DeliveryChannel",
    "NotificationStore",
    "Subscription",
    "recipient_address",
]
