"""Utility helpers to push newly created notifications to subscribers."""

from __future__ import annotations

import logging
from typing import Any

from app.domain.entities import Notification
from app.domain.exceptions import ChannelError
from app.domain.ports import DeliveryChannel, recipient_address

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Serialize notifications and publish them on the recipient's address.

    Delivery is best-effort: a failing channel is retried at most
    ``attempts`` times in total and the payload is then dropped.
    """

    def __init__(self, channel: DeliveryChannel, *, attempts: int = 2) -> None:
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self._channel = channel
        self._attempts = attempts

    def dispatch(self, notification: Notification) -> bool:
        """Publish ``notification``; return whether the channel accepted it."""

        address = recipient_address(notification.recipient_id)
        payload = serialize_notification(notification)
        for attempt in range(1, self._attempts + 1):
            try:
                self._channel.publish(address, payload)
            except ChannelError as exc:
                logger.warning(
                    "Publishing notification %s to %s failed (attempt %s/%s): %s",
                    notification.id,
                    address,
                    attempt,
                    self._attempts,
                    exc,
                )
                continue
            except Exception:
                # The record is already committed; delivery must not fail the create.
                logger.exception(
                    "Unexpected error publishing notification %s to %s; dropping it",
                    notification.id,
                    address,
                )
                return False
            return True

        logger.error(
            "Dropping realtime delivery of notification %s to %s after %s attempts",
            notification.id,
            address,
            self._attempts,
        )
        return False


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the realtime payload representation for ``notification``."""

    return notification.to_payload()


__all__ = ["NotificationPublisher", "serialize_notification"]
