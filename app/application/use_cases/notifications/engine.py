"""Notification lifecycle: creation, delivery, reads and status changes."""

from __future__ import annotations

import logging
from typing import Any

from app.domain.entities import (
    Notification,
    NotificationPage,
    NotificationStatus,
)
from app.domain.exceptions import FieldError, NotFoundError, ValidationError
from app.domain.ports import DeliveryChannel, NotificationStore
from app.infrastructure.notifications import NotificationPublisher

from .validators import (
    RECIPIENT_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    check_page_request,
    check_required_text,
    parse_notification_type,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class NotificationEngine:
    """Apply the notification rules on top of a store and a delivery channel.

    The engine keeps no state of its own, so one instance is shared by every
    request handler. New notifications are persisted first and only then
    published; no other operation publishes anything.
    """

    def __init__(
        self,
        store: NotificationStore,
        channel: DeliveryChannel,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
        publish_attempts: int = 2,
    ) -> None:
        if not 1 <= default_page_size <= max_page_size:
            raise ValueError("default_page_size must be between 1 and max_page_size")
        self._store = store
        self._publisher = NotificationPublisher(channel, attempts=publish_attempts)
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def create(
        self,
        *,
        title: Any,
        message: Any,
        recipient_id: Any,
        type: Any,
        status: Any = None,
    ) -> Notification:
        """Persist a new ``UNREAD`` notification and announce it to the recipient.

        ``status`` is accepted so callers can pass request bodies through
        untouched, but it is always replaced by ``UNREAD``.
        """

        errors = [
            error
            for error in (
                check_required_text("title", title, max_length=TITLE_MAX_LENGTH),
                check_required_text("message", message),
                check_required_text(
                    "recipient_id", recipient_id, max_length=RECIPIENT_MAX_LENGTH
                ),
            )
            if error is not None
        ]
        parsed_type = parse_notification_type(type)
        if isinstance(parsed_type, FieldError):
            errors.append(parsed_type)
        if errors:
            raise ValidationError(errors)

        if status is not None and str(getattr(status, "value", status)).upper() != "UNREAD":
            logger.debug("Ignoring caller supplied status %r on create", status)

        candidate = Notification(
            id=None,
            title=title,
            message=message,
            recipient_id=recipient_id,
            type=parsed_type,
            status=NotificationStatus.UNREAD,
        )
        saved = self._store.save(candidate)
        logger.info(
            "Created notification %s for recipient %s", saved.id, saved.recipient_id
        )
        self._publisher.dispatch(saved)
        return saved

    def list_by_recipient(self, recipient_id: Any) -> list[Notification]:
        """Return every notification for ``recipient_id``, newest first."""

        self._require_recipient(recipient_id)
        return self._store.find_by_recipient_ordered(recipient_id)

    def list_by_recipient_paged(
        self,
        recipient_id: Any,
        page_index: Any = 0,
        page_size: Any = None,
    ) -> NotificationPage:
        """Return one zero-based page of ``recipient_id``'s notifications.

        Asking for a page past the end yields an empty page that still reports
        the total number of notifications.
        """

        if page_size is None:
            page_size = self.default_page_size
        errors = check_page_request(page_index, page_size, max_page_size=self.max_page_size)
        recipient_error = check_required_text("recipient_id", recipient_id)
        if recipient_error is not None:
            errors.insert(0, recipient_error)
        if errors:
            raise ValidationError(errors)

        items, total = self._store.find_by_recipient_ordered_page(
            recipient_id, page_index * page_size, page_size
        )
        return NotificationPage(items=items, total=total, page=page_index, size=page_size)

    def list_unread(self, recipient_id: Any) -> list[Notification]:
        """Return the unread backlog for ``recipient_id``, newest first."""

        self._require_recipient(recipient_id)
        return self._store.find_by_recipient_and_status(
            recipient_id, NotificationStatus.UNREAD
        )

    def get_by_id(self, notification_id: int) -> Notification:
        notification = self._store.find_by_id(notification_id)
        if notification is None:
            raise NotFoundError(notification_id)
        return notification

    def mark_as_read(self, notification_id: int) -> Notification:
        """Move the notification to ``READ``; repeated calls only touch ``updated_at``."""

        return self._store.update(
            notification_id,
            lambda notification: notification.transition_to(NotificationStatus.READ),
        )

    def delete(self, notification_id: int) -> None:
        if not self._store.delete_by_id(notification_id):
            raise NotFoundError(notification_id)
        logger.info("Deleted notification %s", notification_id)

    def unread_count(self, recipient_id: Any) -> int:
        self._require_recipient(recipient_id)
        return self._store.count_by_recipient_and_status(
            recipient_id, NotificationStatus.UNREAD
        )

    @staticmethod
    def _require_recipient(recipient_id: Any) -> None:
        error = check_required_text("recipient_id", recipient_id)
        if error is not None:
            raise ValidationError([error])


__all__ = ["DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "NotificationEngine"]
