"""Persistence helpers for notification entities."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.domain.entities import Notification, NotificationStatus
from app.domain.exceptions import NotFoundError, StoreUnavailableError
from app.infrastructure.database import Base
from app.infrastructure.models import NotificationModel
from app.utils.timestamps import current_timestamp, from_storage, to_storage

logger = logging.getLogger(__name__)

# Largest value an SQL BIGINT (and a SQLite INTEGER) can hold.
MAX_STORED_ID = 2**63 - 1


class SqlAlchemyNotificationRepository:
    """Store notifications in a relational database through SQLAlchemy.

    Every operation opens its own short-lived session, so a single instance can
    be shared by all request handlers.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        # SQLite ignores FOR UPDATE, so read-modify-write is also serialized here.
        self._update_lock = threading.Lock()

    def initialize(self) -> None:
        """Create the notifications table when it does not exist yet."""

        with self._session_scope() as session:
            Base.metadata.create_all(
                bind=session.get_bind(),
                tables=[NotificationModel.__table__],
                checkfirst=True,
            )

    def save(self, notification: Notification) -> Notification:
        now = to_storage(current_timestamp())
        model = NotificationModel(
            title=notification.title,
            message=notification.message,
            recipient_id=notification.recipient_id,
            status=notification.status,
            type=notification.type,
            created_at=now,
            updated_at=now,
        )
        with self._session_scope() as session:
            session.add(model)
            session.commit()
            session.refresh(model)
            return self._to_entity(model)

    def find_by_id(self, notification_id: int) -> Notification | None:
        if not _storable_id(notification_id):
            return None
        with self._session_scope() as session:
            model = session.get(NotificationModel, notification_id)
            return self._to_entity(model) if model is not None else None

    def find_by_recipient_ordered(self, recipient_id: str) -> list[Notification]:
        with self._session_scope() as session:
            query = self._recipient_query(session, recipient_id)
            return [self._to_entity(model) for model in query.all()]

    def find_by_recipient_ordered_page(
        self, recipient_id: str, offset: int, limit: int
    ) -> tuple[list[Notification], int]:
        with self._session_scope() as session:
            total = (
                session.query(func.count(NotificationModel.id))
                .filter(NotificationModel.recipient_id == recipient_id)
                .scalar()
            )
            total = int(total or 0)
            if offset >= total:
                return [], total
            query = self._recipient_query(session, recipient_id)
            models = query.offset(offset).limit(limit).all()
            return [self._to_entity(model) for model in models], total

    def find_by_recipient_and_status(
        self, recipient_id: str, status: NotificationStatus
    ) -> list[Notification]:
        with self._session_scope() as session:
            query = self._recipient_query(session, recipient_id).filter(
                NotificationModel.status == status
            )
            return [self._to_entity(model) for model in query.all()]

    def count_by_recipient_and_status(
        self, recipient_id: str, status: NotificationStatus
    ) -> int:
        with self._session_scope() as session:
            total = (
                session.query(func.count(NotificationModel.id))
                .filter(NotificationModel.recipient_id == recipient_id)
                .filter(NotificationModel.status == status)
                .scalar()
            )
            return int(total or 0)

    def update(
        self, notification_id: int, mutator: Callable[[Notification], Notification]
    ) -> Notification:
        if not _storable_id(notification_id):
            raise NotFoundError(notification_id)
        with self._update_lock, self._session_scope() as session:
            model = session.get(NotificationModel, notification_id, with_for_update=True)
            if model is None:
                raise NotFoundError(notification_id)
            changed = mutator(self._to_entity(model))
            # Only the status is mutable; identity, recipient and creation time stay put.
            model.status = changed.status
            model.updated_at = to_storage(current_timestamp())
            session.commit()
            session.refresh(model)
            return self._to_entity(model)

    def delete_by_id(self, notification_id: int) -> bool:
        if not _storable_id(notification_id):
            return False
        with self._session_scope() as session:
            deleted = (
                session.query(NotificationModel)
                .filter(NotificationModel.id == notification_id)
                .delete(synchronize_session=False)
            )
            session.commit()
            return bool(deleted)

    def exists_by_id(self, notification_id: int) -> bool:
        if not _storable_id(notification_id):
            return False
        with self._session_scope() as session:
            found = (
                session.query(NotificationModel.id)
                .filter(NotificationModel.id == notification_id)
                .first()
            )
            return found is not None

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Notification store operation failed: %s", exc)
            raise StoreUnavailableError("El almacén de notificaciones no está disponible") from exc
        finally:
            session.close()

    @staticmethod
    def _recipient_query(session: Session, recipient_id: str):
        return (
            session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == recipient_id)
            .order_by(desc(NotificationModel.created_at), desc(NotificationModel.id))
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            title=model.title,
            message=model.message,
            recipient_id=model.recipient_id,
            type=model.type,
            status=model.status,
            created_at=from_storage(model.created_at),
            updated_at=from_storage(model.updated_at),
        )


def _storable_id(notification_id: int) -> bool:
    return 1 <= notification_id <= MAX_STORED_ID


__all__ = ["SqlAlchemyNotificationRepository"]
