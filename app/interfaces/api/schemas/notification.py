"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from app.domain.entities import (
    Notification,
    NotificationPage,
    NotificationStatus,
    NotificationType,
)


class NotificationCreate(BaseModel):
    """Payload used to create a notification.

    Fields are optional at this level so that the engine can report every
    missing value at once instead of failing on the first one.
    """

    title: str | None = Field(default=None, description="Título de la notificación")
    message: str | None = Field(default=None, description="Contenido de la notificación")
    recipient_id: str | None = Field(default=None, description="Destinatario")
    type: str | None = Field(
        default=None, description="INFO, WARNING, ERROR o SUCCESS"
    )
    status: str | None = Field(
        default=None, description="Se ignora: toda notificación nueva es UNREAD"
    )


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    message: str
    recipient_id: str
    status: NotificationStatus
    type: NotificationType
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def _serialize_timestamp(self, value: datetime) -> str:
        # Same format as the realtime payload so both representations match.
        return value.isoformat()

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationRead":
        return cls.model_validate(notification)


class NotificationPageRead(BaseModel):
    """One page of a recipient's notifications."""

    content: list[NotificationRead]
    page: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool

    @classmethod
    def from_page(cls, page: NotificationPage) -> "NotificationPageRead":
        return cls(
            content=[NotificationRead.from_entity(item) for item in page.items],
            page=page.page,
            size=page.size,
            total_elements=page.total,
            total_pages=page.total_pages,
            first=page.is_first,
            last=page.is_last,
        )


class UnreadCountRead(BaseModel):
    """Number of unread notifications for a recipient."""

    unread_count: int


class FieldErrorRead(BaseModel):
    field: str
    message: str


class ValidationErrorRead(BaseModel):
    """Body returned when one or more fields are invalid."""

    detail: str
    errors: list[FieldErrorRead]


__all__ = [
    "FieldErrorRead",
    "NotificationCreate",
    "NotificationPageRead",
    "NotificationRead",
    "UnreadCountRead",
    "ValidationErrorRead",
]
