"""Rutas versionadas (v2) con paginación para administrar notificaciones."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from app.application.use_cases.notifications import NotificationEngine
from app.interfaces.api.dependencies import get_notification_engine
from app.interfaces.api.schemas import (
    NotificationCreate,
    NotificationPageRead,
    NotificationRead,
    UnreadCountRead,
    ValidationErrorRead,
)

router = APIRouter(
    prefix="/api/v2/notifications",
    tags=["notifications-v2"],
    responses={status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorRead}},
)


@router.get("", response_model=NotificationPageRead)
def list_notifications(
    recipient_id: str | None = Query(None, description="Destinatario"),
    page: int = Query(0, description="Página, empezando en 0"),
    size: int | None = Query(None, description="Elementos por página"),
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationPageRead:
    """Devuelve una página de notificaciones del destinatario junto con el total."""

    result = engine.list_by_recipient_paged(recipient_id, page, size)
    return NotificationPageRead.from_page(result)


@router.get("/unread/count", response_model=UnreadCountRead)
def read_unread_count(
    recipient_id: str | None = Query(None, description="Destinatario"),
    engine: NotificationEngine = Depends(get_notification_engine),
) -> UnreadCountRead:
    """Devuelve cuántas notificaciones no leídas tiene el destinatario."""

    return UnreadCountRead(unread_count=engine.unread_count(recipient_id))


@router.get("/{notification_id}", response_model=NotificationRead)
def read_notification(
    notification_id: int,
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationRead:
    """Obtiene la notificación identificada por ``notification_id``."""

    return NotificationRead.from_entity(engine.get_by_id(notification_id))


@router.post("", response_model=NotificationRead)
def create_notification(
    payload: NotificationCreate,
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationRead:
    """Crea una notificación; el estado inicial siempre es UNREAD."""

    notification = engine.create(**payload.model_dump())
    return NotificationRead.from_entity(notification)


@router.patch("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def mark_notification_as_read(
    notification_id: int,
    engine: NotificationEngine = Depends(get_notification_engine),
) -> Response:
    """Marca la notificación como leída sin devolver contenido."""

    engine.mark_as_read(notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    engine: NotificationEngine = Depends(get_notification_engine),
) -> Response:
    """Elimina definitivamente la notificación."""

    engine.delete(notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
