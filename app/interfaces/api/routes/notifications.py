"""Rutas planas (legado) para administrar notificaciones."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import PlainTextResponse

from app.application.use_cases.notifications import NotificationEngine
from app.interfaces.api.dependencies import get_legacy_recipient, get_notification_engine
from app.interfaces.api.schemas import NotificationCreate, NotificationRead

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/test", response_class=PlainTextResponse)
def test_endpoint() -> str:
    """Comprueba que el servicio responde."""

    return "Notification service is working!"


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    recipient_id: str = Depends(get_legacy_recipient),
    engine: NotificationEngine = Depends(get_notification_engine),
) -> list[NotificationRead]:
    """Lista todas las notificaciones del destinatario, de la más reciente a la más antigua."""

    return [
        NotificationRead.from_entity(notification)
        for notification in engine.list_by_recipient(recipient_id)
    ]


@router.get("/unread/count", response_model=int)
def read_unread_count(
    recipient_id: str = Depends(get_legacy_recipient),
    engine: NotificationEngine = Depends(get_notification_engine),
) -> int:
    """Devuelve cuántas notificaciones no leídas tiene el destinatario."""

    return engine.unread_count(recipient_id)


@router.post("", response_model=NotificationRead)
def create_notification(
    payload: NotificationCreate,
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationRead:
    """Crea una notificación y la envía a las sesiones conectadas del destinatario."""

    notification = engine.create(**payload.model_dump())
    return NotificationRead.from_entity(notification)


@router.put("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_as_read(
    notification_id: int,
    engine: NotificationEngine = Depends(get_notification_engine),
) -> NotificationRead:
    """Marca la notificación como leída y devuelve el registro actualizado."""

    return NotificationRead.from_entity(engine.mark_as_read(notification_id))


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    engine: NotificationEngine = Depends(get_notification_engine),
) -> Response:
    """Elimina definitivamente la notificación."""

    engine.delete(notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
