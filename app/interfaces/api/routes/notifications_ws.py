"""Websocket handler that streams new notifications to connected recipients."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any

import anyio
from anyio import to_thread
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from app.application.use_cases.notifications import NotificationEngine
from app.config import Settings
from app.domain.exceptions import (
    InvalidStatusTransitionError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from app.domain.ports import DeliveryChannel, Subscription, recipient_address
from app.infrastructure.notifications import serialize_notification
from app.interfaces.api.dependencies import (
    get_app_settings,
    get_delivery_channel,
    get_notification_engine,
    resolve_recipient,
)
from app.interfaces.api.errors import validation_error_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

_CREATE_FIELDS = ("title", "message", "recipient_id", "type", "status")


@router.websocket("/ws")
async def notifications_websocket(
    websocket: WebSocket,
    recipient_id: str | None = None,
    engine: NotificationEngine = Depends(get_notification_engine),
    channel: DeliveryChannel = Depends(get_delivery_channel),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Websocket endpoint that streams notifications to one recipient."""

    try:
        recipient = resolve_recipient(recipient_id, settings)
    except ValidationError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    # Subscribe before reading the backlog so nothing created in between is lost.
    subscription = channel.subscribe(recipient_address(recipient))
    logger.info("Realtime session opened for recipient %s", recipient)
    try:
        try:
            pending = await to_thread.run_sync(engine.list_unread, recipient)
        except StoreUnavailableError:
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
            return

        await websocket.send_json(
            {"type": "init", "data": [serialize_notification(n) for n in pending]}
        )
        async with anyio.create_task_group() as task_group:
            task_group.start_soon(_forward_notifications, websocket, subscription)
            await _receive_messages(websocket, engine)
            task_group.cancel_scope.cancel()
    finally:
        subscription.close()
        logger.info("Realtime session closed for recipient %s", recipient)


async def _forward_notifications(websocket: WebSocket, subscription: Subscription) -> None:
    async for payload in subscription:
        try:
            await websocket.send_json({"type": "notification", "data": payload})
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            logger.debug("Stopped forwarding to %s: %s", subscription.address, exc)
            return


async def _receive_messages(websocket: WebSocket, engine: NotificationEngine) -> None:
    while True:
        try:
            message = await websocket.receive_json()
        except WebSocketDisconnect:
            return
        except (ValueError, KeyError):
            continue

        if not isinstance(message, dict):
            continue

        message_type = message.get("type")
        if message_type == "ping":
            await websocket.send_json({"type": "pong"})
        elif message_type == "send":
            await _handle_send(websocket, engine, message.get("data"))
        elif message_type == "ack":
            await _handle_ack(engine, message.get("ids"))


async def _handle_send(websocket: WebSocket, engine: NotificationEngine, data: Any) -> None:
    """Create a notification received over the socket, exactly like the REST path."""

    if not isinstance(data, dict):
        data = {}
    fields = {name: data.get(name) for name in _CREATE_FIELDS}
    try:
        notification = await to_thread.run_sync(partial(engine.create, **fields))
    except ValidationError as exc:
        await websocket.send_json({"type": "error", **validation_error_body(exc)})
        return
    except StoreUnavailableError as exc:
        await websocket.send_json({"type": "error", "detail": str(exc), "errors": []})
        return
    await websocket.send_json(
        {"type": "created", "data": serialize_notification(notification)}
    )


async def _handle_ack(engine: NotificationEngine, ids: Any) -> None:
    if not isinstance(ids, list):
        return
    for notification_id in ids:
        if not isinstance(notification_id, int) or isinstance(notification_id, bool):
            continue
        try:
            await to_thread.run_sync(engine.mark_as_read, notification_id)
        except (NotFoundError, InvalidStatusTransitionError, StoreUnavailableError) as exc:
            logger.debug("Skipping ack for notification %s: %s", notification_id, exc)


__all__ = ["router"]
