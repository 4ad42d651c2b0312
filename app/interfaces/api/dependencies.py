"""FastAPI dependency utilities."""

from __future__ import annotations

import logging

from fastapi import Depends
from starlette.requests import HTTPConnection

from app.application.use_cases.notifications import NotificationEngine
from app.config import Settings
from app.domain.exceptions import FieldError, ValidationError
from app.domain.ports import DeliveryChannel

logger = logging.getLogger(__name__)


def get_app_settings(connection: HTTPConnection) -> Settings:
    """Return the settings the running application was built with."""

    return connection.app.state.settings


def get_notification_engine(connection: HTTPConnection) -> NotificationEngine:
    """Return the engine assembled once in ``create_app``."""

    return connection.app.state.notification_engine


def get_delivery_channel(connection: HTTPConnection) -> DeliveryChannel:
    return connection.app.state.notification_channel


def resolve_recipient(recipient_id: str | None, settings: Settings) -> str:
    """Return ``recipient_id`` or the configured fallback identity.

    The fallback only exists when ``DEFAULT_RECIPIENT_ID`` is configured;
    otherwise a missing identity is a validation error.
    """

    if recipient_id is not None and recipient_id.strip():
        return recipient_id
    if settings.default_recipient_id:
        logger.warning(
            "Request without recipient_id scoped to default recipient %s",
            settings.default_recipient_id,
        )
        return settings.default_recipient_id
    raise ValidationError([FieldError("recipient_id", "es obligatorio")])


def get_legacy_recipient(
    recipient_id: str | None = None,
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Resolve the recipient for the flat surface, honouring the fallback."""

    return resolve_recipient(recipient_id, settings)


__all__ = [
    "get_app_settings",
    "get_delivery_channel",
    "get_legacy_recipient",
    "get_notification_engine",
    "resolve_recipient",
]
