"""Errors raised by the notification domain and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class FieldError:
    """A single violated constraint on a caller supplied field."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class NotificationError(Exception):
    """Base class for every error raised by the notification service."""


class ValidationError(NotificationError, ValueError):
    """Raised when caller input violates one or more field constraints.

    ``errors`` always lists every violation found, not just the first one.
    """

    def __init__(
        self,
        errors: Iterable[FieldError],
        message: str = "Los datos de la notificación no son válidos",
    ) -> None:
        self.errors: list[FieldError] = list(errors)
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        details = "; ".join(f"{error.field}: {error.message}" for error in self.errors)
        return f"{self.message} ({details})" if details else self.message


class NotFoundError(NotificationError, LookupError):
    """Raised when the referenced notification does not exist."""

    def __init__(self, notification_id: int) -> None:
        self.notification_id = notification_id
        super().__init__(f"Notificación no encontrada con id: {notification_id}")


class InvalidStatusTransitionError(NotificationError):
    """Raised when a status change is not allowed by the lifecycle."""

    def __init__(self, current: object, target: object) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"No se puede cambiar el estado de la notificación de {current} a {target}"
        )


class StoreUnavailableError(NotificationError, RuntimeError):
    """Raised when the record store cannot complete an operation."""


class ChannelError(NotificationError, RuntimeError):
    """Raised when the delivery channel cannot accept a message."""


__all__ = [
    "ChannelError",
    "FieldError",
    "InvalidStatusTransitionError",
    "NotFoundError",
    "NotificationError",
    "StoreUnavailableError",
    "ValidationError",
]
