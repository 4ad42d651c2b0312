"""Common validation helpers for notification use cases."""

from __future__ import annotations

from typing import Any

from app.domain.entities import NotificationType
from app.domain.exceptions import FieldError

TITLE_MAX_LENGTH = 255
RECIPIENT_MAX_LENGTH = 255


def check_required_text(
    field: str, value: Any, *, max_length: int | None = None
) -> FieldError | None:
    """Return the violation for a required text ``value`` or ``None``."""

    if value is None or (isinstance(value, str) and not value.strip()):
        return FieldError(field, "no puede estar vacío")
    if not isinstance(value, str):
        return FieldError(field, "debe ser un texto")
    if max_length is not None and len(value) > max_length:
        return FieldError(field, f"no puede superar {max_length} caracteres")
    return None


def parse_notification_type(value: Any) -> NotificationType | FieldError:
    """Return the matching :class:`NotificationType` or the field violation."""

    if isinstance(value, NotificationType):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        return FieldError("type", "es obligatorio")
    if isinstance(value, str):
        try:
            return NotificationType(value.strip().upper())
        except ValueError:
            pass
    allowed = ", ".join(member.value for member in NotificationType)
    return FieldError("type", f"debe ser uno de: {allowed}")


def check_page_request(
    page_index: Any, page_size: Any, *, max_page_size: int
) -> list[FieldError]:
    """Return every violation found in a pagination request."""

    errors: list[FieldError] = []
    if not isinstance(page_index, int) or isinstance(page_index, bool) or page_index < 0:
        errors.append(FieldError("page", "debe ser un entero mayor o igual a 0"))
    if (
        not isinstance(page_size, int)
        or isinstance(page_size, bool)
        or not 1 <= page_size <= max_page_size
    ):
        errors.append(
            FieldError("size", f"debe ser un entero entre 1 y {max_page_size}")
        )
    return errors


__all__ = [
    "RECIPIENT_MAX_LENGTH",
    "TITLE_MAX_LENGTH",
    "check_page_request",
    "check_required_text",
    "parse_notification_type",
]
