from .notification import (
    FieldErrorRead,
    NotificationCreate,
    NotificationPageRead,
    NotificationRead,
    UnreadCountRead,
    ValidationErrorRead,
)

__all__ = [
    "FieldErrorRead",
    "NotificationCreate",
    "NotificationPageRead",
    "NotificationRead",
    "UnreadCountRead",
    "ValidationErrorRead",
]
