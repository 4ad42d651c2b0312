"""Utility helpers shared by the stores."""

from .timestamps import (
    app_timezone,
    current_timestamp,
    from_storage,
    parse_timezone,
    to_storage,
)

__all__ = [
    "app_timezone",
    "current_timestamp",
    "from_storage",
    "parse_timezone",
    "to_storage",
]
