"""Timestamps stamped on notification records.

Records carry aware datetimes in the zone named by ``APP_TIMEZONE``. SQLite
drops offsets, so the SQL store writes the naive wall-clock value in that zone
and attaches the zone again when reading it back.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import get_settings

logger = logging.getLogger(__name__)

_UTC_ALIASES = {"", "UTC", "Z", "GMT"}
_FIXED_OFFSET = re.compile(r"^(?:UTC|GMT)([+-])(\d{1,2}):?(\d{2})?$", re.IGNORECASE)


@lru_cache(maxsize=1)
def app_timezone() -> tzinfo:
    """Zone used for every record timestamp, read once from the settings."""

    return parse_timezone(get_settings().app_timezone)


def parse_timezone(name: str | None) -> tzinfo:
    """Turn an IANA name or a ``UTC-05:00`` style offset into a ``tzinfo``.

    Unknown names fall back to UTC with a warning.
    """

    cleaned = (name or "").strip()
    if cleaned.upper() in _UTC_ALIASES:
        return timezone.utc

    offset = _FIXED_OFFSET.match(cleaned)
    try:
        if offset:
            sign, hours, minutes = offset.groups()
            delta = timedelta(hours=int(hours), minutes=int(minutes or 0))
            return timezone(-delta if sign == "-" else delta)
        return ZoneInfo(cleaned)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown APP_TIMEZONE %r, using UTC", cleaned)
        return timezone.utc


def current_timestamp() -> datetime:
    return datetime.now(tz=app_timezone())


def to_storage(value: datetime) -> datetime:
    """Naive wall-clock time in the app zone, as written to the database."""

    return value.astimezone(app_timezone()).replace(tzinfo=None)


def from_storage(value: datetime) -> datetime:
    """Aware datetime in the app zone for a value read from the database."""

    if value.tzinfo is None:
        return value.replace(tzinfo=app_timezone())
    return value.astimezone(app_timezone())
