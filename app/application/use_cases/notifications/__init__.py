"""Notification lifecycle use cases."""

from .engine import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, NotificationEngine

__all__ = ["DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "NotificationEngine"]
