"""Aggregate application use cases."""

from .notifications import NotificationEngine

__all__ = ["NotificationEngine"]
