"""Realtime notification helpers for the infrastructure layer."""

from .channel import BroadcastChannel, BroadcastSubscription
from .publisher import NotificationPublisher, serialize_notification

__all__ = [
    "BroadcastChannel",
    "BroadcastSubscription",
    "NotificationPublisher",
    "serialize_notification",
]
