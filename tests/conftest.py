"""Shared fixtures for the notification service tests."""

from __future__ import annotations

from typing import Any

import pytest

from app.config import Settings
from app.domain.exceptions import ChannelError
from app.infrastructure.notifications import BroadcastChannel
from app.infrastructure.repositories import InMemoryNotificationRepository


class RecordingChannel:
    """Delivery channel stand-in that remembers every publish."""

    def __init__(self, store: InMemoryNotificationRepository | None = None) -> None:
        self.published: list[tuple[str, dict[str, Any]]] = []
        self.persisted_at_publish: list[bool] = []
        self._store = store

    def publish(self, address: str, payload: dict[str, Any]) -> None:
        if self._store is not None:
            self.persisted_at_publish.append(self._store.exists_by_id(payload["id"]))
        self.published.append((address, payload))

    def subscribe(self, address: str):  # pragma: no cover - not used by engine tests
        raise NotImplementedError


class FailingChannel:
    """Delivery channel that rejects the first ``failures`` publishes."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0
        self.published: list[tuple[str, dict[str, Any]]] = []

    def publish(self, address: str, payload: dict[str, Any]) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise ChannelError("broker unavailable")
        self.published.append((address, payload))

    def subscribe(self, address: str):  # pragma: no cover - not used by engine tests
        raise NotImplementedError


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture()
def memory_store() -> InMemoryNotificationRepository:
    return InMemoryNotificationRepository()


@pytest.fixture()
def recording_channel(memory_store: InMemoryNotificationRepository) -> RecordingChannel:
    return RecordingChannel(memory_store)


@pytest.fixture()
def broadcast_channel() -> BroadcastChannel:
    return BroadcastChannel(queue_size=10)


@pytest.fixture()
def failing_channel():
    """Return a factory for channels that fail a given number of times."""

    return FailingChannel
