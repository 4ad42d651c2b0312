"""Unit tests for the notification engine."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from app.application.use_cases.notifications import NotificationEngine
from app.domain.entities import Notification, NotificationStatus, NotificationType
from app.domain.exceptions import (
    InvalidStatusTransitionError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from app.infrastructure.repositories import memory_notification_repository


def _create(engine: NotificationEngine, recipient_id: str = "u1", **overrides):
    fields = {
        "title": "Build failed",
        "message": "see logs",
        "recipient_id": recipient_id,
        "type": "ERROR",
    }
    fields.update(overrides)
    return engine.create(**fields)


@pytest.fixture()
def engine(memory_store, recording_channel) -> NotificationEngine:
    return NotificationEngine(memory_store, recording_channel)


@pytest.fixture()
def ticking_clock(monkeypatch):
    """Make the memory store hand out strictly increasing timestamps."""

    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ticks = count()
    monkeypatch.setattr(
        memory_notification_repository,
        "current_timestamp",
        lambda: start + timedelta(seconds=next(ticks)),
    )


def test_create_persists_then_publishes_unread_record(engine, memory_store, recording_channel):
    notification = _create(engine, status="READ")

    assert notification.id is not None
    assert notification.status is NotificationStatus.UNREAD
    assert notification.type is NotificationType.ERROR
    assert notification.created_at is not None
    assert notification.updated_at == notification.created_at
    assert engine.get_by_id(notification.id) == notification

    assert recording_channel.published == [
        ("notifications.u1", notification.to_payload())
    ]
    assert recording_channel.persisted_at_publish == [True]


def test_create_accepts_type_in_any_case(engine):
    notification = _create(engine, type="warning")

    assert notification.type is NotificationType.WARNING


def test_create_reports_every_invalid_field(engine, memory_store, recording_channel):
    with pytest.raises(ValidationError) as excinfo:
        engine.create(title="", message="   ", recipient_id=None, type="BOGUS")

    fields = {error.field for error in excinfo.value.errors}
    assert fields == {"title", "message", "recipient_id", "type"}
    assert memory_store.find_by_recipient_ordered("u1") == []
    assert recording_channel.published == []


def test_create_rejects_overlong_title(engine):
    with pytest.raises(ValidationError) as excinfo:
        _create(engine, title="x" * 256)

    assert [error.field for error in excinfo.value.errors] == ["title"]


def test_create_survives_channel_failures(memory_store, failing_channel):
    channel = failing_channel(failures=10)
    engine = NotificationEngine(memory_store, channel, publish_attempts=3)

    notification = _create(engine)

    assert channel.calls == 3
    assert channel.published == []
    assert memory_store.exists_by_id(notification.id)


def test_create_retries_publish_once_channel_recovers(memory_store, failing_channel):
    channel = failing_channel(failures=1)
    engine = NotificationEngine(memory_store, channel, publish_attempts=2)

    notification = _create(engine)

    assert channel.calls == 2
    assert channel.published == [("notifications.u1", notification.to_payload())]


def test_create_survives_unexpected_channel_error(memory_store):
    class ExplodingChannel:
        calls = 0

        def publish(self, address, payload):
            self.calls += 1
            raise RuntimeError("socket gone")

    channel = ExplodingChannel()
    engine = NotificationEngine(memory_store, channel, publish_attempts=3)

    notification = _create(engine)

    assert channel.calls == 1
    assert memory_store.exists_by_id(notification.id)


def test_create_does_not_publish_when_store_fails(recording_channel):
    class BrokenStore:
        def save(self, notification):
            raise StoreUnavailableError("down")

    engine = NotificationEngine(BrokenStore(), recording_channel)

    with pytest.raises(StoreUnavailableError):
        _create(engine)
    assert recording_channel.published == []


def test_list_by_recipient_is_newest_first_and_partitioned(engine):
    first = _create(engine, title="first")
    second = _create(engine, title="second")
    _create(engine, recipient_id="u2")

    assert [n.id for n in engine.list_by_recipient("u1")] == [second.id, first.id]


def test_list_by_recipient_requires_identity(engine):
    with pytest.raises(ValidationError):
        engine.list_by_recipient("")


def test_paged_listing_returns_most_recent_and_total(engine):
    _create(engine, recipient_id="u2", title="older")
    newest = _create(engine, recipient_id="u2", title="newer")

    page = engine.list_by_recipient_paged("u2", 0, 1)

    assert [n.id for n in page.items] == [newest.id]
    assert page.total == 2
    assert page.total_pages == 2
    assert page.is_first and not page.is_last


def test_paged_listing_past_the_end_is_empty(engine):
    _create(engine, recipient_id="u2")
    _create(engine, recipient_id="u2")

    page = engine.list_by_recipient_paged("u2", 7, 5)

    assert page.items == []
    assert page.total == 2


def test_paged_listing_uses_default_page_size(memory_store, recording_channel):
    engine = NotificationEngine(memory_store, recording_channel, default_page_size=3)
    for _ in range(4):
        _create(engine)

    page = engine.list_by_recipient_paged("u1")

    assert page.size == 3
    assert len(page.items) == 3
    assert page.total == 4


def test_paged_listing_reports_all_invalid_arguments(engine):
    with pytest.raises(ValidationError) as excinfo:
        engine.list_by_recipient_paged(None, -1, engine.max_page_size + 1)

    assert [error.field for error in excinfo.value.errors] == ["recipient_id", "page", "size"]


def test_get_by_id_unknown_raises_not_found(engine):
    with pytest.raises(NotFoundError):
        engine.get_by_id(404)


def test_mark_as_read_is_idempotent_and_refreshes_updated_at(
    engine, recording_channel, ticking_clock
):
    notification = _create(engine)
    published_before = list(recording_channel.published)

    first = engine.mark_as_read(notification.id)
    second = engine.mark_as_read(notification.id)

    assert first.status is NotificationStatus.READ
    assert second.status is NotificationStatus.READ
    assert notification.updated_at < first.updated_at < second.updated_at
    assert second.created_at == notification.created_at
    assert second.recipient_id == notification.recipient_id
    assert recording_channel.published == published_before


def test_mark_as_read_unknown_leaves_store_untouched(engine):
    existing = _create(engine)

    with pytest.raises(NotFoundError):
        engine.mark_as_read(existing.id + 100)

    assert engine.list_by_recipient("u1") == [existing]


def test_archived_notifications_cannot_be_marked_read(engine, memory_store):
    notification = _create(engine)
    memory_store.update(
        notification.id, lambda n: n.transition_to(NotificationStatus.ARCHIVED)
    )

    with pytest.raises(InvalidStatusTransitionError):
        engine.mark_as_read(notification.id)
    assert engine.get_by_id(notification.id).status is NotificationStatus.ARCHIVED


def test_delete_removes_record_and_second_delete_fails(engine, memory_store, recording_channel):
    notification = _create(engine)
    published_before = list(recording_channel.published)

    engine.delete(notification.id)

    assert not memory_store.exists_by_id(notification.id)
    with pytest.raises(NotFoundError):
        engine.get_by_id(notification.id)
    with pytest.raises(NotFoundError):
        engine.delete(notification.id)
    assert recording_channel.published == published_before


def test_deleted_ids_are_not_reused(engine):
    first = _create(engine)
    engine.delete(first.id)

    second = _create(engine)

    assert second.id != first.id


def test_unread_count_tracks_every_operation(engine):
    created = [_create(engine) for _ in range(5)]
    _create(engine, recipient_id="u2")

    def expected(recipient_id: str) -> int:
        return sum(1 for n in engine.list_by_recipient(recipient_id) if n.is_unread)

    assert engine.unread_count("u1") == expected("u1") == 5
    engine.mark_as_read(created[0].id)
    engine.mark_as_read(created[1].id)
    assert engine.unread_count("u1") == expected("u1") == 3
    engine.delete(created[2].id)
    engine.delete(created[0].id)
    assert engine.unread_count("u1") == expected("u1") == 2
    assert engine.unread_count("u2") == expected("u2") == 1
    assert engine.unread_count("nobody") == 0


def test_list_unread_only_returns_unread(engine):
    read = _create(engine)
    unread = _create(engine)
    engine.mark_as_read(read.id)

    assert engine.list_unread("u1") == [engine.get_by_id(unread.id)]


def test_engine_rejects_inconsistent_page_sizes(memory_store, recording_channel):
    with pytest.raises(ValueError):
        NotificationEngine(
            memory_store, recording_channel, default_page_size=50, max_page_size=10
        )


def test_transition_rules():
    notification = Notification(
        id=1, title="t", message="m", recipient_id="u1", type=NotificationType.INFO
    )

    read = notification.transition_to(NotificationStatus.READ)
    archived = read.transition_to(NotificationStatus.ARCHIVED)

    assert archived.transition_to(NotificationStatus.ARCHIVED).status is NotificationStatus.ARCHIVED
    with pytest.raises(InvalidStatusTransitionError):
        read.transition_to(NotificationStatus.UNREAD)
    with pytest.raises(InvalidStatusTransitionError):
        archived.transition_to(NotificationStatus.READ)
