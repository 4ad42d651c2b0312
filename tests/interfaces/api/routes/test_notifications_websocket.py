"""Integration tests for the realtime notification websocket."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.config import Settings
from app.infrastructure.database import build_engine, build_session_factory
from app.infrastructure.notifications import BroadcastChannel
from app.infrastructure.repositories import (
    InMemoryNotificationRepository,
    SqlAlchemyNotificationRepository,
)
from main import create_app

WS = "/notifications/ws"


def _payload(recipient_id: str = "u1", **overrides) -> dict[str, str]:
    payload = {
        "title": "Deploy finished",
        "message": "all green",
        "recipient_id": recipient_id,
        "type": "SUCCESS",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def client():
    app = create_app(
        Settings(_env_file=None),
        store=InMemoryNotificationRepository(),
        channel=BroadcastChannel(queue_size=10),
    )
    with TestClient(app) as test_client:
        yield test_client


def test_session_starts_with_unread_backlog(client: TestClient) -> None:
    read = client.post("/notifications", json=_payload(title="read")).json()
    unread = client.post("/notifications", json=_payload(title="unread")).json()
    client.put(f"/notifications/{read['id']}/read")

    with client.websocket_connect(f"{WS}?recipient_id=u1") as websocket:
        init = websocket.receive_json()

    assert init == {"type": "init", "data": [unread]}


def test_created_notification_is_pushed_to_its_recipient(client: TestClient) -> None:
    with client.websocket_connect(f"{WS}?recipient_id=u1") as websocket:
        assert websocket.receive_json() == {"type": "init", "data": []}

        created = client.post("/api/v2/notifications", json=_payload()).json()
        pushed = websocket.receive_json()

    assert pushed == {"type": "notification", "data": created}
    assert pushed["data"]["status"] == "UNREAD"


def test_other_recipients_notifications_are_not_pushed(client: TestClient) -> None:
    with client.websocket_connect(f"{WS}?recipient_id=u1") as websocket:
        websocket.receive_json()

        client.post("/notifications", json=_payload("u2", title="not for u1"))
        mine = client.post("/notifications", json=_payload("u1", title="for u1")).json()
        pushed = websocket.receive_json()

    assert pushed["data"] == mine


def test_every_session_of_a_recipient_receives_the_push(client: TestClient) -> None:
    with client.websocket_connect(f"{WS}?recipient_id=u1") as first:
        with client.websocket_connect(f"{WS}?recipient_id=u1") as second:
            first.receive_json()
            second.receive_json()

            created = client.post("/notifications", json=_payload()).json()

            assert first.receive_json()["data"] == created
            assert second.receive_json()["data"] == created


def test_ping_is_answered_with_pong(client: TestClient) -> None:
    with client.websocket_connect(f"{WS}?recipient_id=u1") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "ping"})

        assert websocket.receive_json() == {"type": "pong"}


def test_unknown_messages_are_ignored(client: TestClient) -> None:
    with client.websocket_connect(f"{WS}?recipient_id=u1") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "shout"})
        websocket.send_json(["not", "an", "object"])
        websocket.send_json({"type": "ping"})

        assert websocket.receive_json() == {"type": "pong"}


def test_send_creates_and_delivers_notification(client: TestClient) -> None:
    with client.websocket_connect(f"{WS}?recipient_id=u1") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "send", "data": _payload(status="READ")})

        messages = {}
        for _ in range(2):
            message = websocket.receive_json()
            messages[message["type"]] = message["data"]

    assert set(messages) == {"created", "notification"}
    assert messages["created"] == messages["notification"]
    assert messages["created"]["status"] == "UNREAD"
    count = client.get("/notifications/unread/count", params={"recipient_id": "u1"})
    assert count.json() == 1


def test_invalid_send_reports_field_errors(client: TestClient) -> None:
    with client.websocket_connect(f"{WS}?recipient_id=u1") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "send", "data": {"title": "sin destinatario"}})

        reply = websocket.receive_json()

    assert reply["type"] == "error"
    assert {error["field"] for error in reply["errors"]} == {
        "message",
        "recipient_id",
        "type",
    }


def test_ack_marks_notifications_as_read(client: TestClient) -> None:
    first = client.post("/notifications", json=_payload()).json()
    second = client.post("/notifications", json=_payload()).json()

    with client.websocket_connect(f"{WS}?recipient_id=u1") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "ack", "ids": [first["id"], 9999, "bogus"]})
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

    assert client.get(f"/api/v2/notifications/{first['id']}").json()["status"] == "READ"
    assert client.get(f"/api/v2/notifications/{second['id']}").json()["status"] == "UNREAD"


def test_connection_without_identity_is_refused(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(WS) as websocket:
            websocket.receive_json()


def test_connection_without_identity_uses_configured_default() -> None:
    settings = Settings(_env_file=None, default_recipient_id="test-user")
    app = create_app(settings, store=InMemoryNotificationRepository())
    with TestClient(app) as client:
        with client.websocket_connect(WS) as websocket:
            websocket.receive_json()

            created = client.post("/notifications", json=_payload("test-user")).json()

            assert websocket.receive_json() == {"type": "notification", "data": created}


def test_ack_with_out_of_range_id_keeps_session_open(tmp_path) -> None:
    engine = build_engine(f"sqlite:///{tmp_path / 'ws.db'}")
    store = SqlAlchemyNotificationRepository(build_session_factory(engine))
    app = create_app(Settings(_env_file=None), store=store)
    with TestClient(app) as client:
        created = client.post("/notifications", json=_payload()).json()

        with client.websocket_connect(f"{WS}?recipient_id=u1") as websocket:
            websocket.receive_json()
            websocket.send_json({"type": "ack", "ids": [2**70, created["id"]]})
            websocket.send_json({"type": "ping"})

            assert websocket.receive_json() == {"type": "pong"}

        status = client.get(f"/api/v2/notifications/{created['id']}").json()["status"]
    engine.dispose()

    assert status == "READ"
