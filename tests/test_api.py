"""Integration tests for the HTTP and websocket API."""

from __future__ import annotations

from datetime import datetime
from urllib.parse import urlencode

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from starlette.websockets import WebSocketDisconnect

from interest_hub.config import get_settings
from interest_hub.infrastructure.database import get_db
from interest_hub.infrastructure.repositories import InterestRepository
from interest_hub.interfaces.api.dependencies import (
    USER_ID_HEADER,
    get_channel,
    get_clock,
    get_session_factory,
)
from main import create_app


def _as(user_id: str) -> dict[str, str]:
    return {USER_ID_HEADER: user_id}


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture()
def client(session_factory, users, clock, channel, settings):
    """Return a test client wired to the per-test database, clock and channel."""

    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_channel] = lambda: channel
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    with TestClient(app) as test_client:
        yield test_client


def _send(client: TestClient, sender_id: str, receiver_id: str, **payload):
    return client.post(
        "/interests", json={"receiver_id": receiver_id, **payload}, headers=_as(sender_id)
    )


def test_requests_without_identity_are_rejected(client: TestClient) -> None:
    response = client.get("/interests")

    assert response.status_code == 401


def test_send_interest(client: TestClient) -> None:
    response = _send(client, "alice", "bob", message="Hi Bob", type="favorite")

    assert response.status_code == 201
    body = response.json()
    assert body["interest"]["sender_id"] == "alice"
    assert body["interest"]["receiver_id"] == "bob"
    assert body["interest"]["status"] == "pending"
    assert body["interest"]["type"] == "favorite"
    assert body["notifications_sent"] == 1
    assert body["is_mutual_match"] is False
    assert body["warnings"] == []


def test_send_interest_errors_carry_code_and_step(client: TestClient, settings) -> None:
    assert _send(client, "alice", "bob").status_code == 201

    duplicate = _send(client, "alice", "bob")
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "already_exists"
    assert duplicate.json()["step"] == "interest_creation"

    to_self = _send(client, "alice", "alice")
    assert to_self.status_code == 400
    assert to_self.json() == {
        "detail": "You cannot send an interest to yourself",
        "code": "invalid_target",
        "step": "validation",
    }

    assert _send(client, "alice", "erin").status_code == 400
    assert _send(client, "alice", "carol", type="wink").status_code == 400
    assert _send(client, "alice", "carol", extra="nope").status_code == 422

    settings.interest_daily_limit = 1
    limited = _send(client, "alice", "carol")
    assert limited.status_code == 429
    assert limited.json()["code"] == "daily_limit_exceeded"


def test_store_outage_is_retryable(client: TestClient, monkeypatch) -> None:
    def unavailable(self, sender_id, receiver_id):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(InterestRepository, "find_active", unavailable)

    response = _send(client, "alice", "bob")

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"
    assert response.json()["code"] == "dependency_unavailable"
    assert response.json()["step"] == "interest_creation"


def test_mutual_match_flow(client: TestClient) -> None:
    outgoing = _send(client, "alice", "bob").json()["interest"]
    incoming = _send(client, "bob", "alice").json()["interest"]

    first = client.post(
        f"/interests/{outgoing['id']}/respond", json={"response": "accepted"}, headers=_as("bob")
    )
    assert first.status_code == 200
    assert first.json()["is_mutual_match"] is False

    second = client.post(
        f"/interests/{incoming['id']}/respond",
        json={"response": "accepted"},
        headers=_as("alice"),
    )
    body = second.json()
    assert body["is_mutual_match"] is True
    assert body["mutual_match"]["user_a_id"] == "alice"
    assert body["mutual_match"]["user_b_id"] == "bob"
    assert body["notifications_sent"] == 3

    mutual = client.get("/interests/mutual", headers=_as("bob")).json()
    assert [(m["other_user_id"], m["interest_id"]) for m in mutual] == [
        ("alice", incoming["id"])
    ]

    summary = client.get("/interests/summary", headers=_as("alice")).json()
    assert summary["mutual"] == 1
    assert summary["sent"]["accepted"] == 1

    stats = client.get("/interests/stats", headers=_as("alice")).json()
    assert stats["mutual_interests"] == 1
    assert stats["success_rate"] == 100.0


def test_respond_errors(client: TestClient, clock) -> None:
    interest = _send(client, "alice", "bob").json()["interest"]
    url = f"/interests/{interest['id']}/respond"

    wrong_user = client.post(url, json={"response": "accepted"}, headers=_as("carol"))
    assert wrong_user.status_code == 400
    bad_value = client.post(url, json={"response": "maybe"}, headers=_as("bob"))
    assert bad_value.status_code == 400
    missing = client.post(
        "/interests/missing/respond", json={"response": "accepted"}, headers=_as("bob")
    )
    assert missing.status_code == 404

    clock.advance(days=31)
    expired = client.post(url, json={"response": "accepted"}, headers=_as("bob"))
    assert expired.status_code == 410
    assert expired.json()["code"] == "expired"
    assert expired.json()["step"] == "interest_response"


def test_withdraw_and_read_interest(client: TestClient) -> None:
    interest = _send(client, "alice", "bob").json()["interest"]

    stranger = client.get(f"/interests/{interest['id']}", headers=_as("carol"))
    assert stranger.status_code == 404

    read = client.post(f"/interests/{interest['id']}/read", headers=_as("bob"))
    assert read.status_code == 200
    assert read.json()["is_read"] is True

    withdrawn = client.post(f"/interests/{interest['id']}/withdraw", headers=_as("alice"))
    assert withdrawn.status_code == 200
    assert withdrawn.json()["interest"]["status"] == "withdrawn"

    again = client.post(f"/interests/{interest['id']}/withdraw", headers=_as("alice"))
    assert again.status_code == 409
    assert again.json()["code"] == "not_pending"
    assert again.json()["step"] == "interest_withdrawal"


def test_list_interests_with_filters(client: TestClient) -> None:
    _send(client, "alice", "bob")
    _send(client, "alice", "carol", type="favorite")
    _send(client, "dave", "alice")

    sent = client.get("/interests", params={"direction": "sent"}, headers=_as("alice"))
    assert {i["receiver_id"] for i in sent.json()} == {"bob", "carol"}

    favorites = client.get(
        "/interests",
        params={"direction": "sent", "type": "favorite"},
        headers=_as("alice"),
    )
    assert [i["receiver_id"] for i in favorites.json()] == ["carol"]

    received = client.get("/interests", headers=_as("alice"))
    assert [i["sender_id"] for i in received.json()] == ["dave"]

    invalid = client.get("/interests", params={"direction": "both"}, headers=_as("alice"))
    assert invalid.status_code == 400


def test_notification_endpoints(client: TestClient) -> None:
    _send(client, "alice", "bob")
    _send(client, "carol", "bob")

    listed = client.get("/notifications", headers=_as("bob"))
    assert listed.status_code == 200
    notifications = listed.json()
    assert [n["type"] for n in notifications] == ["new_interest", "new_interest"]
    assert notifications[0]["priority"] == "high"

    first_id = notifications[0]["id"]
    read = client.post(f"/notifications/{first_id}/read", headers=_as("bob"))
    assert read.json()["is_read"] is True
    assert client.post(f"/notifications/{first_id}/read", headers=_as("alice")).status_code == 404

    updated = client.post("/notifications/read-all", headers=_as("bob"))
    assert updated.json() == {"updated": 1}
    unread = client.get("/notifications", params={"unread_only": True}, headers=_as("bob"))
    assert unread.json() == []


def test_notification_stats_and_delete(client: TestClient) -> None:
    _send(client, "alice", "bob")
    _send(client, "carol", "bob")
    first_id = client.get("/notifications", headers=_as("bob")).json()[0]["id"]

    stats = client.get("/notifications/stats", headers=_as("bob")).json()
    assert stats["total"] == 2
    assert stats["unread"] == 2
    assert stats["by_type"]["new_interest"] == 2
    assert stats["by_priority"] == {"low": 0, "medium": 0, "high": 2}

    assert client.delete(f"/notifications/{first_id}", headers=_as("alice")).status_code == 404
    deleted = client.delete(f"/notifications/{first_id}", headers=_as("bob"))
    assert deleted.status_code == 204
    assert client.delete(f"/notifications/{first_id}", headers=_as("bob")).status_code == 404

    stats = client.get("/notifications/stats", headers=_as("bob")).json()
    assert (stats["total"], stats["unread"]) == (1, 1)
    events = client.get("/realtime/events", headers=_as("bob")).json()
    assert any(e["entity_id"] == first_id and e["action"] == "deleted" for e in events)


def test_realtime_activity_and_events(client: TestClient) -> None:
    interest = _send(client, "alice", "bob").json()["interest"]

    activity = client.get("/realtime/activity", headers=_as("bob")).json()
    assert activity[0]["activity_type"] == "interest_received"
    assert activity[0]["activity_data"]["interest_id"] == interest["id"]

    events = client.get("/realtime/events", headers=_as("alice")).json()
    assert any(
        e["entity"] == "interest" and e["entity_id"] == interest["id"] for e in events
    )


def test_match_suggestion_relay(client: TestClient) -> None:
    accepted = client.post(
        "/realtime/match-suggestions",
        json={"user_id": "alice", "suggested_user_id": "bob", "match_score": 80},
    )
    assert accepted.status_code == 202
    assert accepted.json() == {"status": "relayed", "user_id": "alice"}

    rejected = client.post("/realtime/match-suggestions", json={"suggested_user_id": "bob"})
    assert rejected.status_code == 400


def test_notification_websocket_streams_changes(client: TestClient, clock) -> None:
    _send(client, "alice", "bob")

    with client.websocket_connect("/notifications/ws?user_id=bob") as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        [pending] = init["data"]
        assert pending["type"] == "new_interest"

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        created = _send(client, "carol", "bob").json()["interest"]
        seen = []
        for _ in range(10):
            message = websocket.receive_json()
            seen.append(message)
            data = message.get("data", {})
            if message["type"] == "state_change" and data.get("entity") == "interest":
                break
        assert seen[-1]["data"]["entity_id"] == created["id"]
        assert seen[-1]["data"]["action"] == "created"

        clock.advance(minutes=7)
        websocket.send_json({"type": "ack", "ids": [pending["id"]]})
        websocket.send_json({"type": "ping"})
        message = websocket.receive_json()
        while message["type"] != "pong":
            message = websocket.receive_json()

    unread = client.get("/notifications", params={"unread_only": True}, headers=_as("bob"))
    assert pending["id"] not in {n["id"] for n in unread.json()}
    [acknowledged] = [
        n for n in client.get("/notifications", headers=_as("bob")).json() if n["id"] == pending["id"]
    ]
    assert _parse_timestamp(acknowledged["read_at"]) == clock.now()


def test_websocket_requires_identity(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/realtime/ws") as websocket:
            websocket.receive_json()


def test_realtime_websocket_replays_missed_events(client: TestClient, clock) -> None:
    since = clock.now().isoformat()
    clock.advance(minutes=1)
    interest = _send(client, "alice", "bob").json()["interest"]

    query = urlencode({"user_id": "alice", "since": since})
    with client.websocket_connect(f"/realtime/ws?{query}") as websocket:
        replay = websocket.receive_json()
        assert replay["type"] == "replay"
        assert interest["id"] in {event["entity_id"] for event in replay["data"]}

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}
