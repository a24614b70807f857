from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from apps.api_gateway.main import app
from recall_notetaker.common.config import get_settings
from recall_notetaker.common.errors import ErrCode, TransportError
from recall_notetaker.common.time import to_iso_z
from recall_notetaker.services import recall_bot_service
from recall_notetaker.storage.memory_store import get_store, reset_store


class _FakeRecall:
    def __init__(self) -> None:
        self.created = 0
        self.remote_status = "in_call_recording"
        self.fail_get = False

    def create_bot(self, **kwargs) -> dict:
        _ = kwargs
        self.created += 1
        return {"id": f"bot-{self.created}"}

    def get_bot(self, bot_id: str) -> dict:
        if self.fail_get:
            raise TransportError(
                "upstream timeout",
                details={"bot_id": bot_id},
                code=ErrCode.CONNECTOR_PROVIDER_ERROR,
            )
        return {"id": bot_id, "status_changes": [{"status": self.remote_status}]}


@pytest.fixture()
def client():
    reset_store()
    yield TestClient(app)
    reset_store()


@pytest.fixture()
def recall_settings():
    s = get_settings()
    keys = ["recall_provider", "recall_api_key", "llm_enabled"]
    snapshot = {k: getattr(s, k) for k in keys}
    try:
        s.recall_provider = "recall"
        s.recall_api_key = "test-key"
        s.llm_enabled = False
        yield s
    finally:
        for k, v in snapshot.items():
            setattr(s, k, v)


@pytest.fixture()
def fake_recall(monkeypatch) -> _FakeRecall:
    fake = _FakeRecall()
    monkeypatch.setattr(recall_bot_service, "_resolve_connector", lambda: ("fake", fake))
    return fake


def _schedule_body(**overrides) -> dict:
    body = {
        "event_id": "evt-1",
        "meeting_url": "https://zoom.us/j/42",
        "meeting_start_time": to_iso_z(datetime.now(UTC) + timedelta(hours=1)),
        "account_email": "advisor@example.com",
        "title": "Quarterly review",
    }
    body.update(overrides)
    return body


def test_schedule_creates_record(client, recall_settings, fake_recall) -> None:
    r = client.post("/v1/recall-bots/schedule", json=_schedule_body())

    assert r.status_code == 201
    body = r.json()
    assert body["bot_id"] == "bot-1"
    assert body["status"] == "scheduled"
    assert body["join_at"].endswith("Z")

    listed = client.get("/v1/recall-bots").json()
    assert [b["bot_id"] for b in listed] == ["bot-1"]


def test_schedule_twice_for_same_event_conflicts(client, recall_settings, fake_recall) -> None:
    assert client.post("/v1/recall-bots/schedule", json=_schedule_body()).status_code == 201

    r = client.post("/v1/recall-bots/schedule", json=_schedule_body())

    assert r.status_code == 409
    assert r.json()["detail"]["code"] == ErrCode.CONFLICT
    assert fake_recall.created == 1


def test_schedule_without_configuration_is_400(client, recall_settings, fake_recall) -> None:
    recall_settings.recall_api_key = None

    r = client.post("/v1/recall-bots/schedule", json=_schedule_body())

    assert r.status_code == 400
    detail = r.json()["detail"]
    assert detail["code"] == ErrCode.CONFIGURATION
    assert detail["message"] == "Recall.ai is not configured on the server."
    assert fake_recall.created == 0


def test_schedule_invalid_request_is_400(client, recall_settings, fake_recall) -> None:
    r = client.post("/v1/recall-bots/schedule", json=_schedule_body(account_email="nope"))

    assert r.status_code == 400
    assert r.json()["detail"]["code"] == ErrCode.VALIDATION
    assert fake_recall.created == 0


def test_refresh_updates_status(client, recall_settings, fake_recall) -> None:
    client.post("/v1/recall-bots/schedule", json=_schedule_body())

    r = client.post("/v1/recall-bots/bot-1/refresh")

    assert r.status_code == 200
    assert r.json()["status"] == "in_call_recording"


def test_refresh_unknown_bot_is_404(client, recall_settings, fake_recall) -> None:
    r = client.post("/v1/recall-bots/missing/refresh")
    assert r.status_code == 404


def test_refresh_remote_failure_is_502(client, recall_settings, fake_recall) -> None:
    client.post("/v1/recall-bots/schedule", json=_schedule_body())
    fake_recall.fail_get = True

    r = client.post("/v1/recall-bots/bot-1/refresh")

    assert r.status_code == 502
    assert client.get("/v1/recall-bots/bot-1").json()["status"] == "scheduled"


def test_recall_bot_crud(client) -> None:
    payload = {
        "event_id": "evt-7",
        "bot_id": "bot-7",
        "meeting_url": "https://teams.microsoft.com/l/meetup-join/7",
        "meeting_start_time": "2026-03-01T10:00:00.000Z",
        "account_email": "advisor@example.com",
        "title": "Planning",
    }
    assert client.post("/v1/recall-bots", json=payload).status_code == 201
    assert client.post("/v1/recall-bots", json=payload).status_code == 409

    r = client.patch("/v1/recall-bots/bot-7", json={"status": "done"})
    assert r.status_code == 200
    assert r.json()["status"] == "done"
    assert r.json()["event_id"] == "evt-7"

    assert client.delete("/v1/recall-bots/bot-7").status_code == 204
    assert client.get("/v1/recall-bots/bot-7").status_code == 404
    assert client.patch("/v1/recall-bots/bot-7", json={"status": "x"}).status_code == 404


def test_schedule_while_event_is_being_scheduled_conflicts(
    client, recall_settings, fake_recall
) -> None:
    store = get_store()

    with store.event_scheduling_slot("evt-1"):
        r = client.post("/v1/recall-bots/schedule", json=_schedule_body())

    assert r.status_code == 409
    assert r.json()["detail"]["code"] == ErrCode.CONFLICT
    assert fake_recall.created == 0
    # После снятия резерва планирование проходит
    assert client.post("/v1/recall-bots/schedule", json=_schedule_body()).status_code == 201


def test_unknown_bot_requests_do_not_allocate_locks(client) -> None:
    for i in range(20):
        assert client.patch(f"/v1/recall-bots/ghost-{i}", json={"status": "x"}).status_code == 404
        assert client.delete(f"/v1/recall-bots/ghost-{i}").status_code == 404

    assert get_store()._bot_locks == {}
