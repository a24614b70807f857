from __future__ import annotations

import pytest

from recall_notetaker.common.errors import ConflictError
from recall_notetaker.storage.memory_store import MemoryStore
from recall_notetaker.storage.models import SocialPost
from recall_notetaker.storage.seed import DEMO_MEETING_ID, seed_demo_data


def _meeting_payload(**overrides) -> dict:
    data = {
        "title": "Intro call",
        "start_time": "2026-03-01T10:00:00.000Z",
        "end_time": "2026-03-01T10:30:00.000Z",
        "platform": "meet",
        "account_email": "advisor@example.com",
    }
    data.update(overrides)
    return data


def _post(post_id: str) -> SocialPost:
    return SocialPost(
        id=post_id,
        platform="linkedin",
        content="hello",
        created_at="2026-03-01T11:00:00+00:00",
    )


def test_bot_record_identity_fields_are_immutable() -> None:
    store = MemoryStore()
    created = store.create_bot_record(
        {
            "bot_id": "bot-1",
            "event_id": "evt-1",
            "meeting_url": "https://meet.google.com/abc",
            "meeting_start_time": "2026-03-01T10:00:00.000Z",
            "account_email": "advisor@example.com",
            "title": "Intro call",
        }
    )

    updated = store.update_bot_record(
        "bot-1",
        {"bot_id": "other", "event_id": "evt-2", "status": "joining_call", "title": None},
    )

    assert created.id == created.bot_id == "bot-1"
    assert updated is not None
    assert updated.bot_id == "bot-1"
    assert updated.event_id == "evt-1"
    assert updated.status == "joining_call"
    assert updated.title == "Intro call"
    assert updated.created_at == created.created_at
    assert store.find_bot_record_by_event("evt-1") == updated
    assert store.find_bot_record_by_event("evt-2") is None


def test_update_missing_bot_record_returns_none() -> None:
    store = MemoryStore()
    assert store.update_bot_record("nope", {"status": "done"}) is None
    assert store.delete_bot_record("nope") is False


def test_append_social_post_only_if_empty() -> None:
    store = MemoryStore()
    meeting = store.create_meeting(_meeting_payload())

    first = store.append_social_post(meeting.id, _post("p-1"), only_if_empty=True)
    second = store.append_social_post(meeting.id, _post("p-2"), only_if_empty=True)
    forced = store.append_social_post(meeting.id, _post("p-3"))

    assert first is not None
    assert second is None
    assert forced is not None
    assert [p.id for p in forced.social_posts] == ["p-1", "p-3"]
    assert store.append_social_post("missing", _post("p-4")) is None


def test_update_auth_user_merges_connected_accounts() -> None:
    store = MemoryStore()
    user = store.create_auth_user(
        {
            "email": "advisor@example.com",
            "name": "Advisor",
            "connected_accounts": {
                "google": [
                    {"id": "g-1", "email": "advisor@example.com", "name": "Advisor"},
                ],
                "linkedin": None,
            },
        }
    )

    updated = store.update_auth_user(
        user.id,
        {
            "connected_accounts": {
                "linkedin": {"id": "li-1", "name": "Advisor", "connected_at": "2026-03-01"},
            }
        },
    )

    assert updated is not None
    assert [g.id for g in updated.connected_accounts.google] == ["g-1"]
    assert updated.connected_accounts.linkedin is not None
    assert updated.connected_accounts.linkedin.id == "li-1"
    assert updated.connected_accounts.facebook is None


def test_create_settings_is_idempotent_per_user() -> None:
    store = MemoryStore()

    first = store.create_settings(user_id="user-1")
    second = store.create_settings(user_id="user-1", bot_join_minutes=9)

    assert first.id == second.id
    assert first.bot_join_minutes == 2
    assert [a.name for a in first.automations] == ["LinkedIn Recap", "Facebook Community Post"]

    updated = store.update_settings(first.id, {"bot_join_minutes": 5, "user_id": "other"})
    assert updated is not None
    assert updated.bot_join_minutes == 5
    assert updated.user_id == "user-1"

    assert store.delete_settings(first.id) is True
    assert store.get_settings_by_user("user-1") is None


def test_seed_demo_data_is_idempotent() -> None:
    store = MemoryStore()

    seed_demo_data(store)
    seed_demo_data(store)

    assert len(store.list_auth_users()) == 1
    meeting = store.get_meeting(DEMO_MEETING_ID)
    assert meeting is not None
    assert len(meeting.transcript) == 3
    assert len(meeting.social_posts) == 2
    user = store.list_auth_users()[0]
    assert store.get_settings_by_user(user.id) is not None


def _bot_payload(bot_id: str, event_id: str = "evt-1", **overrides) -> dict:
    data = {
        "bot_id": bot_id,
        "event_id": event_id,
        "meeting_url": "https://zoom.us/j/1",
        "meeting_start_time": "2026-03-01T10:00:00.000Z",
        "account_email": "advisor@example.com",
        "title": "Intro call",
    }
    data.update(overrides)
    return data


def test_bot_locks_do_not_grow_for_unknown_or_deleted_records() -> None:
    store = MemoryStore()
    store.create_bot_record(_bot_payload("b1"))
    assert store.delete_bot_record("b1") is True

    for i in range(100):
        assert store.update_bot_record(f"ghost-{i}", {"status": "done"}) is None
        assert store.delete_bot_record(f"ghost-{i}") is False
        with store.bot_record_lock(f"ghost-{i}"):
            pass

    assert store._bot_locks == {}


def test_create_bot_record_rejects_duplicate_id() -> None:
    store = MemoryStore()
    original = store.create_bot_record(_bot_payload("b1", event_id="evt-A", status="done"))

    with pytest.raises(ConflictError):
        store.create_bot_record(_bot_payload("b1", event_id="evt-B"))

    current = store.get_bot_record("b1")
    assert current == original
    assert current is not None
    assert current.event_id == "evt-A"
    assert current.status == "done"


def test_event_scheduling_slot_is_exclusive() -> None:
    store = MemoryStore()

    with store.event_scheduling_slot("evt-1"):
        with pytest.raises(ConflictError):
            with store.event_scheduling_slot("evt-1"):
                pass
        with store.event_scheduling_slot("evt-2"):
            pass

    # Резерв снят, записи для события нет: слот снова свободен
    with store.event_scheduling_slot("evt-1"):
        store.create_bot_record(_bot_payload("b1", event_id="evt-1"))

    with pytest.raises(ConflictError) as ei:
        with store.event_scheduling_slot("evt-1"):
            pass
    assert ei.value.details["bot_id"] == "b1"
    assert store._events_scheduling == set()
