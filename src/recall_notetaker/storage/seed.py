"""
Демо-данные для dev (SEED_DEMO_DATA=true).

Идемпотентно: если пользователи уже есть — ничего не делаем.
"""

from __future__ import annotations

from datetime import timedelta

from recall_notetaker.common.ids import new_uuid
from recall_notetaker.common.logging import get_project_logger
from recall_notetaker.common.time import utc_now, utc_now_iso

from .memory_store import MemoryStore

log = get_project_logger()

DEMO_MEETING_ID = "7a7c0dc1-e6b5-4819-ba6c-639339678b35"

_DEMO_FOLLOW_UP = """Subject: Welcome Call Recap

Hi Alex,

Great speaking with you today! As discussed, I'll send over the onboarding checklist and we'll reconnect next week to review your automation settings.

Best,
Sample Advisor"""


def seed_demo_data(store: MemoryStore) -> None:
    if store.list_auth_users():
        return

    now = utc_now_iso()
    user = store.create_auth_user(
        {
            "email": "advisor@example.com",
            "name": "Sample Advisor",
            "picture": "https://api.dicebear.com/7.x/avataaars/svg?seed=Advisor",
            "connected_accounts": {
                "google": [
                    {"id": new_uuid(), "email": "advisor@example.com", "name": "Sample Advisor"}
                ],
                "linkedin": {"id": "li-1", "name": "Sample Advisor", "connected_at": now},
            },
        }
    )

    started = utc_now() - timedelta(days=1)
    store.create_meeting(
        {
            "title": "Mock Past Meeting",
            "start_time": started.isoformat(),
            "end_time": (started + timedelta(minutes=45)).isoformat(),
            "attendees": ["Alex Smith", "Sample Advisor"],
            "platform": "zoom",
            "meeting_link": "https://zoom.us/j/123456789",
            "account_email": "advisor@example.com",
            "notetaker_enabled": True,
            "transcript": [
                {
                    "speaker": "Sample Advisor",
                    "timestamp": "00:00:05",
                    "text": (
                        "Thanks for joining today, Alex. I wanted to walk through "
                        "your onboarding questions."
                    ),
                },
                {
                    "speaker": "Alex Smith",
                    "timestamp": "00:00:14",
                    "text": "Great, I'm most curious about how the first 90 days look.",
                },
                {
                    "speaker": "Sample Advisor",
                    "timestamp": "00:00:30",
                    "text": (
                        "Perfect, we'll cover milestones, automation ideas, and where "
                        "Recall.ai fits in."
                    ),
                },
            ],
            "follow_up_email": _DEMO_FOLLOW_UP,
            "social_posts": [
                {
                    "id": "sp-linkedin-1",
                    "platform": "linkedin",
                    "content": (
                        "Excited to welcome Alex to the platform today! We outlined the "
                        "first 90 days, highlighted Recall.ai automations, and set clear "
                        "KPIs for success."
                    ),
                    "created_at": now,
                    "posted": False,
                },
                {
                    "id": "sp-facebook-1",
                    "platform": "facebook",
                    "content": (
                        "Had a fantastic kickoff call with a new client! We built their "
                        "onboarding plan and showed how AI notetakers keep them ahead "
                        "of schedule."
                    ),
                    "created_at": now,
                    "posted": False,
                },
            ],
        },
        meeting_id=DEMO_MEETING_ID,
    )

    store.create_settings(user_id=user.id, bot_join_minutes=2)
    log.info("demo_data_seeded", extra={"payload": {"user_id": user.id}})
