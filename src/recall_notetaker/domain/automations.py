"""
Шаблоны автоматизаций по умолчанию (генерация постов для соцсетей).
"""

from __future__ import annotations

from recall_notetaker.common.ids import new_uuid
from recall_notetaker.domain.enums import AutomationType, SocialPlatform

DEFAULT_AUTOMATION_TEMPLATES: tuple[dict, ...] = (
    {
        "name": "LinkedIn Recap",
        "type": AutomationType.generate_post,
        "platform": SocialPlatform.linkedin,
        "description": (
            "Professional LinkedIn update highlighting key insights and value "
            "delivered during the meeting."
        ),
        "example": (
            "Great conversation with ACME Corp today about diversifying their "
            "portfolio with sustainable funds."
        ),
    },
    {
        "name": "Facebook Community Post",
        "type": AutomationType.generate_post,
        "platform": SocialPlatform.facebook,
        "description": (
            "Friendly, approachable Facebook recap that invites followers to "
            "start a conversation."
        ),
        "example": (
            "Just wrapped a call helping a family plan for college savings. "
            "Love guiding clients toward their goals!"
        ),
    },
)


def build_default_automations() -> list[dict]:
    """Новые id на каждый вызов: у каждого пользователя свои записи."""
    return [{"id": new_uuid(), **template} for template in DEFAULT_AUTOMATION_TEMPLATES]
