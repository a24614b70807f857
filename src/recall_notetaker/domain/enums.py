"""
Доменные перечисления (enum).

Используются во всей системе:
- платформа встречи
- соцсети для постов
- типы автоматизаций
"""

from __future__ import annotations

import enum


class MeetingPlatform(str, enum.Enum):
    """
    Платформа видеовстречи.
    """

    zoom = "zoom"
    teams = "teams"
    meet = "meet"


class SocialPlatform(str, enum.Enum):
    """
    Соцсеть, для которой сгенерирован пост.
    """

    linkedin = "linkedin"
    facebook = "facebook"


class AutomationType(str, enum.Enum):
    generate_post = "generate_post"
