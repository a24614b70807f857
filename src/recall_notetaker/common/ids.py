"""
Генерация идентификаторов.

Назначение:
- id пользователей/встреч/настроек/постов
- id для ботов, если внешний сервис его не вернул (mock)
"""

from __future__ import annotations

import secrets
import uuid


def new_uuid() -> str:
    """UUIDv4 строкой."""
    return str(uuid.uuid4())


def new_mock_bot_id(prefix: str = "mockbot") -> str:
    """Идентификатор бота для mock-коннектора."""
    return f"{prefix}_{secrets.token_hex(8)}"
