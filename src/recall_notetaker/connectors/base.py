"""
Базовые интерфейсы коннекторов (интеграции с внешними системами).

Назначение:
- стандартизировать адаптеры к сервису ботов записи встреч
- отделить "как обращаемся к API" от "что делаем с ответом"
"""

from __future__ import annotations

from typing import Any, Protocol


class BotConnector(Protocol):
    """
    Контракт коннектора ботов записи.

    Ответы: "сырые" dict'ы внешнего API; разбор делает сервисный слой.
    """

    def create_bot(
        self,
        *,
        meeting_url: str,
        bot_name: str,
        join_at: str | None = None,
        recording_config: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Создать бота. Ответ: {id, status?, join_at?}."""
        ...

    def get_bot(self, bot_id: str) -> dict[str, Any]:
        """Текущее состояние бота (status, status_changes, recordings)."""
        ...
