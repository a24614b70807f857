"""
Базовые типы для LLM.

- единый контракт провайдера: complete_text(system=..., user=...) -> str
- результат генерации для оркестратора
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class LLMResult:
    """
    Результат генерации LLM.
    """

    text: str
    model: str | None = None
    usage: dict[str, Any] | None = None


class LLMProvider(ABC):
    """
    Интерфейс провайдера LLM.
    """

    @abstractmethod
    def complete_text(self, *, system: str, user: str) -> str:
        """
        Сгенерировать ответ (plain text).
        """
        raise NotImplementedError
