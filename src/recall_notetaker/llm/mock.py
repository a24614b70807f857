"""
Mock LLM для тестов и dev.

Назначение:
- гонять генерацию постов без реальных вызовов LLM
- предсказуемый результат
"""

from __future__ import annotations

from .base import LLMProvider


class MockLLMProvider(LLMProvider):
    def complete_text(self, *, system: str, user: str) -> str:
        _ = system
        title = ""
        for line in user.splitlines():
            if line.startswith("Meeting title:"):
                title = line.split(":", 1)[1].strip()
                break
        return f"Productive session today: {title or 'client meeting'}. #mock"
