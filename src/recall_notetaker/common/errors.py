"""
Единые ошибки и коды ошибок.

Назначение:
- предсказуемые коды для HTTP и логов фонового опроса
- единый стиль исключений по проекту
"""

from __future__ import annotations

from dataclasses import dataclass


class ErrCode:
    # Общие
    UNKNOWN = "unknown"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    CONFIGURATION = "configuration"

    # Внешние интеграции
    TRANSPORT = "transport"
    SCHEDULING = "scheduling"
    CONNECTOR_PROVIDER_ERROR = "connector_provider_error"
    LLM_PROVIDER_ERROR = "llm_provider_error"


@dataclass
class AppError(Exception):
    """
    Базовая ошибка приложения.
    - code: стабильный код ошибки
    - message: безопасное сообщение
    - details: доп. данные (без секретов)
    """

    code: str
    message: str
    details: dict | None = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


class ValidationError(AppError):
    def __init__(self, message: str = "Ошибка валидации", details: dict | None = None) -> None:
        super().__init__(ErrCode.VALIDATION, message, details)


class NotFoundError(AppError):
    def __init__(self, message: str = "Не найдено", details: dict | None = None) -> None:
        super().__init__(ErrCode.NOT_FOUND, message, details)


class ConflictError(AppError):
    def __init__(self, message: str = "Конфликт", details: dict | None = None) -> None:
        super().__init__(ErrCode.CONFLICT, message, details)


class ConfigurationError(AppError):
    """Интеграция не настроена (нет ключей): функция выключена, а не ретраится."""

    def __init__(
        self, message: str = "Интеграция не настроена", details: dict | None = None
    ) -> None:
        super().__init__(ErrCode.CONFIGURATION, message, details)


class TransportError(AppError):
    """Сетевая ошибка или non-2xx ответ внешнего API."""

    def __init__(
        self,
        message: str = "Ошибка обращения к внешнему API",
        details: dict | None = None,
        *,
        code: str = ErrCode.TRANSPORT,
    ) -> None:
        super().__init__(code, message, details)


class SchedulingError(AppError):
    def __init__(
        self, message: str = "Не удалось запланировать бота", details: dict | None = None
    ) -> None:
        super().__init__(ErrCode.SCHEDULING, message, details)


class ProviderError(AppError):
    def __init__(self, code: str, message: str, details: dict | None = None) -> None:
        super().__init__(code, message, details)
