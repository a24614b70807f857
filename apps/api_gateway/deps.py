"""
FastAPI Depends и общие HTTP-хелперы.

Сюда выносим:
- доступ к in-memory хранилищу
- перевод AppError -> HTTPException с единым форматом detail
"""

from __future__ import annotations

from fastapi import HTTPException

from recall_notetaker.common.errors import AppError, NotFoundError
from recall_notetaker.storage.memory_store import MemoryStore, get_store


def store_dep() -> MemoryStore:
    """
    Текущий store процесса (get_store читается на каждый запрос, чтобы
    reset_store() в тестах подхватывался без перезапуска приложения).
    """
    return get_store()


def http_error(status_code: int, e: AppError) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"code": e.code, "message": e.message, "details": e.details or {}},
    )


def not_found(message: str) -> HTTPException:
    return http_error(404, NotFoundError(message))
