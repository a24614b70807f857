"""
Логирование проекта.

- stdout, JSON по умолчанию (LOG_FORMAT=text для локальной отладки)
- структурные поля события передаются через extra={"payload": {...}}
- фоновый опрос Recall пишет в свой логгер и со своим именем потока
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from recall_notetaker.common.config import get_settings

PROJECT_LOGGER = "recall-notetaker"

# requests/urllib3 на каждом цикле опроса пишут про соединения
_NOISY_LOGGERS = ("urllib3", "urllib3.connectionpool")


class JsonFormatter(logging.Formatter):
    def __init__(self, *, service: str) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "thread": record.threadName,
            "event": record.getMessage(),
        }
        payload = getattr(record, "payload", None)
        if isinstance(payload, dict):
            entry["payload"] = payload
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Человекочитаемый формат: payload дописывается к событию как key=value."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        payload = getattr(record, "payload", None)
        if isinstance(payload, dict) and payload:
            line += " " + " ".join(f"{k}={v}" for k, v in payload.items())
        return line


def _build_formatter() -> logging.Formatter:
    s = get_settings()
    if (s.log_format or "").strip().lower() == "text":
        return TextFormatter()
    return JsonFormatter(service=s.service_name)


def setup_logging() -> None:
    s = get_settings()
    root = logging.getLogger()
    level = getattr(logging, (s.log_level or "INFO").upper(), logging.INFO)
    root.setLevel(level)

    # Повторный вызов (reload, тесты) не добавляет хэндлеров
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(_build_formatter())
    root.addHandler(handler)

    for name in ("uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_project_logger(name: str = PROJECT_LOGGER) -> logging.Logger:
    return logging.getLogger(name)


def get_poller_logger() -> logging.Logger:
    return logging.getLogger(f"{PROJECT_LOGGER}.poller")


def get_llm_logger() -> logging.Logger:
    """
    Отдельный логгер для генерации постов (удобно фильтровать/маршрутизировать).
    """
    return logging.getLogger(f"{PROJECT_LOGGER}.llm")
