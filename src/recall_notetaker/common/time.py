"""
Утилиты времени.

Назначение:
- единый формат времени (ISO UTC)
- разбор ISO-строк от клиентов и внешних API
"""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Текущее время в UTC (datetime).
    """
    return datetime.now(UTC)


def utc_now_iso() -> str:
    """
    Текущее время в UTC в ISO формате.
    """
    return utc_now().isoformat()


def parse_iso(value: str) -> datetime:
    """
    ISO-строка -> aware datetime.
    Naive значения считаем UTC. Поддерживается суффикс "Z".
    """
    raw = (value or "").strip()
    if raw.endswith("Z") or raw.endswith("z"):
        raw = raw[:-1] + "+00:00"
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def to_iso_z(dt: datetime) -> str:
    """
    datetime -> ISO UTC с миллисекундами и "Z" (формат, который ждёт Recall API).
    """
    dt_utc = dt.astimezone(UTC)
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt_utc.microsecond // 1000:03d}Z"
