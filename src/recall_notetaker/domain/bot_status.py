"""
Статусы бота Recall.

Статус приходит от внешней системы как свободная строка: словарь Recall
известен не полностью, поэтому закрытый enum не вводим. Неизвестные значения
проходят насквозь без изменений, а сравнения с терминальными статусами
делаются без учёта регистра (пробелы значимы: " done " не терминальный).
"""

from __future__ import annotations

from typing import NewType

BotStatus = NewType("BotStatus", str)

STATUS_SCHEDULED = BotStatus("scheduled")
STATUS_DONE = BotStatus("done")
STATUS_FAILED = BotStatus("failed")

TERMINAL_STATUSES = frozenset({STATUS_DONE, STATUS_FAILED})


def _norm(status: str | None) -> str:
    return (status or "").lower()


def is_done(status: str | None) -> bool:
    return _norm(status) == STATUS_DONE


def is_failed(status: str | None) -> bool:
    return _norm(status) == STATUS_FAILED


def is_terminal(status: str | None) -> bool:
    return _norm(status) in TERMINAL_STATUSES


def is_pending(status: str | None) -> bool:
    """
    Запись требует опроса: статуса нет вовсе или он не терминальный.
    """
    if not status:
        return True
    return not is_terminal(status)


def is_completion_edge(previous: str | None, current: str | None) -> bool:
    """
    Переход в done: предыдущий статус не done, текущий done.

    Флага "когда-либо был done" нет: откат done -> другой -> done даст
    повторное срабатывание (защищает только проверка постов у встречи).
    """
    return not is_done(previous) and is_done(current)
