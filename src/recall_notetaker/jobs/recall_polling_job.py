"""
Recall polling job.

Назначение:
- один цикл сверки локальных записей ботов с Recall.ai
- метрики и итоговый лог по циклу
"""

from __future__ import annotations

from recall_notetaker.common.config import get_settings
from recall_notetaker.common.logging import get_poller_logger
from recall_notetaker.common.metrics import record_recall_poll_result
from recall_notetaker.services.recall_bot_service import (
    RecallPollResult,
    is_recall_configured,
    poll_recall_bots,
)
from recall_notetaker.storage.memory_store import MemoryStore

log = get_poller_logger()


def run(*, store: MemoryStore | None = None) -> RecallPollResult | None:
    settings = get_settings()
    if not settings.recall_poll_enabled:
        log.info("recall_poll_job_skipped", extra={"payload": {"reason": "disabled"}})
        return None
    if not is_recall_configured():
        log.info("recall_poll_job_skipped", extra={"payload": {"reason": "not_configured"}})
        return None

    result = poll_recall_bots(store=store)
    record_recall_poll_result(
        pending=result.pending,
        failed=result.failed,
        completed=result.completed,
        posts_created=result.posts_created,
    )
    log.info(
        "recall_poll_job_finished",
        extra={
            "payload": {
                "scanned": result.scanned,
                "pending": result.pending,
                "updated": result.updated,
                "completed": result.completed,
                "posts_created": result.posts_created,
                "failed": result.failed,
            }
        },
    )
    return result
