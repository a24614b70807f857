"""
Фоновый опрос Recall в процессе API.

Хранилище in-memory, поэтому опрос живёт в том же процессе, что и HTTP:
отдельный daemon-поток, циклы строго последовательно. Первый цикл сразу
после старта, дальше раз в RECALL_POLL_INTERVAL_MS.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

from recall_notetaker.common.config import get_settings
from recall_notetaker.common.logging import get_poller_logger
from recall_notetaker.jobs.recall_polling_job import run as run_recall_polling
from recall_notetaker.services.recall_bot_service import is_recall_configured

log = get_poller_logger()

MIN_INTERVAL_SEC = 1.0


class RecallPoller:
    def __init__(
        self,
        *,
        interval_sec: float,
        job: Callable[[], object] = run_recall_polling,
        name: str = "recall-poller",
    ) -> None:
        self.interval_sec = max(MIN_INTERVAL_SEC, float(interval_sec))
        self._job = job
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._loop, name=name, daemon=True)

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> RecallPoller:
        self._thread.start()
        return self

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout=timeout)
        log.info("recall_poller_stopped")

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self._job()
            except Exception as e:
                log.error(
                    "recall_poller_cycle_error",
                    extra={"payload": {"err": str(e)[:300]}},
                )
            if self._stop_event.wait(self.interval_sec):
                break


def start_recall_polling() -> RecallPoller | None:
    """
    Запустить опрос. Без конфигурации Recall: постоянный no-op (лог и None).
    """
    settings = get_settings()
    if not settings.recall_poll_enabled:
        log.info("recall_poller_disabled", extra={"payload": {"reason": "disabled"}})
        return None
    if not is_recall_configured():
        log.warning(
            "recall_poller_disabled",
            extra={"payload": {"reason": "Recall.ai is not configured; polling skipped."}},
        )
        return None

    interval_sec = max(0, int(settings.recall_poll_interval_ms)) / 1000.0
    poller = RecallPoller(interval_sec=interval_sec).start()
    log.info(
        "recall_poller_started",
        extra={"payload": {"interval_sec": poller.interval_sec}},
    )
    return poller
