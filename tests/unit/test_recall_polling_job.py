from __future__ import annotations

import threading
from types import SimpleNamespace

import pytest

from recall_notetaker.common.config import get_settings
from recall_notetaker.jobs import poller, recall_polling_job


@pytest.fixture()
def poll_settings():
    s = get_settings()
    keys = [
        "recall_provider",
        "recall_api_key",
        "recall_poll_enabled",
        "recall_poll_interval_ms",
    ]
    snapshot = {k: getattr(s, k) for k in keys}
    try:
        s.recall_provider = "recall"
        s.recall_api_key = "test-key"
        s.recall_poll_enabled = True
        yield s
    finally:
        for k, v in snapshot.items():
            setattr(s, k, v)


def test_polling_job_skips_when_disabled(poll_settings, monkeypatch) -> None:
    poll_settings.recall_poll_enabled = False
    monkeypatch.setattr(
        recall_polling_job,
        "poll_recall_bots",
        lambda **kwargs: pytest.fail("poll must not run"),
    )

    assert recall_polling_job.run() is None


def test_polling_job_skips_when_not_configured(poll_settings, monkeypatch) -> None:
    poll_settings.recall_api_key = None
    monkeypatch.setattr(
        recall_polling_job,
        "poll_recall_bots",
        lambda **kwargs: pytest.fail("poll must not run"),
    )

    assert recall_polling_job.run() is None


def test_polling_job_runs_cycle_and_records_metrics(poll_settings, monkeypatch) -> None:
    metrics_calls: list[dict] = []
    summary = SimpleNamespace(
        scanned=3,
        pending=2,
        updated=1,
        completed=1,
        posts_created=1,
        failed=1,
        updated_at="2026-03-01T00:00:00+00:00",
    )
    monkeypatch.setattr(recall_polling_job, "poll_recall_bots", lambda **kwargs: summary)
    monkeypatch.setattr(
        recall_polling_job,
        "record_recall_poll_result",
        lambda **kwargs: metrics_calls.append(kwargs),
    )

    result = recall_polling_job.run()

    assert result is summary
    assert metrics_calls == [{"pending": 2, "failed": 1, "completed": 1, "posts_created": 1}]


def test_mock_provider_counts_as_configured(poll_settings, monkeypatch) -> None:
    poll_settings.recall_provider = "recall_mock"
    poll_settings.recall_api_key = None
    calls: list[int] = []

    def _fake_poll(**kwargs):
        calls.append(1)
        return SimpleNamespace(
            scanned=0, pending=0, updated=0, completed=0, posts_created=0, failed=0
        )

    monkeypatch.setattr(recall_polling_job, "poll_recall_bots", _fake_poll)

    assert recall_polling_job.run() is not None
    assert calls == [1]


def test_start_recall_polling_noop_without_configuration(poll_settings) -> None:
    poll_settings.recall_api_key = ""
    assert poller.start_recall_polling() is None

    poll_settings.recall_api_key = "test-key"
    poll_settings.recall_poll_enabled = False
    assert poller.start_recall_polling() is None


def test_poller_runs_immediately_and_stops() -> None:
    ran = threading.Event()
    calls: list[int] = []

    def _job() -> None:
        calls.append(1)
        ran.set()

    p = poller.RecallPoller(interval_sec=60, job=_job).start()
    try:
        assert ran.wait(timeout=5)
        assert p.running
    finally:
        p.stop(timeout=5)

    assert not p.running
    # Интервал длинный: второго цикла до остановки не было
    assert calls == [1]


def test_poller_survives_job_errors() -> None:
    second_run = threading.Event()
    calls: list[int] = []

    def _job() -> None:
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")
        second_run.set()

    p = poller.RecallPoller(interval_sec=0, job=_job)
    assert p.interval_sec == poller.MIN_INTERVAL_SEC
    p.start()
    try:
        assert second_run.wait(timeout=5)
    finally:
        p.stop(timeout=5)
    assert len(calls) >= 2
