"""
Метрики Prometheus для сервиса.

Назначение:
- Экспорт /metrics
- Счётчики HTTP, планирования ботов и фонового опроса Recall
"""

from __future__ import annotations

import time

from fastapi import FastAPI, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

# =============================================================================
# СЧЁТЧИКИ И МЕТРИКИ
# =============================================================================

REQUESTS_TOTAL = Counter(
    "notetaker_requests_total",
    "Общее количество HTTP запросов",
    ["service", "route", "method", "status"],
)

HTTP_REQUEST_LATENCY_MS = Histogram(
    "notetaker_http_request_latency_ms",
    "Задержка HTTP запроса (мс)",
    ["service", "route", "method"],
    buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000),
)

RECALL_SCHEDULE_TOTAL = Counter(
    "notetaker_recall_schedule_total",
    "Попытки запланировать бота Recall",
    ["result"],  # ok|failed|not_configured|invalid
)

RECALL_POLL_RUNS_TOTAL = Counter(
    "notetaker_recall_poll_runs_total",
    "Количество циклов опроса Recall",
    ["result"],  # ok|failed
)

RECALL_POLL_LAST_PENDING = Gauge(
    "notetaker_recall_poll_last_pending",
    "Количество нетерминальных ботов в последнем цикле опроса",
)

RECALL_POLL_LAST_FAILED = Gauge(
    "notetaker_recall_poll_last_failed",
    "Количество ботов с ошибкой опроса в последнем цикле",
)

RECALL_BOT_COMPLETIONS_TOTAL = Counter(
    "notetaker_recall_bot_completions_total",
    "Переходы ботов в статус done",
)

SOCIAL_POSTS_GENERATED_TOTAL = Counter(
    "notetaker_social_posts_generated_total",
    "Сгенерированные посты для соцсетей",
    ["platform"],
)


def record_schedule_result(*, result: str) -> None:
    RECALL_SCHEDULE_TOTAL.labels(result=result).inc()


def record_recall_poll_result(
    *,
    pending: int,
    failed: int,
    completed: int,
    posts_created: int,
) -> None:
    result = "failed" if failed > 0 else "ok"
    RECALL_POLL_RUNS_TOTAL.labels(result=result).inc()
    RECALL_POLL_LAST_PENDING.set(max(0, pending))
    RECALL_POLL_LAST_FAILED.set(max(0, failed))
    if completed > 0:
        RECALL_BOT_COMPLETIONS_TOTAL.inc(completed)
    if posts_created > 0:
        SOCIAL_POSTS_GENERATED_TOTAL.labels(platform="linkedin").inc(posts_created)


# =============================================================================
# ENDPOINT /metrics
# =============================================================================
def setup_metrics_endpoint(app: FastAPI, *, service: str = "api-gateway") -> None:
    """
    Регистрирует endpoint /metrics для Prometheus.
    """

    @app.middleware("http")
    async def http_metrics(request: Request, call_next):
        route = request.url.path
        method = request.method
        started = time.perf_counter()

        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        status_code = str(response.status_code)

        REQUESTS_TOTAL.labels(
            service=service,
            route=route,
            method=method,
            status=status_code,
        ).inc()
        HTTP_REQUEST_LATENCY_MS.labels(
            service=service,
            route=route,
            method=method,
        ).observe(elapsed_ms)
        return response

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
