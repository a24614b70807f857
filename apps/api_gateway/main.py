"""
API Gateway (FastAPI).

Функции:
- /health
- /metrics
- HTTP API: пользователи, встречи, боты Recall, настройки

Жизненный цикл:
- startup: демо-данные (SEED_DEMO_DATA) и запуск фонового опроса Recall
- shutdown: остановка опроса
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api_gateway.routers.auth_users import router as auth_users_router
from apps.api_gateway.routers.meetings import router as meetings_router
from apps.api_gateway.routers.recall_bots import router as recall_bots_router
from apps.api_gateway.routers.settings import router as settings_router
from recall_notetaker.common.config import get_settings
from recall_notetaker.common.logging import get_project_logger, setup_logging
from recall_notetaker.common.metrics import setup_metrics_endpoint
from recall_notetaker.common.time import utc_now_iso
from recall_notetaker.connectors.recall.mock import reset_mock_bots
from recall_notetaker.contracts.http_api import HealthResponse
from recall_notetaker.jobs.poller import start_recall_polling
from recall_notetaker.storage.memory_store import get_store
from recall_notetaker.storage.seed import seed_demo_data

log = get_project_logger()


def _parse_origins(raw: str) -> list[str]:
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    return origins or ["*"]


def _cors_params() -> tuple[list[str], bool]:
    settings = get_settings()
    allow_origins = _parse_origins(settings.cors_allowed_origins)
    allow_credentials = bool(settings.cors_allow_credentials)

    # '*' нельзя использовать вместе с credentials=true
    if "*" in allow_origins:
        allow_credentials = False

    return allow_origins, allow_credentials


def _create_app() -> FastAPI:
    app = FastAPI(title="Recall Notetaker API", version="0.1.0")
    allow_origins, allow_credentials = _cors_params()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=allow_credentials,
    )

    setup_metrics_endpoint(app)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok", timestamp=utc_now_iso())

    @app.on_event("startup")
    def startup_background() -> None:
        settings = get_settings()
        if settings.seed_demo_data:
            seed_demo_data(get_store())
        app.state.recall_poller = start_recall_polling()

    @app.on_event("shutdown")
    def shutdown_background() -> None:
        poller = getattr(app.state, "recall_poller", None)
        if poller is not None:
            poller.stop()
            app.state.recall_poller = None
        reset_mock_bots()

    app.include_router(auth_users_router, prefix="/v1")
    app.include_router(meetings_router, prefix="/v1")
    app.include_router(recall_bots_router, prefix="/v1")
    app.include_router(settings_router, prefix="/v1")

    return app


setup_logging()
log.info("api_gateway_ready", extra={"payload": {"service": get_settings().service_name}})

app = _create_app()
