"""
Запуск API Gateway: python -m apps.api_gateway

Фоновый опрос Recall стартует вместе с приложением (startup-хук).
"""

from __future__ import annotations

import uvicorn

from recall_notetaker.common.config import get_settings
from recall_notetaker.common.logging import get_project_logger, setup_logging

log = get_project_logger()


def main() -> None:
    setup_logging()
    settings = get_settings()

    log.info(
        "api_gateway_starting",
        extra={
            "payload": {
                "host": settings.api_host,
                "port": int(settings.api_port),
                "recall_poll_enabled": bool(settings.recall_poll_enabled),
            }
        },
    )
    uvicorn.run(
        "apps.api_gateway.main:app",
        host=settings.api_host,
        port=int(settings.api_port),
        log_config=None,
    )


if __name__ == "__main__":
    main()
