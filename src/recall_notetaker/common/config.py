"""
Централизованная конфигурация проекта (ENV / .env).

Важно:
- настройки читаются из .env и переменных окружения
- типизированные значения через pydantic-settings
- секреты можно передать файлом: <ИМЯ>_FILE=/run/secrets/...
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Runtime
    # -------------------------------------------------------------------------
    app_env: str = Field(default="dev", alias="APP_ENV")
    service_name: str = Field(default="recall-notetaker-api", alias="SERVICE_NAME")
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=4000, alias="API_PORT")
    cors_allowed_origins: str = Field(default="*", alias="CORS_ALLOWED_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    seed_demo_data: bool = Field(default=True, alias="SEED_DEMO_DATA")

    # -------------------------------------------------------------------------
    # Recall.ai (бот записи встреч)
    # -------------------------------------------------------------------------
    recall_provider: str = Field(default="recall", alias="RECALL_PROVIDER")  # recall|recall_mock
    recall_api_key: str | None = Field(default=None, alias="RECALL_API_KEY")
    recall_region: str = Field(default="us-west-2", alias="RECALL_REGION")
    recall_api_base: str | None = Field(default=None, alias="RECALL_API_BASE")
    recall_timeout_sec: int = Field(default=10, alias="RECALL_TIMEOUT_SEC")
    recall_poll_enabled: bool = Field(default=True, alias="RECALL_POLL_ENABLED")
    recall_poll_interval_ms: int = Field(default=30_000, alias="RECALL_POLL_INTERVAL_MS")
    bot_join_minutes: int = Field(default=2, alias="BOT_JOIN_MINUTES")  # 0..15

    # -------------------------------------------------------------------------
    # LLM (OpenAI-compatible), генерация постов
    # -------------------------------------------------------------------------
    llm_enabled: bool = Field(default=True, alias="LLM_ENABLED")
    llm_provider: str = Field(default="openai", alias="LLM_PROVIDER")  # openai|mock
    openai_api_base: str = Field(default="https://api.openai.com/v1", alias="OPENAI_API_BASE")
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    llm_temperature: float = Field(default=0.4, alias="LLM_TEMPERATURE")
    llm_request_timeout_sec: int = Field(default=30, alias="LLM_REQUEST_TIMEOUT_SEC")
    llm_retries: int = Field(default=1, alias="LLM_RETRIES")
    llm_retry_backoff_ms: int = Field(default=250, alias="LLM_RETRY_BACKOFF_MS")

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")  # json|text

    def model_post_init(self, __context) -> None:
        _apply_file_overrides(self)


def _apply_file_overrides(settings: Settings) -> None:
    alias_to_field = {}
    for name, field in type(settings).model_fields.items():
        alias = field.alias or name
        alias_to_field[str(alias)] = name
        alias_to_field[str(name)] = name

    for key, path in os.environ.items():
        if not key.endswith("_FILE"):
            continue
        base = key[: -len("_FILE")]
        target = alias_to_field.get(base)
        if not target:
            continue
        file_path = (path or "").strip()
        if not file_path:
            continue
        try:
            raw = Path(file_path).read_text(encoding="utf-8")
        except Exception as e:
            logging.getLogger("recall-notetaker").error(
                "config_file_read_failed",
                extra={"payload": {"env_key": key, "path": file_path, "error": str(e)[:200]}},
            )
            raise RuntimeError(f"Failed to read {key} from {file_path}") from e
        setattr(settings, target, (raw or "").strip())


_SETTINGS = Settings()


def get_settings() -> Settings:
    return _SETTINGS


def recall_api_base_url() -> str:
    """
    Базовый URL Recall API: явный RECALL_API_BASE или региональный хост.
    """
    s = get_settings()
    explicit = (s.recall_api_base or "").strip()
    if explicit:
        return explicit.rstrip("/")
    region = (s.recall_region or "us-west-2").strip()
    return f"https://{region}.recall.ai/api/v1"
