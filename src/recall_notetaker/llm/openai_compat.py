from __future__ import annotations

from dataclasses import dataclass

import requests

from recall_notetaker.common.config import get_settings
from recall_notetaker.common.errors import ConfigurationError, ErrCode, ProviderError
from recall_notetaker.common.logging import get_llm_logger
from recall_notetaker.llm.base import LLMProvider

log = get_llm_logger()


@dataclass
class OpenAICompatConfig:
    """Настройки OpenAI-compatible API."""

    api_base: str
    api_key: str
    model: str = "gpt-4o-mini"
    temperature: float = 0.4
    timeout_s: int = 30


class OpenAICompatProvider(LLMProvider):
    """Минимальный провайдер LLM через OpenAI-compatible endpoint."""

    def __init__(self) -> None:
        s = get_settings()
        api_base = (s.openai_api_base or "").strip()
        api_key = (s.openai_api_key or "").strip()

        if not api_base:
            raise ConfigurationError("OPENAI_API_BASE не задан")
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY не задан")

        self.cfg = OpenAICompatConfig(
            api_base=api_base,
            api_key=api_key,
            model=s.openai_model or "gpt-4o-mini",
            temperature=float(s.llm_temperature),
            timeout_s=int(s.llm_request_timeout_sec or 30),
        )

    def complete_text(self, *, system: str, user: str) -> str:
        payload = {
            "model": self.cfg.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": self.cfg.temperature,
        }

        url = self.cfg.api_base.rstrip("/") + "/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.cfg.api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = requests.post(url, headers=headers, json=payload, timeout=self.cfg.timeout_s)
        except requests.RequestException as e:
            log.error(
                "llm_http_error",
                extra={"payload": {"provider": "openai_compat", "err": str(e)[:300]}},
            )
            raise ProviderError(
                ErrCode.LLM_PROVIDER_ERROR,
                "Ошибка HTTP при вызове LLM",
                {"err": str(e)},
            ) from e

        if resp.status_code >= 400:
            raise ProviderError(
                ErrCode.LLM_PROVIDER_ERROR,
                "LLM вернул ошибку",
                {"status": resp.status_code, "text_head": resp.text[:500]},
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(
                ErrCode.LLM_PROVIDER_ERROR,
                "LLM вернул невалидный JSON",
                {"err": str(e), "text_head": resp.text[:500]},
            ) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                ErrCode.LLM_PROVIDER_ERROR,
                "Не удалось извлечь текст из ответа LLM",
                {"err": str(e), "data_head": str(data)[:500]},
            ) from e
        return (content or "").strip()
