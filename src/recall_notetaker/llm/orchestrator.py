from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, TypeVar

from recall_notetaker.common.config import get_settings
from recall_notetaker.common.errors import ErrCode, ProviderError
from recall_notetaker.common.logging import get_llm_logger
from recall_notetaker.llm.base import LLMProvider, LLMResult

log = get_llm_logger()

T = TypeVar("T")


class LLMOrchestrator:
    """Оркестратор вызовов LLM: ретраи и единая обработка ошибок.

    Здесь нет логики провайдера, только orchestration.
    """

    def __init__(self, provider: LLMProvider) -> None:
        self.provider = provider
        s = get_settings()
        self.retries = max(0, int(s.llm_retries))
        self.backoff_ms = max(0, int(s.llm_retry_backoff_ms))

    def _retry(self, fn: Callable[..., T], **kwargs: Any) -> T:
        last_err: BaseException | None = None
        for attempt in range(self.retries + 1):
            try:
                return fn(**kwargs)
            except Exception as e:
                last_err = e
                log.warning(
                    "llm_call_retry",
                    extra={"payload": {"attempt": attempt + 1, "err": str(e)[:300]}},
                )
                if attempt >= self.retries:
                    break
                time.sleep(self.backoff_ms / 1000.0)

        raise ProviderError(
            ErrCode.LLM_PROVIDER_ERROR,
            "LLM не ответил после ретраев",
            {"err": str(last_err)},
        ) from last_err

    def complete_text(self, *, system: str, user: str) -> LLMResult:
        text = self._retry(self.provider.complete_text, system=system, user=user)
        cfg = getattr(self.provider, "cfg", None)
        return LLMResult(text=text or "", model=getattr(cfg, "model", None))
