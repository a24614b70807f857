"""
Адаптер Recall.ai.

Назначение:
- HTTP-клиент к Recall bot API (create/get bot)
- единая обработка ошибок транспорта и non-2xx ответов
"""

from __future__ import annotations

from typing import Any

import requests

from recall_notetaker.common.config import get_settings, recall_api_base_url
from recall_notetaker.common.errors import ConfigurationError, ErrCode, TransportError
from recall_notetaker.common.logging import get_project_logger
from recall_notetaker.connectors.base import BotConnector

log = get_project_logger()


class RecallConnector(BotConnector):
    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_sec: int | None = None,
    ) -> None:
        s = get_settings()
        self.base_url = (base_url or recall_api_base_url()).rstrip("/")
        self.api_key = (api_key or s.recall_api_key or "").strip()
        self.timeout_sec = int(timeout_sec if timeout_sec is not None else s.recall_timeout_sec)

    def _request(self, method: str, path: str, *, payload: dict[str, Any] | None = None) -> dict:
        if not self.api_key:
            raise ConfigurationError("RECALL_API_KEY не настроен")

        url = f"{self.base_url}{path}"
        headers = {
            "Authorization": f"Token {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = requests.request(
                method=method.upper(),
                url=url,
                json=payload,
                headers=headers,
                timeout=self.timeout_sec,
            )
        except requests.RequestException as e:
            raise TransportError(
                str(e) or "Recall.ai request failed.",
                details={"method": method.upper(), "path": path},
                code=ErrCode.CONNECTOR_PROVIDER_ERROR,
            ) from e

        if resp.status_code >= 400:
            # Текст ответа отдаём как есть: его показывают пользователю при schedule
            text = (resp.text or "").strip()
            raise TransportError(
                text[:1000] or "Recall.ai request failed.",
                details={"method": method.upper(), "path": path, "status": resp.status_code},
                code=ErrCode.CONNECTOR_PROVIDER_ERROR,
            )

        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(
                "Recall.ai вернул невалидный JSON",
                details={"path": path, "text_head": resp.text[:300]},
                code=ErrCode.CONNECTOR_PROVIDER_ERROR,
            ) from e
        return data if isinstance(data, dict) else {}

    def create_bot(
        self,
        *,
        meeting_url: str,
        bot_name: str,
        join_at: str | None = None,
        recording_config: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"meeting_url": meeting_url, "bot_name": bot_name}
        if join_at:
            payload["join_at"] = join_at
        if recording_config is not None:
            payload["recording_config"] = recording_config
        if metadata is not None:
            payload["metadata"] = metadata

        data = self._request("POST", "/bot", payload=payload)
        log.info("recall_create_bot_ok", extra={"payload": {"bot_id": data.get("id")}})
        return data

    def get_bot(self, bot_id: str) -> dict[str, Any]:
        data = self._request("GET", f"/bot/{bot_id}")
        log.debug("recall_get_bot_ok", extra={"payload": {"bot_id": bot_id}})
        return data
