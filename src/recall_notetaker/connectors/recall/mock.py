"""
Mock-коннектор Recall для dev/тестов.

Назначение:
- гонять планирование и фоновый опрос без реального Recall.ai
- каждый get_bot продвигает бота на один шаг по жизненному циклу
"""

from __future__ import annotations

import threading
from typing import Any

from recall_notetaker.common.errors import ErrCode, TransportError
from recall_notetaker.common.ids import new_mock_bot_id
from recall_notetaker.common.time import utc_now_iso
from recall_notetaker.connectors.base import BotConnector

MOCK_LIFECYCLE: tuple[str, ...] = (
    "scheduled",
    "joining_call",
    "in_call_recording",
    "call_ended",
    "done",
)

# Состояние общее для всех экземпляров: коннектор создаётся на каждый вызов
_BOTS: dict[str, dict[str, Any]] = {}
_LOCK = threading.Lock()


def reset_mock_bots() -> None:
    """Забыть всех mock-ботов (тесты, перезапуск dev-окружения)."""
    with _LOCK:
        _BOTS.clear()


def _shortcut(url: str) -> dict[str, Any]:
    return {"data": {"download_url": url}}


class MockRecallConnector(BotConnector):
    def create_bot(
        self,
        *,
        meeting_url: str,
        bot_name: str,
        join_at: str | None = None,
        recording_config: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        _ = recording_config
        bot_id = new_mock_bot_id()
        with _LOCK:
            _BOTS[bot_id] = {
                "step": 0,
                "meeting_url": meeting_url,
                "bot_name": bot_name,
                "join_at": join_at,
                "metadata": dict(metadata or {}),
                "changes": [{"status": MOCK_LIFECYCLE[0], "timestamp": utc_now_iso()}],
            }
        return {"id": bot_id, "status": MOCK_LIFECYCLE[0], "join_at": join_at}

    def get_bot(self, bot_id: str) -> dict[str, Any]:
        with _LOCK:
            bot = _BOTS.get(bot_id)
            if bot is None:
                raise TransportError(
                    '{"detail":"Not found."}',
                    details={"bot_id": bot_id, "status": 404},
                    code=ErrCode.CONNECTOR_PROVIDER_ERROR,
                )
            if bot["step"] < len(MOCK_LIFECYCLE) - 1:
                bot["step"] += 1
                bot["changes"].append(
                    {"status": MOCK_LIFECYCLE[bot["step"]], "timestamp": utc_now_iso()}
                )
            status = MOCK_LIFECYCLE[bot["step"]]
            changes = list(bot["changes"])
            join_at = bot["join_at"]

        recordings: list[dict[str, Any]] = []
        if status == "done":
            recordings.append(
                {
                    "media_shortcuts": {
                        "video_mixed": _shortcut(f"https://mock.recall.local/{bot_id}/video.mp4"),
                        "transcript": _shortcut(
                            f"https://mock.recall.local/{bot_id}/transcript.json"
                        ),
                    }
                }
            )
        # Как и настоящий API, последний статус есть только в status_changes
        return {
            "id": bot_id,
            "join_at": join_at,
            "status_changes": changes,
            "recordings": recordings,
        }
