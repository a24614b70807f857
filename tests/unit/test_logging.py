from __future__ import annotations

import json
import logging

from recall_notetaker.common.logging import JsonFormatter, TextFormatter


def _record(payload: dict | None = None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="recall-notetaker.poller",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="recall_bot_poll_failed",
        args=(),
        exc_info=None,
    )
    if payload is not None:
        record.payload = payload
    return record


def test_json_formatter_keeps_event_and_payload() -> None:
    line = JsonFormatter(service="notetaker-test").format(
        _record({"bot_id": "bot-1", "error": "timeout"})
    )

    entry = json.loads(line)
    assert entry["event"] == "recall_bot_poll_failed"
    assert entry["service"] == "notetaker-test"
    assert entry["logger"] == "recall-notetaker.poller"
    assert entry["payload"] == {"bot_id": "bot-1", "error": "timeout"}


def test_text_formatter_appends_payload() -> None:
    line = TextFormatter().format(_record({"bot_id": "bot-1"}))

    assert "recall_bot_poll_failed" in line
    assert line.endswith("bot_id=bot-1")
