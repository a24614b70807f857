"""
Service layer для ботов Recall.

Содержит:
- выбор коннектора (real/mock) и проверку конфигурации
- планирование бота (schedule_bot)
- разбор ответа Recall: статус и ссылки на медиа
- сверку одной записи с Recall и цикл опроса всех нетерминальных записей
- генерацию поста при первом переходе в done
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import urlparse

from recall_notetaker.common.config import get_settings
from recall_notetaker.common.errors import (
    AppError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    SchedulingError,
    ValidationError,
)
from recall_notetaker.common.ids import new_uuid
from recall_notetaker.common.logging import get_project_logger
from recall_notetaker.common.metrics import record_schedule_result
from recall_notetaker.common.time import parse_iso, to_iso_z, utc_now, utc_now_iso
from recall_notetaker.connectors.base import BotConnector
from recall_notetaker.connectors.recall.adapter import RecallConnector
from recall_notetaker.connectors.recall.mock import MockRecallConnector
from recall_notetaker.contracts.http_api import RecallBotScheduleRequest
from recall_notetaker.domain.bot_status import (
    STATUS_SCHEDULED,
    is_completion_edge,
    is_pending,
)
from recall_notetaker.domain.enums import SocialPlatform
from recall_notetaker.services.social_post_service import (
    generate_social_post,
    is_generator_configured,
)
from recall_notetaker.storage.memory_store import MemoryStore, get_store
from recall_notetaker.storage.models import BotMedia, BotRecord, SocialPost

log = get_project_logger()

MAX_JOIN_OFFSET_MINUTES = 15

RECORDING_CONFIG: dict[str, Any] = {
    "transcript": {"provider": {"meeting_captions": {}}},
    "video_mixed_mp4": {},
}

# Порядок важен: первый найденный download_url побеждает
VIDEO_SHORTCUT_CANDIDATES: tuple[str, ...] = ("video_mixed", "video_mixed_mp4")
TRANSCRIPT_SHORTCUT_CANDIDATES: tuple[str, ...] = ("transcript",)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass
class BotReconcileOutcome:
    bot_id: str
    previous_status: str | None
    status: str | None
    completed: bool
    post_created: bool


@dataclass
class RecallPollResult:
    scanned: int
    pending: int
    updated: int
    completed: int
    posts_created: int
    failed: int
    updated_at: str


# =============================================================================
# КОННЕКТОР
# =============================================================================
def is_recall_configured() -> bool:
    s = get_settings()
    provider = (s.recall_provider or "recall").strip().lower()
    if provider == "recall_mock":
        return True
    return bool((s.recall_api_key or "").strip())


def _resolve_connector() -> tuple[str, BotConnector]:
    provider = (get_settings().recall_provider or "recall").strip().lower()
    if provider == "recall_mock":
        return provider, MockRecallConnector()
    if provider == "recall":
        return provider, RecallConnector()
    raise ConfigurationError(
        f"Неизвестный RECALL_PROVIDER: {provider}",
        details={"allowed": "recall,recall_mock"},
    )


# =============================================================================
# РАЗБОР ОТВЕТА RECALL
# =============================================================================
def extract_status(payload: dict[str, Any], fallback: str | None = None) -> str | None:
    """
    status -> последний элемент status_changes -> прежний локальный статус.
    """
    status = payload.get("status")
    if isinstance(status, str) and status:
        return status

    changes = payload.get("status_changes")
    if not isinstance(changes, list) or not changes:
        return fallback
    last = changes[-1]
    if isinstance(last, dict) and isinstance(last.get("status"), str) and last["status"]:
        return last["status"]
    return fallback


def _download_url(shortcuts: dict[str, Any], candidates: tuple[str, ...]) -> str | None:
    for name in candidates:
        shortcut = shortcuts.get(name)
        if not isinstance(shortcut, dict):
            continue
        data = shortcut.get("data")
        if not isinstance(data, dict):
            continue
        url = data.get("download_url")
        if isinstance(url, str) and url:
            return url
    return None


def extract_media(payload: dict[str, Any]) -> BotMedia | None:
    """
    Ссылки из media_shortcuts первой записи. None, если медиа пока нет.
    """
    recordings = payload.get("recordings")
    if not isinstance(recordings, list) or not recordings:
        return None
    first = recordings[0]
    if not isinstance(first, dict):
        return None
    shortcuts = first.get("media_shortcuts")
    if not isinstance(shortcuts, dict):
        return None

    video_url = _download_url(shortcuts, VIDEO_SHORTCUT_CANDIDATES)
    transcript_url = _download_url(shortcuts, TRANSCRIPT_SHORTCUT_CANDIDATES)
    if not video_url and not transcript_url:
        return None
    return BotMedia(video_url=video_url, transcript_url=transcript_url)


def merge_media(existing: BotMedia | None, fresh: BotMedia | None) -> BotMedia | None:
    """
    Новых медиа нет -> старые без изменений; иначе объединение по полям
    (пустое новое значение не затирает старое).
    """
    if fresh is None:
        return existing
    return BotMedia(
        video_url=fresh.video_url or (existing.video_url if existing else None),
        transcript_url=fresh.transcript_url or (existing.transcript_url if existing else None),
    )


# =============================================================================
# ПЛАНИРОВАНИЕ
# =============================================================================
def _validate_schedule_request(req: RecallBotScheduleRequest) -> datetime:
    problems: dict[str, str] = {}
    for field in ("event_id", "title"):
        if not (getattr(req, field) or "").strip():
            problems[field] = "required"

    parsed_url = urlparse((req.meeting_url or "").strip())
    if parsed_url.scheme not in {"http", "https"} or not parsed_url.netloc:
        problems["meeting_url"] = "must be an http(s) URL"

    if not _EMAIL_RE.match((req.account_email or "").strip()):
        problems["account_email"] = "invalid email"

    start: datetime | None = None
    try:
        start = parse_iso(req.meeting_start_time)
    except (TypeError, ValueError):
        problems["meeting_start_time"] = "must be an ISO-8601 datetime"

    if req.join_at:
        try:
            parse_iso(req.join_at)
        except (TypeError, ValueError):
            problems["join_at"] = "must be an ISO-8601 datetime"

    if problems or start is None:
        raise ValidationError("Некорректный запрос на планирование бота", details=problems)
    return start


def resolve_join_offset_minutes(
    req: RecallBotScheduleRequest,
    *,
    store: MemoryStore,
    join_offset_minutes: int | None = None,
) -> int:
    """
    Приоритет: аргумент -> запрос -> настройки пользователя -> BOT_JOIN_MINUTES.
    """
    offset = join_offset_minutes
    if offset is None:
        offset = req.join_offset_minutes
    if offset is None and req.user_id:
        user_settings = store.get_settings_by_user(req.user_id)
        if user_settings is not None:
            offset = user_settings.bot_join_minutes
    if offset is None:
        offset = get_settings().bot_join_minutes

    if not 0 <= int(offset) <= MAX_JOIN_OFFSET_MINUTES:
        raise ValidationError(
            "Смещение входа бота вне диапазона",
            details={"join_offset_minutes": offset, "max": MAX_JOIN_OFFSET_MINUTES},
        )
    return int(offset)


def compute_join_at(
    meeting_start: datetime,
    offset_minutes: int,
    *,
    explicit_join_at: str | None = None,
    now: datetime | None = None,
) -> str | None:
    """
    Момент входа бота (start - offset, либо явный join_at).
    В прошлом -> None: подсказку не отправляем, Recall подключит бота сразу.
    """
    if explicit_join_at:
        candidate = parse_iso(explicit_join_at)
    else:
        candidate = meeting_start - timedelta(minutes=offset_minutes)
    if candidate <= (now or utc_now()):
        return None
    return to_iso_z(candidate)


def bot_name_for(account_email: str) -> str:
    return f"Recall Bot - {account_email}"


def schedule_bot(
    req: RecallBotScheduleRequest,
    *,
    join_offset_minutes: int | None = None,
    store: MemoryStore | None = None,
) -> BotRecord:
    """
    Запланировать бота записи для встречи.

    Не идемпотентно по event_id: проверку "бот уже назначен" делает вызывающая
    сторона (HTTP-роут резервирует event_id через event_scheduling_slot).
    """
    store = store or get_store()
    if not is_recall_configured():
        record_schedule_result(result="not_configured")
        raise ConfigurationError("Recall.ai is not configured on the server.")

    try:
        meeting_start = _validate_schedule_request(req)
        offset = resolve_join_offset_minutes(
            req, store=store, join_offset_minutes=join_offset_minutes
        )
    except ValidationError:
        record_schedule_result(result="invalid")
        raise

    join_at = compute_join_at(meeting_start, offset, explicit_join_at=req.join_at)
    _provider, connector = _resolve_connector()

    try:
        remote = connector.create_bot(
            meeting_url=req.meeting_url.strip(),
            bot_name=bot_name_for(req.account_email.strip()),
            join_at=join_at,
            recording_config=RECORDING_CONFIG,
            metadata={"event_id": req.event_id},
        )
    except AppError as e:
        record_schedule_result(result="failed")
        log.warning(
            "recall_schedule_failed",
            extra={"payload": {"event_id": req.event_id, "error": e.message[:300]}},
        )
        raise SchedulingError(e.message, details=e.details) from e

    bot_id = str(remote.get("id") or "").strip()
    if not bot_id:
        record_schedule_result(result="failed")
        raise SchedulingError(
            "Recall.ai не вернул идентификатор бота",
            details={"event_id": req.event_id},
        )

    try:
        record = store.create_bot_record(
            {
                "bot_id": bot_id,
                "event_id": req.event_id,
                "meeting_url": req.meeting_url.strip(),
                "meeting_start_time": req.meeting_start_time,
                "join_at": remote.get("join_at") or join_at,
                "status": remote.get("status") or STATUS_SCHEDULED,
                "account_email": req.account_email.strip(),
                "title": req.title,
            }
        )
    except ConflictError as e:
        # Recall вернул id уже известного бота: существующую запись не трогаем
        record_schedule_result(result="failed")
        log.warning(
            "recall_schedule_duplicate_bot",
            extra={"payload": {"bot_id": bot_id, "event_id": req.event_id}},
        )
        raise SchedulingError(e.message, details=e.details) from e
    if store.get_meeting(req.event_id) is not None:
        store.update_meeting(req.event_id, {"recall_bot_id": bot_id})

    record_schedule_result(result="ok")
    log.info(
        "recall_bot_scheduled",
        extra={
            "payload": {
                "bot_id": bot_id,
                "event_id": req.event_id,
                "join_at": record.join_at,
                "offset_minutes": offset,
            }
        },
    )
    return record


# =============================================================================
# СВЕРКА С RECALL
# =============================================================================
def _maybe_create_social_post(record: BotRecord, *, store: MemoryStore) -> bool:
    meeting = store.get_meeting(record.event_id)
    if meeting is None:
        log.info(
            "recall_post_skipped",
            extra={
                "payload": {
                    "bot_id": record.bot_id,
                    "event_id": record.event_id,
                    "reason": "meeting_not_found",
                }
            },
        )
        return False
    if meeting.social_posts:
        log.info(
            "recall_post_skipped",
            extra={"payload": {"bot_id": record.bot_id, "reason": "already_has_posts"}},
        )
        return False

    content = generate_social_post(meeting_title=meeting.title, transcript=meeting.transcript)
    if not content:
        log.info(
            "recall_post_skipped",
            extra={"payload": {"bot_id": record.bot_id, "reason": "empty_generation"}},
        )
        return False

    post = SocialPost(
        id=new_uuid(),
        platform=SocialPlatform.linkedin,
        content=content,
        created_at=utc_now_iso(),
        posted=False,
    )
    # Пост мог появиться, пока шла генерация
    appended = store.append_social_post(meeting.id, post, only_if_empty=True)
    if appended is None:
        log.info(
            "recall_post_skipped",
            extra={"payload": {"bot_id": record.bot_id, "reason": "lost_race"}},
        )
        return False

    log.info(
        "recall_post_created",
        extra={"payload": {"bot_id": record.bot_id, "meeting_id": meeting.id, "post_id": post.id}},
    )
    return True


def reconcile_bot_record(
    bot_id: str,
    *,
    store: MemoryStore | None = None,
    connector: BotConnector | None = None,
    generator_enabled: bool | None = None,
) -> BotReconcileOutcome:
    """
    Одна сверка записи с Recall.

    Удалённый запрос выполняется вне блокировки; чтение текущего статуса,
    вычисление нового и запись под блокировкой записи, поэтому "предыдущий"
    статус для перехода в done всегда актуален.
    """
    store = store or get_store()
    if connector is None:
        _provider, connector = _resolve_connector()

    remote = connector.get_bot(bot_id)
    if not isinstance(remote, dict):
        remote = {}

    with store.bot_record_lock(bot_id):
        current = store.get_bot_record(bot_id)
        if current is None:
            raise NotFoundError("Recall bot not found.", details={"bot_id": bot_id})

        previous_status = current.status
        status = extract_status(remote, previous_status)
        media = merge_media(current.media, extract_media(remote))
        updated = store.update_bot_record(bot_id, {"status": status, "media": media})
        if updated is None:
            raise NotFoundError("Recall bot not found.", details={"bot_id": bot_id})

    completed = is_completion_edge(previous_status, status)
    if generator_enabled is None:
        generator_enabled = is_generator_configured()

    post_created = False
    if completed:
        log.info(
            "recall_bot_completed",
            extra={"payload": {"bot_id": bot_id, "event_id": updated.event_id}},
        )
        if generator_enabled:
            post_created = _maybe_create_social_post(updated, store=store)

    if status != previous_status:
        log.info(
            "recall_bot_status_changed",
            extra={"payload": {"bot_id": bot_id, "from": previous_status, "to": status}},
        )

    return BotReconcileOutcome(
        bot_id=bot_id,
        previous_status=previous_status,
        status=status,
        completed=completed,
        post_created=post_created,
    )


def poll_recall_bots(*, store: MemoryStore | None = None) -> RecallPollResult:
    """
    Один цикл опроса: все нетерминальные записи, каждая независимо.
    Ошибка по одной записи логируется и не прерывает цикл.
    """
    store = store or get_store()
    _provider, connector = _resolve_connector()
    generator_enabled = is_generator_configured()

    records = store.list_bot_records()
    pending = [r for r in records if is_pending(r.status)]

    updated = 0
    completed = 0
    posts_created = 0
    failed = 0

    for record in pending:
        try:
            outcome = reconcile_bot_record(
                record.bot_id,
                store=store,
                connector=connector,
                generator_enabled=generator_enabled,
            )
        except Exception as e:
            failed += 1
            log.warning(
                "recall_bot_poll_failed",
                extra={"payload": {"bot_id": record.bot_id, "error": str(e)[:300]}},
            )
            continue

        updated += 1
        if outcome.completed:
            completed += 1
        if outcome.post_created:
            posts_created += 1

    return RecallPollResult(
        scanned=len(records),
        pending=len(pending),
        updated=updated,
        completed=completed,
        posts_created=posts_created,
        failed=failed,
        updated_at=utc_now_iso(),
    )
