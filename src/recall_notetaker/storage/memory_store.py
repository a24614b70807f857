"""
In-memory хранилище записей (пользователи, встречи, боты, настройки).

Правила:
- Никакой бизнес-логики, только CRUD
- id и временные метки назначает хранилище
- данные живут до перезапуска процесса

Конкурентность:
- общий RLock на доступ к коллекциям
- отдельный RLock на каждую существующую запись бота: CRUD-обновление/удаление и
  read-modify-write фонового опроса выполняются под ним, поэтому
  изменения не теряются при пересечении
- лок записи создаётся вместе с записью и удаляется вместе с ней; для
  неизвестных id используется общий лок
- планирование бота для события резервирует event_id на время вызова Recall
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from recall_notetaker.common.errors import ConflictError
from recall_notetaker.common.ids import new_uuid
from recall_notetaker.common.time import utc_now_iso
from recall_notetaker.domain.automations import build_default_automations

from .models import AppSettings, AuthUser, BotRecord, Meeting, SocialPost

# Поля бота, которые не меняются после создания
_BOT_IMMUTABLE_FIELDS = frozenset({"id", "bot_id", "event_id", "created_at"})


def _present(changes: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in changes.items() if v is not None}


class MemoryStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._auth_users: dict[str, AuthUser] = {}
        self._meetings: dict[str, Meeting] = {}
        self._bot_records: dict[str, BotRecord] = {}
        self._settings: dict[str, AppSettings] = {}
        self._settings_by_user: dict[str, str] = {}
        self._bot_locks: dict[str, threading.RLock] = {}
        self._events_scheduling: set[str] = set()

    # =========================================================================
    # AUTH USERS
    # =========================================================================
    def list_auth_users(self) -> list[AuthUser]:
        with self._lock:
            return list(self._auth_users.values())

    def get_auth_user(self, user_id: str) -> AuthUser | None:
        with self._lock:
            return self._auth_users.get(user_id)

    def create_auth_user(self, payload: dict[str, Any]) -> AuthUser:
        now = utc_now_iso()
        data = _present(payload)
        if isinstance(data.get("connected_accounts"), dict):
            data["connected_accounts"] = _present(data["connected_accounts"])
        user = AuthUser.model_validate(
            {
                **data,
                "id": new_uuid(),
                "created_at": now,
                "updated_at": now,
            }
        )
        with self._lock:
            self._auth_users[user.id] = user
        return user

    def update_auth_user(self, user_id: str, changes: dict[str, Any]) -> AuthUser | None:
        with self._lock:
            existing = self._auth_users.get(user_id)
            if existing is None:
                return None
            data = existing.model_dump()
            patch = _present(changes)
            patch.pop("id", None)
            accounts_patch = patch.pop("connected_accounts", None)
            if accounts_patch:
                # Частичное обновление аккаунтов: по каждому провайдеру отдельно
                data["connected_accounts"] = {
                    **data["connected_accounts"],
                    **_present(accounts_patch),
                }
            data.update(patch)
            data["updated_at"] = utc_now_iso()
            updated = AuthUser.model_validate(data)
            self._auth_users[user_id] = updated
            return updated

    def delete_auth_user(self, user_id: str) -> bool:
        with self._lock:
            return self._auth_users.pop(user_id, None) is not None

    # =========================================================================
    # MEETINGS
    # =========================================================================
    def list_meetings(self) -> list[Meeting]:
        with self._lock:
            return list(self._meetings.values())

    def get_meeting(self, meeting_id: str) -> Meeting | None:
        with self._lock:
            return self._meetings.get(meeting_id)

    def create_meeting(self, payload: dict[str, Any], *, meeting_id: str | None = None) -> Meeting:
        meeting = Meeting.model_validate({**_present(payload), "id": meeting_id or new_uuid()})
        with self._lock:
            self._meetings[meeting.id] = meeting
        return meeting

    def update_meeting(self, meeting_id: str, changes: dict[str, Any]) -> Meeting | None:
        with self._lock:
            existing = self._meetings.get(meeting_id)
            if existing is None:
                return None
            patch = _present(changes)
            patch.pop("id", None)
            updated = Meeting.model_validate({**existing.model_dump(), **patch})
            self._meetings[meeting_id] = updated
            return updated

    def append_social_post(
        self,
        meeting_id: str,
        post: SocialPost,
        *,
        only_if_empty: bool = False,
    ) -> Meeting | None:
        """
        Добавить пост к встрече.

        only_if_empty=True: добавляем, только если постов ещё нет (проверка и
        запись под одной блокировкой). None — встречи нет или пост не добавлен.
        """
        with self._lock:
            existing = self._meetings.get(meeting_id)
            if existing is None:
                return None
            if only_if_empty and existing.social_posts:
                return None
            updated = existing.model_copy(
                update={"social_posts": [*existing.social_posts, post]}
            )
            self._meetings[meeting_id] = updated
            return updated

    def delete_meeting(self, meeting_id: str) -> bool:
        with self._lock:
            return self._meetings.pop(meeting_id, None) is not None

    # =========================================================================
    # RECALL BOTS
    # =========================================================================
    @contextmanager
    def bot_record_lock(self, bot_id: str) -> Iterator[None]:
        """
        Критическая секция на одну запись бота (read-modify-write).

        Лок есть только у существующей записи. Для неизвестного id секция
        держит общий лок: новых локов по чужим id не заводим.
        """
        with self._lock:
            lock = self._bot_locks.get(bot_id)
        if lock is None:
            with self._lock:
                yield
            return
        with lock:
            yield

    @contextmanager
    def event_scheduling_slot(self, event_id: str) -> Iterator[None]:
        """
        Резерв event_id на время планирования бота.

        ConflictError: для события уже есть запись бота или параллельное
        планирование. Резерв снимается при выходе из блока.
        """
        with self._lock:
            existing = self.find_bot_record_by_event(event_id)
            if existing is not None:
                raise ConflictError(
                    "Recall bot already scheduled for this event.",
                    details={"event_id": event_id, "bot_id": existing.bot_id},
                )
            if event_id in self._events_scheduling:
                raise ConflictError(
                    "Recall bot scheduling already in progress for this event.",
                    details={"event_id": event_id},
                )
            self._events_scheduling.add(event_id)
        try:
            yield
        finally:
            with self._lock:
                self._events_scheduling.discard(event_id)

    def list_bot_records(self) -> list[BotRecord]:
        with self._lock:
            return list(self._bot_records.values())

    def get_bot_record(self, bot_id: str) -> BotRecord | None:
        with self._lock:
            return self._bot_records.get(bot_id)

    def find_bot_record_by_event(self, event_id: str) -> BotRecord | None:
        with self._lock:
            for record in self._bot_records.values():
                if record.event_id == event_id:
                    return record
        return None

    def create_bot_record(self, payload: dict[str, Any]) -> BotRecord:
        """
        Запись бота с id == bot_id. Повторный bot_id -> ConflictError
        (существующая запись не перезаписывается).
        """
        now = utc_now_iso()
        bot_id = (payload.get("bot_id") or "").strip() or new_uuid()
        record = BotRecord.model_validate(
            {
                **_present(payload),
                "id": bot_id,
                "bot_id": bot_id,
                "created_at": now,
                "updated_at": now,
            }
        )
        with self._lock:
            if bot_id in self._bot_records:
                raise ConflictError("Recall bot already exists.", details={"bot_id": bot_id})
            self._bot_records[bot_id] = record
            self._bot_locks[bot_id] = threading.RLock()
        return record

    def update_bot_record(self, bot_id: str, changes: dict[str, Any]) -> BotRecord | None:
        with self.bot_record_lock(bot_id), self._lock:
            existing = self._bot_records.get(bot_id)
            if existing is None:
                return None
            patch = {k: v for k, v in _present(changes).items() if k not in _BOT_IMMUTABLE_FIELDS}
            patch["updated_at"] = utc_now_iso()
            updated = BotRecord.model_validate({**existing.model_dump(), **patch})
            self._bot_records[bot_id] = updated
            return updated

    def delete_bot_record(self, bot_id: str) -> bool:
        with self.bot_record_lock(bot_id), self._lock:
            self._bot_locks.pop(bot_id, None)
            return self._bot_records.pop(bot_id, None) is not None

    # =========================================================================
    # SETTINGS
    # =========================================================================
    def list_settings(self) -> list[AppSettings]:
        with self._lock:
            return list(self._settings.values())

    def get_settings_by_id(self, settings_id: str) -> AppSettings | None:
        with self._lock:
            return self._settings.get(settings_id)

    def get_settings_by_user(self, user_id: str) -> AppSettings | None:
        with self._lock:
            settings_id = self._settings_by_user.get(user_id)
            return self._settings.get(settings_id) if settings_id else None

    def create_settings(
        self,
        *,
        user_id: str,
        bot_join_minutes: int | None = None,
        automations: list[dict[str, Any]] | None = None,
    ) -> AppSettings:
        """
        Идемпотентно по user_id: если настройки уже есть — вернёт существующие.
        """
        with self._lock:
            existing = self.get_settings_by_user(user_id)
            if existing is not None:
                return existing

            now = utc_now_iso()
            record = AppSettings.model_validate(
                {
                    "id": new_uuid(),
                    "user_id": user_id,
                    "bot_join_minutes": 2 if bot_join_minutes is None else bot_join_minutes,
                    "automations": automations or build_default_automations(),
                    "created_at": now,
                    "updated_at": now,
                }
            )
            self._settings[record.id] = record
            self._settings_by_user[user_id] = record.id
            return record

    def update_settings(self, settings_id: str, changes: dict[str, Any]) -> AppSettings | None:
        with self._lock:
            existing = self._settings.get(settings_id)
            if existing is None:
                return None
            patch = _present(changes)
            patch.pop("id", None)
            patch.pop("user_id", None)
            patch["updated_at"] = utc_now_iso()
            updated = AppSettings.model_validate({**existing.model_dump(), **patch})
            self._settings[settings_id] = updated
            return updated

    def delete_settings(self, settings_id: str) -> bool:
        with self._lock:
            record = self._settings.pop(settings_id, None)
            if record is None:
                return False
            self._settings_by_user.pop(record.user_id, None)
            return True


_STORE = MemoryStore()


def get_store() -> MemoryStore:
    return _STORE


def reset_store() -> MemoryStore:
    """Новый пустой store (тесты и повторная инициализация приложения)."""
    global _STORE

    _STORE = MemoryStore()
    return _STORE
