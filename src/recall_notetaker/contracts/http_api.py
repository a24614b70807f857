"""
HTTP API контракты (Pydantic-модели).

Назначение:
- валидация входа на уровне FastAPI
- стабильные структуры для клиентов (ответы: модели хранилища)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from recall_notetaker.domain.enums import MeetingPlatform
from recall_notetaker.storage.models import (
    Automation,
    BotMedia,
    GoogleAccount,
    OAuthAccount,
    SocialPost,
    TranscriptSegment,
)

from .versions import HTTP_API_VERSION


# =============================================================================
# ПОЛЬЗОВАТЕЛИ
# =============================================================================
class ConnectedAccountsPatch(BaseModel):
    google: list[GoogleAccount] | None = None
    linkedin: OAuthAccount | None = None
    facebook: OAuthAccount | None = None


class AuthUserCreateRequest(BaseModel):
    email: str
    name: str
    picture: str | None = None
    connected_accounts: ConnectedAccountsPatch | None = None


class AuthUserUpdateRequest(BaseModel):
    email: str | None = None
    name: str | None = None
    picture: str | None = None
    connected_accounts: ConnectedAccountsPatch | None = None


# =============================================================================
# ВСТРЕЧИ
# =============================================================================
class MeetingCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    start_time: str
    end_time: str
    attendees: list[str] = Field(default_factory=list)
    platform: MeetingPlatform
    meeting_link: str | None = None
    notes: str | None = None
    account_email: str
    notetaker_enabled: bool | None = None
    transcript: list[TranscriptSegment] | None = None
    follow_up_email: str | None = None
    recall_bot_id: str | None = None


class MeetingUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    start_time: str | None = None
    end_time: str | None = None
    attendees: list[str] | None = None
    platform: MeetingPlatform | None = None
    meeting_link: str | None = None
    notes: str | None = None
    account_email: str | None = None
    notetaker_enabled: bool | None = None
    transcript: list[TranscriptSegment] | None = None
    follow_up_email: str | None = None
    recall_bot_id: str | None = None
    social_posts: list[SocialPost] | None = None


# =============================================================================
# БОТЫ RECALL
# =============================================================================
class RecallBotCreateRequest(BaseModel):
    event_id: str
    bot_id: str
    meeting_url: str
    meeting_start_time: str
    join_at: str | None = None
    status: str | None = None
    account_email: str
    title: str
    media: BotMedia | None = None
    metadata: dict[str, Any] | None = None


class RecallBotUpdateRequest(BaseModel):
    # event_id / bot_id не меняются после создания
    meeting_url: str | None = None
    meeting_start_time: str | None = None
    join_at: str | None = None
    status: str | None = None
    account_email: str | None = None
    title: str | None = None
    media: BotMedia | None = None
    metadata: dict[str, Any] | None = None


class RecallBotScheduleRequest(BaseModel):
    event_id: str
    meeting_url: str
    meeting_start_time: str
    account_email: str
    title: str
    join_at: str | None = None

    # Смещение входа бота: явно, из настроек пользователя или дефолт сервера
    join_offset_minutes: int | None = None
    user_id: str | None = None


# =============================================================================
# НАСТРОЙКИ
# =============================================================================
class SettingsCreateRequest(BaseModel):
    user_id: str
    bot_join_minutes: int | None = Field(default=None, ge=0, le=15)
    automations: list[Automation] | None = None


class SettingsUpdateRequest(BaseModel):
    bot_join_minutes: int | None = Field(default=None, ge=0, le=15)
    automations: list[Automation] | None = None


# =============================================================================
# ОТВЕТЫ
# =============================================================================
class HealthResponse(BaseModel):
    api_version: str = Field(default=HTTP_API_VERSION)
    status: str = "ok"
    timestamp: str
