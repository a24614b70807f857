"""
Модели данных in-memory хранилища (Pydantic).

Записи неизменяемы "по соглашению": хранилище не мутирует их, а
заменяет запись целиком при обновлении.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from recall_notetaker.domain.enums import AutomationType, MeetingPlatform, SocialPlatform


# =============================================================================
# ПОЛЬЗОВАТЕЛИ
# =============================================================================
class OAuthAccount(BaseModel):
    id: str
    name: str
    connected_at: str
    access_token: str | None = None
    expires_at: int | None = None


class GoogleAccount(BaseModel):
    id: str
    email: str
    name: str
    picture: str | None = None
    access_token: str | None = None
    expires_at: int | None = None
    granted_scopes: list[str] | None = None


class ConnectedAccounts(BaseModel):
    google: list[GoogleAccount] = Field(default_factory=list)
    linkedin: OAuthAccount | None = None
    facebook: OAuthAccount | None = None


class AuthUser(BaseModel):
    id: str
    email: str
    name: str
    picture: str | None = None
    connected_accounts: ConnectedAccounts = Field(default_factory=ConnectedAccounts)
    created_at: str
    updated_at: str


# =============================================================================
# ВСТРЕЧИ
# =============================================================================
class TranscriptSegment(BaseModel):
    speaker: str
    timestamp: str
    text: str


class SocialPost(BaseModel):
    id: str
    platform: SocialPlatform
    content: str
    created_at: str
    posted: bool = False
    posted_at: str | None = None


class Meeting(BaseModel):
    id: str
    title: str
    start_time: str
    end_time: str
    attendees: list[str] = Field(default_factory=list)
    platform: MeetingPlatform
    meeting_link: str | None = None
    notes: str | None = None
    account_email: str
    notetaker_enabled: bool | None = None
    recall_bot_id: str | None = None

    transcript: list[TranscriptSegment] = Field(default_factory=list)
    follow_up_email: str | None = None
    social_posts: list[SocialPost] = Field(default_factory=list)


# =============================================================================
# БОТЫ RECALL
# =============================================================================
class BotMedia(BaseModel):
    video_url: str | None = None
    transcript_url: str | None = None


class BotRecord(BaseModel):
    """
    Локальная запись о боте записи встречи.
    id == bot_id всегда (ключ — идентификатор бота во внешней системе).
    """

    id: str
    bot_id: str
    event_id: str
    meeting_url: str
    meeting_start_time: str
    join_at: str | None = None
    status: str | None = None
    account_email: str
    title: str
    media: BotMedia | None = None
    metadata: dict[str, Any] | None = None
    created_at: str
    updated_at: str


# =============================================================================
# НАСТРОЙКИ
# =============================================================================
class Automation(BaseModel):
    id: str
    name: str
    type: AutomationType = AutomationType.generate_post
    platform: SocialPlatform
    description: str
    example: str


class AppSettings(BaseModel):
    id: str
    user_id: str
    bot_join_minutes: int = Field(default=2, ge=0, le=15)
    automations: list[Automation] = Field(default_factory=list)
    created_at: str
    updated_at: str
