"""
Генерация черновика поста для соцсетей по транскрипту встречи.

Контракт:
- generate_social_post(title, transcript) -> str | None
- не настроено (LLM_ENABLED=false или нет ключа) -> None, без ошибки
- ошибки провайдера логируются и превращаются в None (best-effort)
"""

from __future__ import annotations

from collections.abc import Sequence

from recall_notetaker.common.config import get_settings
from recall_notetaker.common.errors import AppError
from recall_notetaker.common.logging import get_llm_logger
from recall_notetaker.llm.base import LLMProvider
from recall_notetaker.llm.mock import MockLLMProvider
from recall_notetaker.llm.openai_compat import OpenAICompatProvider
from recall_notetaker.llm.orchestrator import LLMOrchestrator
from recall_notetaker.storage.models import TranscriptSegment

log = get_llm_logger()

EXCERPT_SEGMENTS = 6
NO_TRANSCRIPT_PLACEHOLDER = "No transcript available"

SYSTEM_PROMPT = "You write concise professional social media posts."

USER_PROMPT_TEMPLATE = """You are an assistant generating a short LinkedIn update summarizing a meeting.
Meeting title: {title}
Transcript excerpts:
{excerpt}

Write a concise, professional post (max 120 words) highlighting value delivered."""


def is_generator_configured() -> bool:
    s = get_settings()
    if not s.llm_enabled:
        return False
    provider = (s.llm_provider or "openai").strip().lower()
    if provider == "mock":
        return True
    return bool((s.openai_api_key or "").strip())


def _resolve_provider() -> LLMProvider:
    provider = (get_settings().llm_provider or "openai").strip().lower()
    if provider == "mock":
        return MockLLMProvider()
    return OpenAICompatProvider()


def build_transcript_excerpt(transcript: Sequence[TranscriptSegment]) -> str:
    """
    Первые EXCERPT_SEGMENTS сегментов строками "speaker: text".
    Пустой транскрипт -> заглушка.
    """
    lines = [f"{seg.speaker}: {seg.text}" for seg in list(transcript)[:EXCERPT_SEGMENTS]]
    return "\n".join(lines) or NO_TRANSCRIPT_PLACEHOLDER


def build_prompt(*, meeting_title: str, transcript_excerpt: str) -> str:
    return USER_PROMPT_TEMPLATE.format(title=meeting_title, excerpt=transcript_excerpt)


def generate_social_post(
    *,
    meeting_title: str,
    transcript: Sequence[TranscriptSegment],
) -> str | None:
    if not is_generator_configured():
        return None

    prompt = build_prompt(
        meeting_title=meeting_title,
        transcript_excerpt=build_transcript_excerpt(transcript),
    )
    try:
        result = LLMOrchestrator(_resolve_provider()).complete_text(
            system=SYSTEM_PROMPT, user=prompt
        )
    except AppError as e:
        log.error(
            "social_post_generation_failed",
            extra={"payload": {"code": e.code, "message": e.message, "details": e.details}},
        )
        return None

    text = (result.text or "").strip()
    return text or None
