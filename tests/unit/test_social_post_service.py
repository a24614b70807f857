from __future__ import annotations

import pytest

from recall_notetaker.common.config import get_settings
from recall_notetaker.common.errors import ErrCode, ProviderError
from recall_notetaker.llm.base import LLMProvider
from recall_notetaker.llm.orchestrator import LLMOrchestrator
from recall_notetaker.services import social_post_service
from recall_notetaker.storage.models import TranscriptSegment


@pytest.fixture()
def llm_settings():
    s = get_settings()
    keys = [
        "llm_enabled",
        "llm_provider",
        "openai_api_key",
        "llm_retries",
        "llm_retry_backoff_ms",
    ]
    snapshot = {k: getattr(s, k) for k in keys}
    try:
        s.llm_enabled = True
        s.llm_retry_backoff_ms = 0
        yield s
    finally:
        for k, v in snapshot.items():
            setattr(s, k, v)


def _segments(n: int) -> list[TranscriptSegment]:
    return [
        TranscriptSegment(speaker=f"S{i}", timestamp=f"00:00:{i:02d}", text=f"line {i}")
        for i in range(n)
    ]


class _FlakyProvider(LLMProvider):
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    def complete_text(self, *, system: str, user: str) -> str:
        _ = system, user
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError("upstream 503")
        return "ok"


def test_excerpt_takes_first_segments() -> None:
    excerpt = social_post_service.build_transcript_excerpt(_segments(10))

    lines = excerpt.split("\n")
    assert len(lines) == social_post_service.EXCERPT_SEGMENTS
    assert lines[0] == "S0: line 0"
    assert lines[-1] == "S5: line 5"


def test_excerpt_placeholder_for_empty_transcript() -> None:
    assert social_post_service.build_transcript_excerpt([]) == "No transcript available"


def test_prompt_contains_title_and_excerpt() -> None:
    prompt = social_post_service.build_prompt(
        meeting_title="Quarterly review", transcript_excerpt="Alex: hi"
    )
    assert "Meeting title: Quarterly review" in prompt
    assert "Alex: hi" in prompt
    assert "max 120 words" in prompt


def test_generator_configuration(llm_settings) -> None:
    llm_settings.llm_provider = "openai"
    llm_settings.openai_api_key = None
    assert social_post_service.is_generator_configured() is False

    llm_settings.openai_api_key = "sk-test"
    assert social_post_service.is_generator_configured() is True

    llm_settings.llm_enabled = False
    assert social_post_service.is_generator_configured() is False


def test_generate_with_mock_provider(llm_settings) -> None:
    llm_settings.llm_provider = "mock"

    text = social_post_service.generate_social_post(
        meeting_title="Quarterly review", transcript=_segments(2)
    )

    assert text is not None
    assert "Quarterly review" in text


def test_generate_returns_none_when_not_configured(llm_settings) -> None:
    llm_settings.llm_provider = "openai"
    llm_settings.openai_api_key = ""

    assert (
        social_post_service.generate_social_post(meeting_title="x", transcript=[]) is None
    )


def test_generate_provider_failure_is_swallowed(llm_settings, monkeypatch) -> None:
    llm_settings.llm_provider = "mock"
    llm_settings.llm_retries = 0
    provider = _FlakyProvider(failures=5)
    monkeypatch.setattr(social_post_service, "_resolve_provider", lambda: provider)

    assert (
        social_post_service.generate_social_post(meeting_title="x", transcript=[]) is None
    )
    assert provider.calls == 1


def test_orchestrator_retries_then_succeeds(llm_settings) -> None:
    llm_settings.llm_retries = 2
    provider = _FlakyProvider(failures=2)

    result = LLMOrchestrator(provider).complete_text(system="s", user="u")

    assert result.text == "ok"
    assert provider.calls == 3


def test_orchestrator_raises_provider_error_after_retries(llm_settings) -> None:
    llm_settings.llm_retries = 1
    provider = _FlakyProvider(failures=10)

    with pytest.raises(ProviderError) as ei:
        LLMOrchestrator(provider).complete_text(system="s", user="u")

    assert ei.value.code == ErrCode.LLM_PROVIDER_ERROR
    assert provider.calls == 2
