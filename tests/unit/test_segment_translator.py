"""Unit tests for segment-level translate, back-translate, and evaluate operations."""

from __future__ import annotations

import pytest

from contexttrans.errors import (
    BackTranslateFailure,
    EvaluationFailure,
    RateLimitError,
    SegmentFailure,
    TranslateFailure,
)
from contexttrans.llm.gemini_client import GeminiProviderError
from contexttrans.llm.retry import RetryingInvoker
from contexttrans.llm.translator import SegmentTranslator


class _ScriptedProvider:
    """Completion provider double returning queued results or raising queued errors."""

    has_default_credential = True

    def __init__(self, outcomes: list[str | Exception]) -> None:
        """Initialize the provider with ordered outcomes."""

        self._outcomes = list(outcomes)
        self.calls: list[dict[str, str | None]] = []

    def generate_text(self, *, model: str, prompt: str, api_key: str | None = None) -> str:
        """Record the call and produce the next scripted outcome."""

        self.calls.append({"model": model, "prompt": prompt, "api_key": api_key})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _translator(provider: _ScriptedProvider) -> tuple[SegmentTranslator, list[float]]:
    """Build a translator whose retries never block."""

    waits: list[float] = []
    invoker = RetryingInvoker(sleeper=waits.append, clock=lambda: 0.0)
    return SegmentTranslator(provider=provider, invoker=invoker), waits


def _rate_limited() -> GeminiProviderError:
    """Build a rate-limited provider error."""

    return GeminiProviderError("Gemini rate limit (HTTP 429)", failure_kind="rate_limited", status_code=429)


def test_translate_returns_text_with_prompt_and_forwards_model_and_credential() -> None:
    """Translate should send the composed prompt and retain it for inspection."""

    provider = _ScriptedProvider(["Hola."])
    translator, _ = _translator(provider)

    output = translator.translate(
        "Hello.",
        "Hello. Bye.",
        "",
        "English",
        "Spanish",
        "gemini-3-pro-preview",
        credential="caller-key",
    )

    assert output.text == "Hola."
    assert output.prompt_used == provider.calls[0]["prompt"]
    assert "Segment to Translate:" in output.prompt_used
    assert provider.calls[0]["model"] == "gemini-3-pro-preview"
    assert provider.calls[0]["api_key"] == "caller-key"


def test_translate_absorbs_transient_rate_limits() -> None:
    """Rate-limited attempts should be retried transparently."""

    provider = _ScriptedProvider([_rate_limited(), "Hola."])
    translator, waits = _translator(provider)

    output = translator.translate("Hi.", "Hi.", "", "English", "Spanish", "m")

    assert output.text == "Hola."
    assert waits == [2.0]
    assert translator.usage.summary()["retry_waits"] == 1
    assert translator.usage.summary()["calls_translate"] == 2


def test_translate_wraps_exhausted_rate_limit_as_translate_failure() -> None:
    """Persistent throttling should become a segment-scoped translate failure."""

    provider = _ScriptedProvider([_rate_limited(), _rate_limited(), _rate_limited()])
    translator, waits = _translator(provider)

    with pytest.raises(TranslateFailure) as exc_info:
        translator.translate("Hi.", "Hi.", "", "English", "Spanish", "m")

    assert isinstance(exc_info.value, SegmentFailure)
    assert isinstance(exc_info.value.__cause__, RateLimitError)
    assert str(exc_info.value).startswith("Translation failed:")
    assert waits == [2.0, 4.0]
    assert translator.usage.summary()["failures_translate"] == 1


def test_back_translate_and_evaluate_use_their_own_failure_types() -> None:
    """Each stage should raise its own classified failure."""

    fatal = GeminiProviderError("Gemini authentication failed (HTTP 403)", failure_kind="invalid_api_key")
    translator, waits = _translator(_ScriptedProvider([fatal, fatal]))

    with pytest.raises(BackTranslateFailure):
        translator.back_translate("Hola.", "English", "Spanish", "m")
    with pytest.raises(EvaluationFailure):
        translator.evaluate("Hi.", "Hola.", "Hello.", "English", "Spanish", "Hi.", "m")

    assert waits == []


def test_usage_summary_counts_calls_per_kind() -> None:
    """Usage tracking should count each call kind and the prompt tokens sent."""

    provider = _ScriptedProvider(["Hola.", "Hello.", "- accurate"])
    translator, _ = _translator(provider)

    translator.translate("Hello.", "Hello.", "", "English", "Spanish", "m")
    translator.back_translate("Hola.", "English", "Spanish", "m")
    assert translator.evaluate("Hello.", "Hola.", "Hello.", "English", "Spanish", "Hello.", "m") == (
        "- accurate"
    )

    summary = translator.usage.summary()
    assert summary["calls_translate"] == 1
    assert summary["calls_back_translate"] == 1
    assert summary["calls_evaluate"] == 1
    assert summary["calls_total"] == 3
    assert summary["prompt_tokens_estimated"] > 0
    assert summary["retry_waits"] == 0
