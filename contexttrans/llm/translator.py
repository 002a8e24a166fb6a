"""Segment-level provider operations: translate, back-translate, evaluate.

Responsibilities:
- Define the completion-provider protocol consumed by the pipeline.
- Combine `PromptLibrary` prompts with `RetryingInvoker` around each provider call.
- Wrap stage failures into `TranslateFailure`, `BackTranslateFailure`, or `EvaluationFailure`.
"""

from __future__ import annotations

from typing import Protocol

from ..errors import BackTranslateFailure, EvaluationFailure, TranslateFailure
from ..models.datatypes import TranslationOutput
from ..telemetry.usage import UsageTracker
from .prompts import PromptLibrary
from .retry import RetryingInvoker


class CompletionProvider(Protocol):
    """Protocol for a single text-completion request."""

    @property
    def has_default_credential(self) -> bool:
        """Return whether calls without a caller credential can be authenticated."""

    def generate_text(self, *, model: str, prompt: str, api_key: str | None = None) -> str:
        """Return completion text for `prompt` or raise a classified failure."""


class SegmentTranslator:
    """Run the three per-segment provider operations with retry and usage tracking."""

    def __init__(
        self,
        provider: CompletionProvider,
        invoker: RetryingInvoker | None = None,
        prompts: PromptLibrary | None = None,
        usage: UsageTracker | None = None,
    ) -> None:
        """Initialize provider, retry, prompt, and usage dependencies."""

        self.provider = provider
        self.invoker = invoker if invoker is not None else RetryingInvoker()
        self.prompts = prompts if prompts is not None else PromptLibrary()
        self.usage = usage if usage is not None else UsageTracker()

    def translate(
        self,
        segment_text: str,
        full_document: str,
        translation_so_far: str,
        source_lang: str,
        target_lang: str,
        model_id: str,
        custom_instructions: str | None = None,
        credential: str | None = None,
    ) -> TranslationOutput:
        """Translate one segment with accumulated context.

        Raises:
            TranslateFailure: If the provider call fails after retries.
        """

        prompt = self.prompts.translate_prompt(
            segment_text=segment_text,
            full_document=full_document,
            translation_so_far=translation_so_far,
            source_lang=source_lang,
            target_lang=target_lang,
            custom_instructions=custom_instructions,
        )
        try:
            text = self._complete("translate", model_id, prompt, credential)
        except Exception as exc:
            raise TranslateFailure(f"Translation failed: {exc}") from exc
        return TranslationOutput(text=text, prompt_used=prompt)

    def back_translate(
        self,
        translated_text: str,
        source_lang: str,
        target_lang: str,
        model_id: str,
        credential: str | None = None,
    ) -> str:
        """Translate `translated_text` literally back into the source language.

        Raises:
            BackTranslateFailure: If the provider call fails after retries.
        """

        prompt = self.prompts.back_translate_prompt(
            translated_text=translated_text,
            source_lang=source_lang,
            target_lang=target_lang,
        )
        try:
            return self._complete("back_translate", model_id, prompt, credential)
        except Exception as exc:
            raise BackTranslateFailure(f"Back-translation failed: {exc}") from exc

    def evaluate(
        self,
        original: str,
        translated: str,
        back_translated: str,
        source_lang: str,
        target_lang: str,
        full_document: str,
        model_id: str,
        credential: str | None = None,
    ) -> str:
        """Audit one translated segment.

        Raises:
            EvaluationFailure: If the provider call fails after retries.
        """

        prompt = self.prompts.evaluate_prompt(
            original=original,
            translated=translated,
            back_translated=back_translated,
            source_lang=source_lang,
            target_lang=target_lang,
            full_document=full_document,
        )
        try:
            return self._complete("evaluate", model_id, prompt, credential)
        except Exception as exc:
            raise EvaluationFailure(f"Evaluation failed: {exc}") from exc

    def _complete(self, kind: str, model_id: str, prompt: str, credential: str | None) -> str:
        """Issue one provider call through the retrying invoker."""

        def _operation() -> str:
            self.usage.add_call(kind, prompt)
            return self.provider.generate_text(model=model_id, prompt=prompt, api_key=credential)

        retries_before = self.invoker.retry_attempt_count
        try:
            return self.invoker.invoke(_operation, label=kind)
        except Exception:
            self.usage.add_failure(kind)
            raise
        finally:
            self.usage.retry_waits += self.invoker.retry_attempt_count - retries_before
