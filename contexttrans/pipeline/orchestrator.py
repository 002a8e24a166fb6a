"""Sequential segment translation pipeline.

Responsibilities:
- Segment a document and drive each segment through translate, verify, and
  optional evaluate stages, strictly one segment at a time.
- Accumulate prior translations so later prompts stay consistent.
- Isolate failures per segment and emit every status transition, in order,
  to subscribed listeners.

Key types:
- `TranslationPipeline`: orchestration facade owning one `PipelineRun` at a time.
- `TransitionListener`: callable receiving `SegmentTransition` events.
"""

from __future__ import annotations

from collections.abc import Callable
import uuid

from ..config import RunConfiguration
from ..errors import ConfigurationError, EvaluationFailure, SegmentFailure
from ..llm.translator import SegmentTranslator
from ..models.datatypes import (
    PipelineRun,
    Segment,
    SegmentStatus,
    SegmentTransition,
)
from ..pipeline_costs import DEFAULT_QUOTA_TOKEN_CEILING, CostEstimator, enforce_quota
from ..telemetry.logger import RunLogger
from ..text.segmenter import Segmenter


TransitionListener = Callable[[SegmentTransition], None]

EVALUATION_FAILURE_PLACEHOLDER = "Evaluation unavailable: the quality audit could not be completed."


def _new_segment_id() -> str:
    """Return an opaque unique segment token."""

    return uuid.uuid4().hex[:12]


class TranslationPipeline:
    """Coordinate all stages for a single translation run."""

    def __init__(
        self,
        translator: SegmentTranslator,
        segmenter: Segmenter | None = None,
        cost_estimator: CostEstimator | None = None,
        run_logger: RunLogger | None = None,
        quota_token_ceiling: int = DEFAULT_QUOTA_TOKEN_CEILING,
        id_factory: Callable[[], str] = _new_segment_id,
    ) -> None:
        """Initialize stage dependencies and optional runtime logging."""

        self._translator = translator
        self._segmenter = segmenter if segmenter is not None else Segmenter()
        self._cost_estimator = (
            cost_estimator if cost_estimator is not None else CostEstimator(self._segmenter)
        )
        self._run_logger = run_logger
        self._quota_token_ceiling = quota_token_ceiling
        self._id_factory = id_factory
        self._listeners: list[TransitionListener] = []
        self._run = PipelineRun()

    def subscribe(self, listener: TransitionListener) -> Callable[[], None]:
        """Register a transition listener and return a function that unregisters it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def cancel(self) -> None:
        """Request cooperative cancellation; honored before the next segment starts."""

        self._run.cancel_requested = True

    @property
    def segments(self) -> tuple[Segment, ...]:
        """Return an immutable snapshot of the current run's segments."""

        return self._run.snapshot()

    @property
    def accumulated_translation(self) -> str:
        """Return the current translation buffer."""

        return self._run.accumulated_translation

    def usage_summary(self) -> dict[str, int]:
        """Return provider-call counters accumulated by the translator."""

        return self._translator.usage.summary()

    def preflight(self, document: str, config: RunConfiguration) -> None:
        """Validate configuration, credential availability, and quota before any call.

        Raises:
            ConfigurationError: If the run must not start.
        """

        config.validate()
        if not document.strip():
            raise ConfigurationError("Input document is empty.", hint="Provide non-blank text.")
        if not config.has_credential and not self._translator.provider.has_default_credential:
            raise ConfigurationError(
                "No API key is available for provider calls.",
                hint=(
                    "Pass `--api-key`, set `GEMINI_API_KEY`, or store a key with "
                    "`contexttrans credentials --set`."
                ),
            )
        estimate = self._cost_estimator.estimate(document, config.segmentation_strategy)
        enforce_quota(
            estimate,
            has_credential=config.has_credential,
            ceiling_tokens=self._quota_token_ceiling,
        )

    def run(self, document: str, config: RunConfiguration) -> tuple[Segment, ...]:
        """Translate `document` segment by segment and return the final snapshots.

        Raises:
            ConfigurationError: If preflight validation fails; no call is issued then.
        """

        self.preflight(document, config)

        chunks = self._segmenter.split(document, config.segmentation_strategy)
        self._run = PipelineRun(
            segments=[
                Segment(id=self._id_factory(), ordinal=ordinal, original=chunk)
                for ordinal, chunk in enumerate(chunks)
            ]
        )
        self._log_run_start(len(chunks), config.segmentation_strategy.value)

        for ordinal in range(len(self._run.segments)):
            if self._run.cancel_requested:
                if self._run_logger is not None:
                    self._run_logger.log_run_cancelled(next_ordinal=ordinal)
                break
            self._process_segment(ordinal, document, config)

        self._log_run_complete()
        return self._run.snapshot()

    def _process_segment(self, ordinal: int, document: str, config: RunConfiguration) -> None:
        """Drive one segment from `idle` to a terminal status."""

        segment = self._transition(ordinal, SegmentStatus.TRANSLATING)
        self._log_stage_start("translate", ordinal)
        try:
            output = self._translator.translate(
                segment.original,
                document,
                self._run.accumulated_translation,
                config.source_lang,
                config.target_lang,
                config.translation_model_id,
                custom_instructions=config.custom_instructions,
                credential=config.credential,
            )
        except SegmentFailure as exc:
            self._fail(ordinal, "translate", exc)
            return

        self._run.append_translation(output.text)
        segment = self._transition(
            ordinal,
            SegmentStatus.VERIFYING,
            translated=output.text,
            prompt_used=output.prompt_used,
        )
        self._log_stage_complete("translate", ordinal)
        self._log_stage_start("back_translate", ordinal)
        try:
            back_translated = self._translator.back_translate(
                output.text,
                config.source_lang,
                config.target_lang,
                config.verification_model_id,
                credential=config.credential,
            )
        except SegmentFailure as exc:
            self._fail(ordinal, "back_translate", exc)
            return
        self._log_stage_complete("back_translate", ordinal)

        if not config.enable_evaluation:
            self._transition(ordinal, SegmentStatus.COMPLETED, back_translated=back_translated)
            return

        segment = self._transition(
            ordinal,
            SegmentStatus.EVALUATING,
            back_translated=back_translated,
        )
        self._log_stage_start("evaluate", ordinal)
        try:
            evaluation = self._translator.evaluate(
                segment.original,
                output.text,
                back_translated,
                config.source_lang,
                config.target_lang,
                document,
                config.verification_model_id,
                credential=config.credential,
            )
            self._log_stage_complete("evaluate", ordinal)
        except EvaluationFailure as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure("evaluate", ordinal, type(exc).__name__)
            evaluation = EVALUATION_FAILURE_PLACEHOLDER
        self._transition(ordinal, SegmentStatus.COMPLETED, evaluation=evaluation)

    def _fail(self, ordinal: int, stage: str, exc: SegmentFailure) -> None:
        """Mark one segment as failed without stopping the run."""

        if self._run_logger is not None:
            cause = exc.__cause__ if exc.__cause__ is not None else exc
            self._run_logger.log_stage_failure(stage, ordinal, type(cause).__name__)
        self._transition(ordinal, SegmentStatus.ERROR, error=str(exc))

    def _transition(self, ordinal: int, status: SegmentStatus, **changes: object) -> Segment:
        """Advance one segment, store the snapshot, and notify listeners in order."""

        previous = self._run.segments[ordinal]
        updated = previous.advance(status, **changes)
        self._run.segments[ordinal] = updated
        event = SegmentTransition(
            segment=updated,
            previous_status=previous.status,
            accumulated_translation=self._run.accumulated_translation,
        )
        for listener in tuple(self._listeners):
            listener(event)
        return updated

    def _log_stage_start(self, stage: str, ordinal: int) -> None:
        """Log stage start when logging is enabled."""

        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage, ordinal)

    def _log_stage_complete(self, stage: str, ordinal: int) -> None:
        """Log stage completion when logging is enabled."""

        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage, ordinal)

    def _log_run_start(self, segment_count: int, strategy: str) -> None:
        """Log run start when logging is enabled."""

        if self._run_logger is not None:
            self._run_logger.log_run_start(segment_count=segment_count, strategy=strategy)

    def _log_run_complete(self) -> None:
        """Log final status counters when logging is enabled."""

        if self._run_logger is None:
            return
        statuses = [segment.status for segment in self._run.segments]
        self._run_logger.log_run_complete(
            completed=statuses.count(SegmentStatus.COMPLETED),
            failed=statuses.count(SegmentStatus.ERROR),
            pending=statuses.count(SegmentStatus.IDLE),
        )
