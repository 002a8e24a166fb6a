"""Domain exceptions for pipeline and CLI diagnostics.

Error taxonomy:
- `ConfigurationError`: fatal, raised before a run starts.
- `RateLimitError`: transient throttling that outlived the retry budget.
- `SegmentFailure`: scoped to one segment, recorded as that segment's error.
- `EvaluationFailure`: never fatal, degrades to placeholder evaluation text.
"""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ConfigurationError(PipelineStageError):
    """Raised when run configuration prevents a run from starting."""

    def __init__(self, detail: str, *, hint: str | None = None) -> None:
        """Initialize a configuration error bound to the `config` stage."""

        super().__init__(stage="config", detail=detail, hint=hint)


class QuotaExceededError(ConfigurationError):
    """Raised when a run without a credential exceeds the token ceiling."""

    def __init__(self, *, estimated_tokens: int, ceiling_tokens: int) -> None:
        """Initialize quota metadata for CLI rendering."""

        super().__init__(
            (
                f"Estimated contextual cost of {estimated_tokens} tokens exceeds the "
                f"{ceiling_tokens}-token limit for runs without an API key."
            ),
            hint=(
                "Provide your own key via `--api-key` or `contexttrans credentials --set`, "
                "or choose a coarser segmentation strategy."
            ),
        )
        self.estimated_tokens = estimated_tokens
        self.ceiling_tokens = ceiling_tokens


class RateLimitError(RuntimeError):
    """Raised when a rate-limited provider call still fails after the last retry."""

    def __init__(self, message: str, *, attempts: int) -> None:
        """Initialize retry exhaustion metadata."""

        super().__init__(message)
        self.attempts = attempts


class SegmentFailure(RuntimeError):
    """Raised when one segment cannot finish a mandatory stage."""

    stage = "segment"


class TranslateFailure(SegmentFailure):
    """Raised when the translate stage fails for a segment."""

    stage = "translate"


class BackTranslateFailure(SegmentFailure):
    """Raised when the back-translate stage fails for a segment."""

    stage = "back_translate"


class EvaluationFailure(RuntimeError):
    """Raised when the optional evaluation stage fails for a segment."""

    stage = "evaluate"
