"""Token-cost estimation and quota gating for translation runs.

Responsibilities:
- Project whole-document and segmented context-accumulating token costs.
- Refuse runs without a credential whose projection exceeds the quota ceiling.

Token counts are a coarse character heuristic, not a linguistic tokenization.
The contextual projection mirrors the translate-prompt composition: every
segment request carries the full document, all previously translated context,
the segment itself, and a fixed per-request overhead.
"""

from __future__ import annotations

from .errors import QuotaExceededError
from .models.datatypes import CostEstimate, SegmentationStrategy
from .text.segmenter import Segmenter
from .text.tokens import estimate_tokens


REQUEST_OVERHEAD_TOKENS = 150
DEFAULT_QUOTA_TOKEN_CEILING = 100_000


class CostEstimator:
    """Project request costs for a document under a segmentation strategy."""

    def __init__(self, segmenter: Segmenter | None = None) -> None:
        """Initialize with the segmenter used by the pipeline."""

        self._segmenter = segmenter if segmenter is not None else Segmenter()

    def estimate(self, text: str, strategy: SegmentationStrategy | str) -> CostEstimate:
        """Return standard and contextual token projections for `text`."""

        resolved = SegmentationStrategy.parse(strategy)
        document_tokens = estimate_tokens(text)
        standard = document_tokens + REQUEST_OVERHEAD_TOKENS
        if resolved is SegmentationStrategy.NONE:
            return CostEstimate(standard_tokens=standard, contextual_tokens=standard, segment_count=1)

        segments = self._segmenter.split(text, resolved)
        contextual = 0
        history_tokens = 0
        for segment in segments:
            segment_tokens = estimate_tokens(segment)
            contextual += document_tokens + history_tokens + segment_tokens + REQUEST_OVERHEAD_TOKENS
            history_tokens += segment_tokens
        return CostEstimate(
            standard_tokens=standard,
            contextual_tokens=contextual,
            segment_count=len(segments),
        )


def is_within_quota(
    estimate: CostEstimate,
    *,
    has_credential: bool,
    ceiling_tokens: int = DEFAULT_QUOTA_TOKEN_CEILING,
) -> bool:
    """Return whether a run with this estimate is permitted."""

    if has_credential:
        return True
    return estimate.contextual_tokens <= ceiling_tokens


def enforce_quota(
    estimate: CostEstimate,
    *,
    has_credential: bool,
    ceiling_tokens: int = DEFAULT_QUOTA_TOKEN_CEILING,
) -> None:
    """Raise `QuotaExceededError` when the run is not permitted.

    Raises:
        QuotaExceededError: If no credential is present and the contextual
            projection exceeds `ceiling_tokens`.
    """

    if not is_within_quota(estimate, has_credential=has_credential, ceiling_tokens=ceiling_tokens):
        raise QuotaExceededError(
            estimated_tokens=estimate.contextual_tokens,
            ceiling_tokens=ceiling_tokens,
        )


def estimate(text: str, strategy: SegmentationStrategy | str) -> CostEstimate:
    """Estimate with a default `CostEstimator`."""

    return CostEstimator().estimate(text, strategy)
