"""Unit tests for token projections and the keyless quota gate."""

from __future__ import annotations

import math

import pytest

from contexttrans.errors import ConfigurationError, QuotaExceededError
from contexttrans.models.datatypes import CostEstimate, SegmentationStrategy
from contexttrans.pipeline_costs import (
    REQUEST_OVERHEAD_TOKENS,
    CostEstimator,
    enforce_quota,
    estimate,
    is_within_quota,
)
from contexttrans.text.tokens import estimate_tokens


def test_estimate_tokens_uses_four_characters_per_token() -> None:
    """Token heuristic should round character length divided by four up."""

    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


def test_none_strategy_contextual_cost_equals_standard_cost() -> None:
    """Whole-document runs should project identical standard and contextual costs."""

    text = "abcd" * 10

    result = estimate(text, SegmentationStrategy.NONE)

    assert result == CostEstimate(
        standard_tokens=10 + REQUEST_OVERHEAD_TOKENS,
        contextual_tokens=10 + REQUEST_OVERHEAD_TOKENS,
        segment_count=1,
    )


def test_segmented_cost_accumulates_prior_segment_history() -> None:
    """Each segment request should carry the document, prior segments, and itself."""

    text = "aaaa\n\nbbbbbbbb"
    document_tokens = math.ceil(len(text) / 4)

    result = CostEstimator().estimate(text, "paragraphs")

    first_call = document_tokens + 0 + 1 + REQUEST_OVERHEAD_TOKENS
    second_call = document_tokens + 1 + 2 + REQUEST_OVERHEAD_TOKENS
    assert result.standard_tokens == document_tokens + REQUEST_OVERHEAD_TOKENS
    assert result.contextual_tokens == first_call + second_call
    assert result.segment_count == 2


@pytest.mark.parametrize(
    "strategy",
    [
        SegmentationStrategy.PARAGRAPHS,
        SegmentationStrategy.SENTENCES,
        SegmentationStrategy.LINES,
        SegmentationStrategy.SMART,
    ],
)
def test_contextual_cost_is_never_below_standard_cost(strategy: SegmentationStrategy) -> None:
    """Segmented projections should be at least the whole-document cost."""

    text = "One sentence here. Another one!\n\nA new paragraph?\nWith a second line."

    result = estimate(text, strategy)

    assert result.segment_count >= 1
    assert result.contextual_tokens >= result.standard_tokens


def test_quota_gate_only_applies_without_credential() -> None:
    """A credential should lift the ceiling; without one the ceiling is inclusive."""

    projection = CostEstimate(standard_tokens=50, contextual_tokens=1000, segment_count=3)

    assert is_within_quota(projection, has_credential=True, ceiling_tokens=10) is True
    assert is_within_quota(projection, has_credential=False, ceiling_tokens=1000) is True
    assert is_within_quota(projection, has_credential=False, ceiling_tokens=999) is False


def test_enforce_quota_raises_configuration_error_with_projection_metadata() -> None:
    """Over-ceiling keyless runs should be refused with the projected cost attached."""

    projection = CostEstimate(standard_tokens=50, contextual_tokens=1000, segment_count=3)

    with pytest.raises(QuotaExceededError) as exc_info:
        enforce_quota(projection, has_credential=False, ceiling_tokens=500)

    assert isinstance(exc_info.value, ConfigurationError)
    assert exc_info.value.stage == "config"
    assert exc_info.value.estimated_tokens == 1000
    assert exc_info.value.ceiling_tokens == 500
    assert "1000" in exc_info.value.detail
