"""Typed records and presets shared across pipeline stages."""

from .datatypes import (
    CostEstimate,
    InvalidTransitionError,
    PipelineRun,
    Segment,
    SegmentationStrategy,
    SegmentStatus,
    SegmentTransition,
    TranslationOutput,
)

__all__ = [
    "CostEstimate",
    "InvalidTransitionError",
    "PipelineRun",
    "Segment",
    "SegmentationStrategy",
    "SegmentStatus",
    "SegmentTransition",
    "TranslationOutput",
]
