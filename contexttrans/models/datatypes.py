"""Core datatypes shared across contexttrans modules.

Responsibilities:
- Represent immutable segment snapshots exchanged between the pipeline and its consumers.
- Encode the per-segment state machine so status can only advance forward.

Key types:
- `SegmentationStrategy`, `SegmentStatus`, `Segment`, `SegmentTransition`,
  `PipelineRun`, `CostEstimate`, and `TranslationOutput`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class SegmentationStrategy(str, Enum):
    """Rule used to partition a document into segments."""

    NONE = "none"
    PARAGRAPHS = "paragraphs"
    SENTENCES = "sentences"
    LINES = "lines"
    SMART = "smart"

    @classmethod
    def parse(cls, value: object) -> SegmentationStrategy:
        """Resolve a strategy from an enum member or case-insensitive name."""

        if isinstance(value, cls):
            return value
        token = str(value).strip().lower()
        for member in cls:
            if member.value == token:
                return member
        allowed = ", ".join(member.value for member in cls)
        raise ValueError(f"Unsupported segmentation strategy `{value}` (expected one of: {allowed}).")


class SegmentStatus(str, Enum):
    """Lifecycle state of one segment inside a pipeline run."""

    IDLE = "idle"
    TRANSLATING = "translating"
    VERIFYING = "verifying"
    EVALUATING = "evaluating"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Return whether no further transition can leave this status."""

        return self in (SegmentStatus.COMPLETED, SegmentStatus.ERROR)


_ALLOWED_TRANSITIONS: dict[SegmentStatus, frozenset[SegmentStatus]] = {
    SegmentStatus.IDLE: frozenset({SegmentStatus.TRANSLATING}),
    SegmentStatus.TRANSLATING: frozenset({SegmentStatus.VERIFYING, SegmentStatus.ERROR}),
    SegmentStatus.VERIFYING: frozenset(
        {SegmentStatus.EVALUATING, SegmentStatus.COMPLETED, SegmentStatus.ERROR}
    ),
    SegmentStatus.EVALUATING: frozenset({SegmentStatus.COMPLETED, SegmentStatus.ERROR}),
    SegmentStatus.COMPLETED: frozenset(),
    SegmentStatus.ERROR: frozenset(),
}


class InvalidTransitionError(RuntimeError):
    """Raised when code attempts to move a segment backward or sideways."""


@dataclass(frozen=True, slots=True)
class Segment:
    """Snapshot of one ordered document chunk and its pipeline results.

    Attributes:
        id: Opaque unique token.
        ordinal: 0-based position in document order, fixed at creation.
        original: Source chunk text.
        translated: Translated text once the translate stage succeeds.
        back_translated: Literal back-translation once verification succeeds.
        evaluation: Quality audit findings, or a placeholder when the audit failed.
        prompt_used: Exact translate-stage prompt, retained for inspection.
        status: Current lifecycle state.
        error: Failure message when `status` is `error`.
    """

    id: str
    ordinal: int
    original: str
    translated: str | None = None
    back_translated: str | None = None
    evaluation: str | None = None
    prompt_used: str | None = None
    status: SegmentStatus = SegmentStatus.IDLE
    error: str | None = None

    def advance(self, status: SegmentStatus, **changes: object) -> Segment:
        """Return a copy moved to `status` with field updates applied.

        Raises:
            InvalidTransitionError: If the state machine does not allow the move.
        """

        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Segment {self.ordinal} cannot move from `{self.status.value}` "
                f"to `{status.value}`."
            )
        return replace(self, status=status, **changes)


@dataclass(frozen=True, slots=True)
class SegmentTransition:
    """Event describing one segment status change.

    Attributes:
        segment: Segment snapshot after the transition.
        previous_status: Status before the transition.
        accumulated_translation: Translation buffer snapshot at emission time.
    """

    segment: Segment
    previous_status: SegmentStatus
    accumulated_translation: str


@dataclass(slots=True)
class PipelineRun:
    """Mutable run state owned exclusively by one orchestrator."""

    segments: list[Segment] = field(default_factory=list)
    accumulated_translation: str = ""
    cancel_requested: bool = False

    def append_translation(self, translated_text: str) -> None:
        """Append one segment translation to the buffer, newline-joined."""

        if self.accumulated_translation:
            self.accumulated_translation += "\n" + translated_text
        else:
            self.accumulated_translation = translated_text

    def snapshot(self) -> tuple[Segment, ...]:
        """Return the current segments as an immutable ordered tuple."""

        return tuple(self.segments)


@dataclass(frozen=True, slots=True)
class CostEstimate:
    """Token projections used to gate execution before any provider call.

    Attributes:
        standard_tokens: Cost of one whole-document call.
        contextual_tokens: Projected cumulative cost of segmented context-accumulating calls.
        segment_count: Number of segments the strategy produces.
    """

    standard_tokens: int
    contextual_tokens: int
    segment_count: int


@dataclass(frozen=True, slots=True)
class TranslationOutput:
    """Translate-stage result with the prompt that produced it."""

    text: str
    prompt_used: str
