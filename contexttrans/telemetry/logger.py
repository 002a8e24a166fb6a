"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level runtime logs through `loguru`.
- Never log credentials or document text; only stage names, ordinals, and counters.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic phase logs for pipeline activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink or sys.stdout
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_run_start(self, *, segment_count: int, strategy: str) -> None:
        """Emit a run-start event."""

        self._emit("INFO", "start", "run", segments=segment_count, strategy=strategy)

    def log_run_complete(self, *, completed: int, failed: int, pending: int) -> None:
        """Emit a run-complete event with final status counters."""

        self._emit("INFO", "complete", "run", completed=completed, failed=failed, pending=pending)

    def log_run_cancelled(self, *, next_ordinal: int) -> None:
        """Emit a cancellation event naming the first segment left idle."""

        self._emit("WARNING", "cancelled", "run", next_segment=next_ordinal)

    def log_stage_start(self, stage: str, ordinal: int) -> None:
        """Emit a segment stage-start event."""

        self._emit("INFO", "start", stage, segment=ordinal)

    def log_stage_complete(self, stage: str, ordinal: int) -> None:
        """Emit a segment stage-complete event."""

        self._emit("INFO", "complete", stage, segment=ordinal)

    def log_stage_failure(self, stage: str, ordinal: int, error_type: str) -> None:
        """Emit a segment stage-failure event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, segment=ordinal, error_type=error_type)

    def log_retry(self, stage: str, *, attempt: int, backoff_ms: int) -> None:
        """Emit a rate-limit backoff event."""

        self._emit("WARNING", "retry", stage, attempt=attempt, backoff_ms=backoff_ms)
