"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
segment progress lines, estimates, and run summaries.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import CostEstimate, Segment, SegmentStatus, SegmentTransition


_STATUS_COLORS = {
    SegmentStatus.COMPLETED: typer.colors.GREEN,
    SegmentStatus.ERROR: typer.colors.RED,
}


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


class SegmentProgressPrinter:
    """Render one progress line per segment transition."""

    def __init__(self, command_name: str, total_segments: int) -> None:
        """Initialize progress metadata for a command invocation."""

        self._command_name = command_name
        self._total_segments = total_segments

    def __call__(self, event: SegmentTransition) -> None:
        """Print the transition as `[progress] ... i/n status=...`."""

        segment = event.segment
        line = (
            f"[progress] command={self._command_name} "
            f"{segment.ordinal + 1}/{self._total_segments} status={segment.status.value}"
        )
        typer.secho(line, fg=_STATUS_COLORS.get(segment.status))
        if segment.status is SegmentStatus.ERROR and segment.error:
            typer.secho(f"  error: {segment.error}", fg=typer.colors.RED, err=True)


def echo_cost_estimate(estimate: CostEstimate, *, within_quota: bool, ceiling_tokens: int) -> None:
    """Print token projections and the quota verdict."""

    typer.echo(f"Segments: {estimate.segment_count}")
    typer.echo(f"Standard tokens (single call): {estimate.standard_tokens}")
    typer.echo(f"Contextual tokens (segmented): {estimate.contextual_tokens}")
    verdict = "yes" if within_quota else "no"
    typer.echo(f"Allowed without API key (limit {ceiling_tokens}): {verdict}")


def echo_segment_list(chunks: Sequence[str]) -> None:
    """Print numbered segments, one per entry."""

    for ordinal, chunk in enumerate(chunks, start=1):
        typer.echo(f"[{ordinal}] {chunk}")


def echo_run_summary(segments: Sequence[Segment], usage: Mapping[str, int]) -> None:
    """Print status counters and provider usage."""

    counts = {status: 0 for status in SegmentStatus}
    for segment in segments:
        counts[segment.status] += 1
    typer.echo(
        "Segments: "
        f"{counts[SegmentStatus.COMPLETED]} completed, "
        f"{counts[SegmentStatus.ERROR]} failed, "
        f"{counts[SegmentStatus.IDLE]} not started"
    )
    typer.echo(f"Provider calls: {usage.get('calls_total', 0)}")
    typer.echo(f"Prompt tokens (estimated): {usage.get('prompt_tokens_estimated', 0)}")
    typer.echo(f"Rate-limit retries: {usage.get('retry_waits', 0)}")
