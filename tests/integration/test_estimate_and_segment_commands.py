"""Integration tests for the provider-free `estimate` and `segment` commands."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from contexttrans.cli import app

_DOCUMENT = "First line. Still first!\n\nSecond paragraph?\nAnother line."


def _write_document(tmp_path: Path) -> Path:
    """Write a source document fixture and return its path."""

    path = tmp_path / "input.txt"
    path.write_text(_DOCUMENT, encoding="utf-8")
    return path


def test_estimate_command_prints_projection_and_quota_verdict(
    tmp_path: Path,
    provider_calls: list[dict[str, str | None]],
) -> None:
    """Estimate should report both projections without calling the provider."""

    result = CliRunner().invoke(
        app,
        ["estimate", str(_write_document(tmp_path)), "--segmentation", "sentences"],
    )

    assert result.exit_code == 0, result.output
    assert "Segments: 4" in result.output
    assert "Standard tokens (single call): " in result.output
    assert "Contextual tokens (segmented): " in result.output
    assert "Allowed without API key (limit 100000): yes" in result.output
    assert provider_calls == []


def test_estimate_command_uses_configured_ceiling(tmp_path: Path) -> None:
    """A YAML ceiling should change the keyless verdict."""

    config_path = tmp_path / "contexttrans.yaml"
    config_path.write_text("quota_token_ceiling: 10\n", encoding="utf-8")

    result = CliRunner().invoke(
        app,
        ["estimate", str(_write_document(tmp_path)), "--config", str(config_path)],
    )

    assert result.exit_code == 0, result.output
    assert "Segments: 1" in result.output
    assert "Allowed without API key (limit 10): no" in result.output


def test_segment_command_lists_chunks(tmp_path: Path) -> None:
    """Segment preview should print numbered chunks for the chosen strategy."""

    result = CliRunner().invoke(
        app,
        ["segment", str(_write_document(tmp_path)), "--segmentation", "lines"],
    )

    assert result.exit_code == 0, result.output
    assert "[1] First line. Still first!" in result.output
    assert "[2] Second paragraph?" in result.output
    assert "[3] Another line." in result.output
    assert "Total segments: 3" in result.output


def test_segment_command_rejects_unknown_strategy(tmp_path: Path) -> None:
    """Unknown strategies should fail at the config stage."""

    result = CliRunner().invoke(
        app,
        ["segment", str(_write_document(tmp_path)), "--segmentation", "words"],
    )

    assert result.exit_code == 1
    assert "segment failed at stage `config`" in result.output
    assert "Unsupported segmentation strategy" in result.output


def test_cli_without_arguments_shows_help() -> None:
    """Invoking the app with no arguments should print usage."""

    result = CliRunner().invoke(app, [])

    assert "Usage" in result.output
    assert "translate" in result.output
