"""Result storage for translation runs.

Responsibilities:
- Read source documents.
- Persist run outputs (JSON, CSV, plain text) under one output directory.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from ..models.datatypes import Segment
from .export import joined_translation, segments_to_csv, segments_to_json


@dataclass(frozen=True, slots=True)
class RunOutputPaths:
    """Paths written for one run."""

    json_path: Path
    csv_path: Path
    text_path: Path


class ResultStore:
    """Filesystem-backed store for run outputs."""

    JSON_NAME = "segments.json"
    CSV_NAME = "segments.csv"
    TEXT_NAME = "translation.txt"

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root output directory."""

        self.root = root

    def save_text(self, relative_path: Path, content: str) -> Path:
        """Save text content and return final path."""

        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def save_run(
        self,
        segments: Sequence[Segment],
        metadata: Mapping[str, object] | None = None,
    ) -> RunOutputPaths:
        """Write JSON, CSV, and joined-text outputs for a run."""

        return RunOutputPaths(
            json_path=self.save_text(Path(self.JSON_NAME), segments_to_json(segments, metadata)),
            csv_path=self.save_text(Path(self.CSV_NAME), segments_to_csv(segments)),
            text_path=self.save_text(Path(self.TEXT_NAME), joined_translation(segments)),
        )


def read_document(path: Path) -> str:
    """Read a UTF-8 source document.

    Raises:
        FileNotFoundError: If `path` does not exist.
    """

    return path.read_text(encoding="utf-8")
