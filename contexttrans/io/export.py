"""Serialization of run results for downstream consumers.

Responsibilities:
- Produce a full-fidelity JSON form retaining every segment field.
- Produce a flattened CSV form with a stable column order.
- Join completed translations into a plain-text document.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Mapping

from ..models.datatypes import Segment, SegmentStatus


CSV_HEADERS = ("ID", "Original", "Translated", "Back Translated", "Status")


def segment_payload(segment: Segment) -> dict[str, object]:
    """Return a JSON-serializable mapping with every segment field."""

    return {
        "id": segment.id,
        "ordinal": segment.ordinal,
        "original": segment.original,
        "translated": segment.translated,
        "back_translated": segment.back_translated,
        "evaluation": segment.evaluation,
        "prompt_used": segment.prompt_used,
        "status": segment.status.value,
        "error": segment.error,
    }


def segments_to_json(
    segments: Iterable[Segment],
    metadata: Mapping[str, object] | None = None,
) -> str:
    """Serialize segments, in ordinal order, as an indented JSON document."""

    payload: dict[str, object] = {
        "segments": [segment_payload(segment) for segment in _ordered(segments)],
    }
    if metadata:
        payload["metadata"] = dict(metadata)
    return json.dumps(payload, ensure_ascii=False, indent=2)


def segments_to_csv(segments: Iterable[Segment]) -> str:
    """Serialize segments as CSV with columns `ID, Original, Translated, Back Translated, Status`.

    Fields containing the delimiter or quote character are quote-wrapped and
    embedded quotes are doubled.
    """

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for segment in _ordered(segments):
        writer.writerow(
            (
                segment.id,
                segment.original,
                segment.translated or "",
                segment.back_translated or "",
                segment.status.value,
            )
        )
    return buffer.getvalue()


def joined_translation(segments: Iterable[Segment]) -> str:
    """Return completed translations joined by blank lines, in ordinal order."""

    return "\n\n".join(
        segment.translated
        for segment in _ordered(segments)
        if segment.status is SegmentStatus.COMPLETED and segment.translated
    )


def _ordered(segments: Iterable[Segment]) -> list[Segment]:
    """Return segments sorted by ordinal."""

    return sorted(segments, key=lambda segment: segment.ordinal)
