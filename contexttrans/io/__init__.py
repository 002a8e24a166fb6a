"""Input/output helpers for documents and run results."""

from .export import joined_translation, segment_payload, segments_to_csv, segments_to_json
from .storage import ResultStore, RunOutputPaths, read_document

__all__ = [
    "ResultStore",
    "RunOutputPaths",
    "joined_translation",
    "read_document",
    "segment_payload",
    "segments_to_csv",
    "segments_to_json",
]
