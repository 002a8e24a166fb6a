"""Coarse character-based token heuristic shared by estimation and telemetry."""

from __future__ import annotations

import math


CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Return `ceil(len(text) / 4)`."""

    return math.ceil(len(text) / CHARS_PER_TOKEN)
