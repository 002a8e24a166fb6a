"""Document-to-segment splitting strategies.

Responsibilities:
- Split document text into ordered, non-empty, trimmed chunks.
- Keep every strategy pure and deterministic so estimates and runs agree.
"""

from __future__ import annotations

import re

from ..models.datatypes import SegmentationStrategy


class Segmenter:
    """Split documents according to a `SegmentationStrategy`."""

    SMART_MAX_CHARS = 500
    _TRAILING_SENTENCE_CLOSERS = "\"'”’»"
    _PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
    _SENTENCE_PATTERN = re.compile(
        r"[^.!?]*[.!?]+[" + _TRAILING_SENTENCE_CLOSERS + r"]?|[^.!?]+$"
    )

    def split(self, text: str, strategy: SegmentationStrategy | str) -> list[str]:
        """Split `text` into chunks.

        Args:
            text: Full document text.
            strategy: Strategy member or its name.

        Returns:
            Ordered chunks, none of which is empty or whitespace-only.
        """

        resolved = SegmentationStrategy.parse(strategy)
        if not text.strip():
            return []

        if resolved is SegmentationStrategy.NONE:
            return [text.strip()]
        if resolved is SegmentationStrategy.PARAGRAPHS:
            return self._clean(self._PARAGRAPH_BREAK.split(text))
        if resolved is SegmentationStrategy.LINES:
            return self._clean(text.splitlines())
        if resolved is SegmentationStrategy.SENTENCES:
            return self.sentences(text)
        return self._pack_sentences(self.sentences(text), self.SMART_MAX_CHARS)

    def sentences(self, text: str) -> list[str]:
        """Split text after `.`, `!`, or `?` with an optional closing quote."""

        return self._clean(self._SENTENCE_PATTERN.findall(text))

    @staticmethod
    def _clean(parts: list[str]) -> list[str]:
        """Trim parts and drop empty results."""

        stripped = (part.strip() for part in parts)
        return [part for part in stripped if part]

    @staticmethod
    def _pack_sentences(sentences: list[str], max_chars: int) -> list[str]:
        """Greedily join consecutive sentences while the chunk stays within `max_chars`.

        A sentence longer than `max_chars` on its own is emitted whole.
        """

        chunks: list[str] = []
        current = ""
        for sentence in sentences:
            if not current:
                current = sentence
                continue
            if len(current) + 1 + len(sentence) > max_chars:
                chunks.append(current)
                current = sentence
                continue
            current = f"{current} {sentence}"
        if current:
            chunks.append(current)
        return chunks


_DEFAULT_SEGMENTER = Segmenter()


def split(text: str, strategy: SegmentationStrategy | str) -> list[str]:
    """Split `text` with the default `Segmenter`."""

    return _DEFAULT_SEGMENTER.split(text, strategy)
