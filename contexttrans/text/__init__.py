"""Text segmentation and token heuristics for the translation pipeline."""

from .segmenter import Segmenter, split
from .tokens import estimate_tokens

__all__ = ["Segmenter", "estimate_tokens", "split"]
