"""Provider-facing abstractions for translation, verification, and evaluation.

This package defines the prompt library, the Gemini HTTP client, the retry
policy, and the segment-level operations used by the pipeline.
"""

from .gemini_client import GeminiClient, GeminiProviderError
from .prompts import PromptLibrary
from .retry import RetryingInvoker, RetryPolicy, is_rate_limited
from .translator import CompletionProvider, SegmentTranslator

__all__ = [
    "CompletionProvider",
    "GeminiClient",
    "GeminiProviderError",
    "PromptLibrary",
    "RetryingInvoker",
    "RetryPolicy",
    "SegmentTranslator",
    "is_rate_limited",
]
