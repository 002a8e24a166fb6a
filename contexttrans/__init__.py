"""Top-level package for contexttrans.

This package translates plain-text documents segment by segment with a
generative language model, carrying prior translations forward as context and
checking every segment with a back-translation. The main orchestration entry
point is `TranslationPipeline`.
"""

from .pipeline import TranslationPipeline

__all__ = ["TranslationPipeline", "__version__"]

__version__ = "0.1.0"
