"""contexttrans pipeline package.

This package contains the sequential segment orchestrator and its transition
event plumbing.
"""

from .orchestrator import EVALUATION_FAILURE_PLACEHOLDER, TransitionListener, TranslationPipeline

__all__ = ["EVALUATION_FAILURE_PLACEHOLDER", "TransitionListener", "TranslationPipeline"]
