"""Telemetry and observability helpers.

This package emits run events and tracks provider usage for auditing.
"""

from .logger import RunLogger
from .usage import UsageTracker

__all__ = ["RunLogger", "UsageTracker"]
