"""Provider usage counters for translation runs.

Responsibilities:
- Count provider calls per call kind and the prompt tokens actually sent.
- Provide a stable summary for CLI output and export metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..text.tokens import estimate_tokens


@dataclass(slots=True)
class UsageTracker:
    """Collect and summarize run-level provider usage."""

    calls: dict[str, int] = field(default_factory=dict)
    failures: dict[str, int] = field(default_factory=dict)
    prompt_tokens: int = 0
    retry_waits: int = 0

    def add_call(self, kind: str, prompt: str) -> None:
        """Record one provider call of `kind` and its estimated prompt size."""

        self.calls[kind] = self.calls.get(kind, 0) + 1
        self.prompt_tokens += estimate_tokens(prompt)

    def add_failure(self, kind: str) -> None:
        """Record one failed call of `kind`."""

        self.failures[kind] = self.failures.get(kind, 0) + 1

    def summary(self) -> dict[str, int]:
        """Return a flat summary dictionary for reporting."""

        payload = {f"calls_{kind}": count for kind, count in sorted(self.calls.items())}
        payload.update(
            {f"failures_{kind}": count for kind, count in sorted(self.failures.items())}
        )
        payload["calls_total"] = sum(self.calls.values())
        payload["prompt_tokens_estimated"] = self.prompt_tokens
        payload["retry_waits"] = self.retry_waits
        return payload
