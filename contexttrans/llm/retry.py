"""Bounded exponential-backoff retry for rate-limited provider calls.

Responsibilities:
- Classify provider failures as rate-limited (transient) or fatal.
- Retry only rate-limited failures, sleeping between attempts with doubling backoff.
- Keep sleep and clock injectable so backoff timing is testable without waiting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from time import monotonic, sleep
from typing import Callable, TypeVar

from ..errors import RateLimitError
from ..telemetry.logger import RunLogger
from .gemini_client import GeminiProviderError


_Result = TypeVar("_Result")

_RATE_LIMIT_STATUS_TOKENS = ("RESOURCE_EXHAUSTED",)
_RATE_LIMIT_MESSAGE_MARKERS = ("429", "resource exhausted", "resource_exhausted", "rate limit", "quota")


def is_rate_limited(exc: BaseException) -> bool:
    """Return whether an error signals 429 / resource-exhausted / quota throttling.

    Structured failure metadata decides when present; message markers are
    consulted only for unclassified errors.
    """

    if isinstance(exc, GeminiProviderError) and exc.failure_kind != "unknown":
        return exc.is_rate_limited
    status = getattr(exc, "provider_status", None) or getattr(exc, "status", None)
    if isinstance(status, str) and status.upper() in _RATE_LIMIT_STATUS_TOKENS:
        return True
    status_code = getattr(exc, "status_code", None)
    if status_code is None:
        status_code = getattr(exc, "code", None)
    if isinstance(status_code, int):
        return status_code == 429
    message = str(exc).lower()
    return any(marker in message for marker in _RATE_LIMIT_MESSAGE_MARKERS)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retry budget for rate-limited calls.

    Attributes:
        max_attempts: Total attempts including the first call.
        initial_backoff_ms: Wait before the second attempt.
        backoff_multiplier: Factor applied to the wait after each retry.
    """

    max_attempts: int = 3
    initial_backoff_ms: int = 2000
    backoff_multiplier: int = 2

    def backoff_schedule_ms(self) -> tuple[int, ...]:
        """Return the waits between consecutive attempts, in milliseconds."""

        waits: list[int] = []
        backoff = self.initial_backoff_ms
        for _ in range(max(0, self.max_attempts - 1)):
            waits.append(backoff)
            backoff *= self.backoff_multiplier
        return tuple(waits)


@dataclass(slots=True)
class RetryingInvoker:
    """Invoke provider operations, absorbing transient rate limiting via backoff."""

    policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleeper: Callable[[float], None] = sleep
    clock: Callable[[], float] = monotonic
    run_logger: RunLogger | None = None
    retry_attempt_count: int = 0
    total_wait_seconds: float = 0.0

    def invoke(self, operation: Callable[[], _Result], *, label: str = "provider") -> _Result:
        """Run `operation`, retrying rate-limited failures within the policy budget.

        Raises:
            RateLimitError: If every attempt failed with a rate-limited error.
            Exception: Any non-rate-limited error, unchanged and without retry.
        """

        backoff_ms = self.policy.initial_backoff_ms
        attempt = 1
        while True:
            try:
                return operation()
            except Exception as exc:
                if not is_rate_limited(exc):
                    raise
                if attempt >= self.policy.max_attempts:
                    raise RateLimitError(
                        f"Rate limit persisted after {attempt} attempt(s): {exc}",
                        attempts=attempt,
                    ) from exc
                self._wait(backoff_ms, label=label, attempt=attempt)
                backoff_ms *= self.policy.backoff_multiplier
                attempt += 1

    def _wait(self, backoff_ms: int, *, label: str, attempt: int) -> None:
        """Sleep for one backoff interval and record telemetry."""

        if self.run_logger is not None:
            self.run_logger.log_retry(label, attempt=attempt, backoff_ms=backoff_ms)
        started_at = self.clock()
        self.sleeper(backoff_ms / 1000.0)
        self.total_wait_seconds += self.clock() - started_at
        self.retry_attempt_count += 1
