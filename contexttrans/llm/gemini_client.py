"""Gemini HTTP client used as the text-completion provider.

Responsibilities:
- Send one `generateContent` request per call to Google's Generative Language REST API.
- Normalize response text extraction.
- Raise classified provider exceptions so retry policy and diagnostics can branch on them.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any

import requests


_RATE_LIMIT_MESSAGE_MARKERS = ("429", "resource exhausted", "resource_exhausted", "rate limit", "quota")


class GeminiProviderError(RuntimeError):
    """Raised when a Gemini request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_status: str | None = None,
    ) -> None:
        """Initialize provider error metadata for stage-aware diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_status = provider_status

    @property
    def is_rate_limited(self) -> bool:
        """Return whether the failure signals transient provider throttling."""

        return self.failure_kind == "rate_limited"


class GeminiClient:
    """Minimal requests-based Gemini `generateContent` client.

    The client holds an optional default (service) key. A per-call credential,
    when supplied, takes precedence so callers can bring their own key.
    """

    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        default_api_key: str | None = None,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 120.0,
        temperature: float = 0.3,
    ) -> None:
        """Initialize Gemini HTTP client settings."""

        self.default_api_key = default_api_key.strip() if isinstance(default_api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature

    @property
    def has_default_credential(self) -> bool:
        """Return whether calls without a caller credential can be authenticated."""

        return bool(self.default_api_key)

    def generate_text(self, *, model: str, prompt: str, api_key: str | None = None) -> str:
        """Return the first candidate's text for a single-prompt request."""

        resolved_key = self._resolve_api_key(api_key)
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self.temperature},
        }
        raw_payload = self._post_json_bytes(
            endpoint_path=f"/models/{model}:generateContent",
            payload=payload,
            api_key=resolved_key,
        ).decode("utf-8")
        return self._extract_candidate_text(raw_payload)

    def _resolve_api_key(self, api_key: str | None) -> str:
        """Pick the caller credential, falling back to the default key."""

        caller_key = api_key.strip() if isinstance(api_key, str) else ""
        resolved = caller_key or self.default_api_key
        if not resolved:
            raise GeminiProviderError(
                "Missing Gemini API key. Set `GEMINI_API_KEY`, use `--api-key`, or "
                "store one with `contexttrans credentials --set`.",
                failure_kind="invalid_api_key",
            )
        return resolved

    def _post_json_bytes(
        self,
        *,
        endpoint_path: str,
        payload: dict[str, Any],
        api_key: str,
    ) -> bytes:
        """Execute a Gemini JSON POST request and map failures consistently."""

        endpoint = f"{self.base_url}{endpoint_path}"
        headers = {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(
                endpoint,
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return bytes(response.content)
        except requests.HTTPError as exc:
            raise self._http_error_to_provider_error(exc) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = "Gemini request timed out."
            else:
                detail = f"Gemini request transport error: {self._short_message(str(exc))}"
            raise GeminiProviderError(detail, failure_kind=failure_kind) from exc
        except TimeoutError as exc:
            raise GeminiProviderError("Gemini request timed out.", failure_kind="timeout") from exc

    @staticmethod
    def _decode_error_body(exc: requests.HTTPError) -> str:
        """Decode an HTTP error body into a best-effort UTF-8 payload string."""

        response = exc.response
        if response is None:
            return ""
        return bytes(response.content).decode("utf-8", errors="replace").strip()

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\bAIza[0-9A-Za-z_-]{20,}\b", "[redacted-key]", text)
        redacted = re.sub(r"(?i)key=[A-Za-z0-9._-]{12,}", "key=[redacted-key]", redacted)
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing provider message length."""

        compact = " ".join(cls._redact_sensitive_tokens(text).split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> tuple[str, str | None]:
        """Extract a concise provider message and optional provider status token."""

        if not body:
            return "", None

        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(body), None

        provider_status: str | None = None
        message: str | None = None
        if isinstance(payload, dict):
            error_payload = payload.get("error")
            if isinstance(error_payload, dict):
                status_value = error_payload.get("status")
                if isinstance(status_value, str) and status_value.strip():
                    provider_status = status_value.strip()
                message_value = error_payload.get("message")
                if isinstance(message_value, str) and message_value.strip():
                    message = message_value.strip()

        if message is None:
            message = body
        return cls._short_message(message), provider_status

    @staticmethod
    def classify_http_failure(
        status_code: int,
        provider_message: str,
        provider_status: str | None,
    ) -> str:
        """Classify Gemini HTTP errors into deterministic diagnostic kinds."""

        message_lower = provider_message.lower()
        normalized_status = provider_status.upper() if provider_status is not None else ""

        if status_code == 429 or normalized_status == "RESOURCE_EXHAUSTED":
            return "rate_limited"
        if any(marker in message_lower for marker in _RATE_LIMIT_MESSAGE_MARKERS):
            return "rate_limited"
        if status_code in {401, 403} or "api key" in message_lower:
            return "invalid_api_key"
        if status_code == 404 or (
            "model" in message_lower
            and any(phrase in message_lower for phrase in ("not found", "does not exist", "is not supported"))
        ):
            return "invalid_model"
        if status_code in {408, 504} or normalized_status == "DEADLINE_EXCEEDED":
            return "timeout"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into deterministic diagnostic kinds."""

        if isinstance(reason, (TimeoutError, socket.timeout, requests.Timeout)):
            return "timeout"
        return "transport"

    @classmethod
    def _http_error_to_provider_error(cls, exc: requests.HTTPError) -> GeminiProviderError:
        """Convert HTTP errors into normalized provider exceptions with metadata."""

        status_code = exc.response.status_code if exc.response is not None else 0
        body = cls._decode_error_body(exc)
        provider_message, provider_status = cls._extract_provider_message(body)
        failure_kind = cls.classify_http_failure(status_code, provider_message, provider_status)

        headline = {
            "rate_limited": "Gemini rate limit or quota exhausted",
            "invalid_api_key": "Gemini authentication failed",
            "invalid_model": "Gemini rejected the selected model",
            "timeout": "Gemini request timed out",
        }.get(failure_kind, "Gemini request failed")

        if provider_message:
            detail = f"{headline} (HTTP {status_code}): {provider_message}"
        else:
            detail = f"{headline} (HTTP {status_code})."

        return GeminiProviderError(
            detail,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_status=provider_status,
        )

    @staticmethod
    def _extract_candidate_text(raw_payload: str) -> str:
        """Extract first candidate text from a `generateContent` JSON payload.

        A candidate without text parts, or with blank text, yields an empty string.
        """

        try:
            payload = json.loads(raw_payload)
        except json.JSONDecodeError as exc:
            raise GeminiProviderError("Gemini returned invalid JSON payload.") from exc

        candidates = payload.get("candidates") if isinstance(payload, dict) else None
        if not isinstance(candidates, list) or not candidates:
            raise GeminiProviderError("Gemini response missing non-empty `candidates` list.")

        first_candidate = candidates[0]
        if not isinstance(first_candidate, dict):
            raise GeminiProviderError("Gemini response `candidates[0]` is malformed.")

        content = first_candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""

        text = "".join(
            part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
        return text.strip()
