"""Integration-test fixtures for deterministic provider and credential behavior."""

from __future__ import annotations

import pytest

from contexttrans.llm.gemini_client import GeminiClient, GeminiProviderError
from tests.cli_doubles import FAILING_SEGMENT_MARKER, InMemoryCredentialStore

_ENV_KEYS = (
    "GEMINI_API_KEY",
    "CONTEXTTRANS_SERVICE_API_KEY",
    "CONTEXTTRANS_SOURCE_LANG",
    "CONTEXTTRANS_TARGET_LANG",
    "CONTEXTTRANS_SEGMENTATION",
    "CONTEXTTRANS_TRANSLATION_MODEL",
    "CONTEXTTRANS_VERIFICATION_MODEL",
    "CONTEXTTRANS_CUSTOM_INSTRUCTIONS",
    "CONTEXTTRANS_ENABLE_EVALUATION",
    "CONTEXTTRANS_QUOTA_TOKEN_CEILING",
)

@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear contexttrans environment variables and provide a service key."""

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CONTEXTTRANS_SERVICE_API_KEY", "service-test-key")

@pytest.fixture(autouse=True)
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Replace the keyring-backed store with an in-memory store."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr("contexttrans.cli.create_credential_store", lambda: store)
    return store

@pytest.fixture(autouse=True)
def provider_calls(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, str | None]]:
    """Mock Gemini calls to avoid network/key requirements and record requests."""

    calls: list[dict[str, str | None]] = []

    def _mock_generate_text(
        self: GeminiClient,
        *,
        model: str,
        prompt: str,
        api_key: str | None = None,
    ) -> str:
        """Return deterministic text derived from the last quoted prompt block."""

        calls.append({"model": model, "prompt": prompt, "api_key": api_key})
        payload = prompt.rsplit('"""', 2)[-2].strip("\n")
        if prompt.startswith("You are an impartial verification assistant."):
            return f"back:{payload}"
        if prompt.startswith("You are a meticulous translation quality auditor."):
            return "- The translation is accurate."
        if FAILING_SEGMENT_MARKER in payload:
            raise GeminiProviderError("Gemini request failed (HTTP 500)", failure_kind="http_error")
        return f"es:{payload}"

    monkeypatch.setattr(GeminiClient, "generate_text", _mock_generate_text)
    return calls
