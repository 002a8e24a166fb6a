"""CLI credential resolution helpers.

This module isolates API-key prompting, precedence resolution, and secure
persistence from the command wiring layer.

Precedence for the caller credential is: `--api-key` or hidden prompt,
then the keyring store, then the config file or `GEMINI_API_KEY`.
"""

from __future__ import annotations

from typing import Callable, Protocol

import typer

from .credentials import create_credential_store
from .errors import PipelineStageError
from .parsing import normalize_optional_string


class CredentialStoreProtocol(Protocol):
    """Protocol for secure credential store operations used by CLI resolution."""

    def get_api_key(self) -> str | None:
        """Return currently stored API key, if available."""

    def set_api_key(self, api_key: str) -> None:
        """Persist API key value in secure storage."""


def _prompt_hidden_api_key() -> str | None:
    """Prompt for an API key with hidden input."""

    return normalize_optional_string(
        typer.prompt(
            "Gemini API key (hidden; leave blank to skip)",
            default="",
            hide_input=True,
            show_default=False,
        )
    )


def resolve_credential(
    api_key: str | None,
    prompt_api_key: bool,
    store_api_key: bool,
    fallback_credential: str | None = None,
    credential_store_factory: Callable[[], CredentialStoreProtocol] = create_credential_store,
) -> str | None:
    """Resolve the caller credential for one run.

    Raises:
        PipelineStageError: If storing a CLI-entered key fails.
    """

    entered_key = normalize_optional_string(api_key)
    if entered_key is None and prompt_api_key:
        entered_key = _prompt_hidden_api_key()

    credential_store = credential_store_factory()
    if entered_key is not None:
        if store_api_key:
            try:
                credential_store.set_api_key(entered_key)
            except Exception as exc:
                raise PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint=(
                        "Install and configure a keyring backend, or rerun with "
                        "`--no-store-api-key` for one-off usage."
                    ),
                ) from exc
            typer.echo("Stored API key in secure credential storage.")
        return entered_key

    stored_key = credential_store.get_api_key()
    if stored_key is not None:
        return stored_key
    return normalize_optional_string(fallback_credential)
