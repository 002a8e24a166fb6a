"""Unit tests for secure credential store helpers."""

from __future__ import annotations

import keyring
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError
import pytest

from contexttrans.credentials import KeyringCredentialStore, create_credential_store


class FakeKeyringBackend:
    """In-memory keyring stub for deterministic credential store tests."""

    def __init__(self) -> None:
        """Initialize fake storage dictionary."""

        self._storage: dict[tuple[str, str], str] = {}

    def get_password(self, service_name: str, account_name: str) -> str | None:
        """Return previously stored password if present."""

        return self._storage.get((service_name, account_name))

    def set_password(self, service_name: str, account_name: str, value: str) -> None:
        """Store password value for the service/account key."""

        self._storage[(service_name, account_name)] = value

    def delete_password(self, service_name: str, account_name: str) -> None:
        """Delete password value or raise like real backends when missing."""

        if (service_name, account_name) not in self._storage:
            raise PasswordDeleteError("missing")
        del self._storage[(service_name, account_name)]


@pytest.fixture
def fake_backend(monkeypatch: pytest.MonkeyPatch) -> FakeKeyringBackend:
    """Route `keyring` module functions to an in-memory backend."""

    backend = FakeKeyringBackend()
    monkeypatch.setattr(keyring, "get_keyring", lambda: backend)
    monkeypatch.setattr(keyring, "get_password", backend.get_password)
    monkeypatch.setattr(keyring, "set_password", backend.set_password)
    monkeypatch.setattr(keyring, "delete_password", backend.delete_password)
    return backend


def test_keyring_store_roundtrip_set_get_clear(fake_backend: FakeKeyringBackend) -> None:
    """Keyring store should set/get/clear API key values via keyring backend."""

    store = KeyringCredentialStore()

    assert store.is_available() is True
    assert store.get_api_key() is None

    store.set_api_key("  abc123  ")
    assert store.get_api_key() == "abc123"
    assert fake_backend.get_password("contexttrans", "gemini_api_key") == "abc123"

    assert store.clear_api_key() is True
    assert store.get_api_key() is None
    assert store.clear_api_key() is False


def test_keyring_store_rejects_blank_api_key(fake_backend: FakeKeyringBackend) -> None:
    """Blank keys should never be persisted."""

    with pytest.raises(ValueError, match="non-empty"):
        KeyringCredentialStore().set_api_key("   ")


def test_keyring_store_degrades_when_only_fail_backend_is_configured(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The fail-only backend should read as unavailable and refuse writes."""

    monkeypatch.setattr(keyring, "get_keyring", lambda: fail.Keyring())
    store = KeyringCredentialStore()

    assert store.is_available() is False
    assert store.get_api_key() is None
    assert store.clear_api_key() is False
    with pytest.raises(RuntimeError, match="unavailable"):
        store.set_api_key("abc123")


def test_keyring_store_treats_backend_read_errors_as_missing(
    fake_backend: FakeKeyringBackend,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Backend read errors should not crash credential resolution."""

    def _raise(service_name: str, account_name: str) -> str | None:
        raise KeyringError("locked")

    monkeypatch.setattr(keyring, "get_password", _raise)

    assert KeyringCredentialStore().get_api_key() is None


def test_create_credential_store_returns_keyring_store() -> None:
    """Factory should return the default keyring-backed implementation."""

    assert isinstance(create_credential_store(), KeyringCredentialStore)
