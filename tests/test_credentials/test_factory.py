"""Tests for token manager selection."""

from unittest.mock import patch

import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.backends import fail
from keyring.errors import KeyringError

from atlassian_cli.config.settings import VaultSettings
from atlassian_cli.credentials import (
    EncryptedFileTokenManager,
    KeyringTokenManager,
    MemoryTokenManager,
    RemoteValidator,
    create_token_manager,
)
from atlassian_cli.exceptions import BackendNotAvailableError, PersistenceError


@pytest.fixture
def no_keyring():
    """Simulate a headless system without a secret store."""
    original = keyring.get_keyring()
    keyring.set_keyring(fail.Keyring())
    yield
    keyring.set_keyring(original)


class BrokenKeyring(KeyringBackend):
    """Configured keyring whose every call fails, like Secret Service without D-Bus."""

    priority = 1

    def get_password(self, service, username):
        raise KeyringError("no dbus session")

    def set_password(self, service, username, password):
        raise KeyringError("no dbus session")

    def delete_password(self, service, username):
        raise KeyringError("no dbus session")


@pytest.fixture
def broken_keyring():
    original = keyring.get_keyring()
    keyring.set_keyring(BrokenKeyring())
    yield
    keyring.set_keyring(original)


@pytest.fixture
def credentials_file(tmp_path):
    return tmp_path / "credentials.enc"


class TestCreateTokenManager:
    """Test backend selection and fallback."""

    def test_memory(self):
        manager = create_token_manager(VaultSettings(backend="memory"))

        assert isinstance(manager, MemoryTokenManager)

    def test_encrypted_uses_configured_file(self, credentials_file):
        manager = create_token_manager(VaultSettings(backend="encrypted", credentials_file=credentials_file))

        assert isinstance(manager, EncryptedFileTokenManager)
        assert manager.file_path == credentials_file

    def test_keyring_when_available(self, memory_keyring):
        manager = create_token_manager(VaultSettings(backend="keyring"))

        assert isinstance(manager, KeyringTokenManager)

    def test_keyring_requested_but_unavailable(self, no_keyring):
        """An explicit backend never silently falls back."""
        with pytest.raises(BackendNotAvailableError) as exc_info:
            create_token_manager(VaultSettings(backend="keyring"))

        assert "encrypted" in exc_info.value.suggestion

    def test_auto_prefers_keyring(self, memory_keyring, credentials_file):
        manager = create_token_manager(VaultSettings(backend="auto", credentials_file=credentials_file))

        assert manager.name == "keyring"

    def test_auto_falls_back_to_encrypted(self, no_keyring, credentials_file):
        manager = create_token_manager(VaultSettings(backend="auto", credentials_file=credentials_file))

        assert manager.name == "encrypted_file"

    def test_auto_skips_keyring_that_cannot_answer(self, broken_keyring, credentials_file, sample_record):
        """A configured but broken keyring falls through to the encrypted file."""
        manager = create_token_manager(VaultSettings(backend="auto", credentials_file=credentials_file))

        assert manager.name == "encrypted_file"
        manager.store(sample_record)
        assert manager.get(sample_record.server_url) == sample_record

    def test_keyring_requested_but_broken(self, broken_keyring):
        with pytest.raises(BackendNotAvailableError):
            create_token_manager(VaultSettings(backend="keyring"))

    def test_auto_falls_back_to_memory(self, no_keyring, credentials_file):
        """Without a keyring or a writable directory, memory is the last resort."""
        with patch(
            "atlassian_cli.credentials.factory.EncryptedFileTokenManager",
            side_effect=PersistenceError("Cannot create credentials directory"),
        ):
            manager = create_token_manager(VaultSettings(backend="auto", credentials_file=credentials_file))

        assert manager.name == "memory"

    def test_encrypted_failure_not_swallowed_when_requested(self, credentials_file):
        with patch(
            "atlassian_cli.credentials.factory.EncryptedFileTokenManager",
            side_effect=PersistenceError("Cannot create credentials directory"),
        ):
            with pytest.raises(PersistenceError):
                create_token_manager(VaultSettings(backend="encrypted", credentials_file=credentials_file))

    def test_shared_validator(self, credentials_file):
        validator = RemoteValidator(timeout=1.0)

        manager = create_token_manager(
            VaultSettings(backend="encrypted", credentials_file=credentials_file), validator=validator
        )

        assert manager._validator is validator

    def test_validator_timeout_from_settings(self):
        manager = create_token_manager(VaultSettings(backend="memory", validation_timeout=3.5))

        assert manager._validator.timeout == 3.5
