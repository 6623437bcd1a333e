"""Security-focused tests for credential storage."""

import json

import pytest

from atlassian_cli.credentials import EncryptedFileTokenManager, MemoryTokenManager
from atlassian_cli.exceptions import CryptoError
from atlassian_cli.models.domain import CredentialRecord


class TestCredentialSecurity:
    """Test security properties of credential management."""

    @pytest.fixture
    def file_path(self, tmp_path):
        return tmp_path / "credentials.enc"

    @pytest.fixture
    def stored(self, file_path):
        """Encrypted store holding two servers."""
        manager = EncryptedFileTokenManager(file_path)
        manager.store(
            CredentialRecord(
                server_url="https://a.example",
                email="alice.secret@example.com",
                token="super-secret-api-key-12345",
            )
        )
        manager.store(
            CredentialRecord(server_url="https://b.example", email="bob@example.com", token="second-token-67890")
        )
        return manager

    def test_no_plaintext_in_file(self, stored, file_path):
        """Tokens and emails never appear in the file."""
        content = file_path.read_bytes()

        for secret in ("super-secret-api-key-12345", "second-token-67890", "alice.secret@example.com", "bob@example.com"):
            assert secret.encode("utf-8") not in content

    def test_file_is_not_json(self, stored, file_path):
        """The file is not readable as structured plaintext."""
        with pytest.raises(ValueError):
            json.loads(file_path.read_bytes())

    def test_tampering_detected(self, stored, file_path):
        """Flipping any byte makes the next read fail with a crypto error."""
        original = file_path.read_bytes()

        for index in range(len(original)):
            tampered = bytearray(original)
            tampered[index] ^= 0xFF
            file_path.write_bytes(bytes(tampered))

            with pytest.raises(CryptoError):
                stored.get("https://a.example")

        file_path.write_bytes(original)
        assert stored.get("https://a.example").token == "super-secret-api-key-12345"

    def test_tampering_not_reported_as_missing(self, stored, file_path):
        """A corrupted store is never mistaken for an empty one."""
        content = bytearray(file_path.read_bytes())
        content[-1] ^= 0x01
        file_path.write_bytes(bytes(content))

        with pytest.raises(CryptoError) as exc_info:
            stored.get("https://missing.example")

        assert exc_info.value.kind == "crypto"

    def test_repr_hides_token(self):
        """Records can be logged without leaking the token."""
        record = CredentialRecord(server_url="https://a.example", email="u@x.com", token="t0p-s3cret")

        assert "t0p-s3cret" not in repr(record)
        assert "t0p-s3cret" not in str(record)

    def test_memory_store_does_not_alias_input(self):
        """Stored records are immutable, so callers cannot change them afterwards."""
        manager = MemoryTokenManager()
        record = CredentialRecord(server_url="https://a.example", email="u@x.com", token="t1")
        manager.store(record)

        with pytest.raises(ValueError):
            record.token = "changed"

        assert manager.get("https://a.example").token == "t1"
