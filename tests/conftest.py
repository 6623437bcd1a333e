"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterator

import httpx
import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from atlassian_cli.credentials import RemoteValidator
from atlassian_cli.models.domain import CredentialRecord
from atlassian_cli.utils.logging_config import configure_logging

SERVER_URL = "https://example.atlassian.net"

MYSELF_PAYLOAD = {
    "accountId": "5b10a2844c20165700ede21g",
    "displayName": "Jane Doe",
    "emailAddress": "jdoe@example.com",
    "active": True,
}


class InMemoryKeyring(KeyringBackend):
    """Keyring backend that keeps passwords in a dict."""

    priority = 1

    def __init__(self) -> None:
        super().__init__()
        self.passwords: dict[tuple[str, str], str] = {}

    def get_password(self, service: str, username: str) -> str | None:
        return self.passwords.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self.passwords[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        try:
            del self.passwords[(service, username)]
        except KeyError:
            raise PasswordDeleteError("Password not found") from None


@pytest.fixture(autouse=True, scope="session")
def quiet_structlog() -> None:
    """Silence structured logs so they never mix with CLI output."""
    configure_logging("CRITICAL")


@pytest.fixture
def sample_record() -> CredentialRecord:
    """Credentials for the example server."""
    return CredentialRecord(server_url=SERVER_URL, email="jdoe@example.com", token="ATATT3xFfGF0-secret")


@pytest.fixture
def memory_keyring() -> Iterator[InMemoryKeyring]:
    """Install an in-memory keyring for the duration of a test."""
    original = keyring.get_keyring()
    backend = InMemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(original)


@pytest.fixture
def make_validator() -> Callable[[Callable[[httpx.Request], httpx.Response]], RemoteValidator]:
    """Build a RemoteValidator whose requests are answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> RemoteValidator:
        transport = httpx.MockTransport(handler)
        return RemoteValidator(transport=transport, async_transport=transport)

    return _make


@pytest.fixture
def ok_validator(make_validator) -> RemoteValidator:
    """Validator whose server accepts every token."""
    return make_validator(lambda request: httpx.Response(200, json=MYSELF_PAYLOAD))
