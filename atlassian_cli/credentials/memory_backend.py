"""Volatile in-process backend for tests and last-resort fallback."""

from collections.abc import Mapping
from typing import Any

import structlog

from atlassian_cli.credentials.backend import coerce_record
from atlassian_cli.credentials.validator import RemoteValidator
from atlassian_cli.exceptions import CredentialNotFoundError
from atlassian_cli.models.domain import CredentialRecord, UserIdentity
from atlassian_cli.utils.locking import ReadWriteLock

log = structlog.get_logger(__name__)


class MemoryTokenManager:
    """Credential storage in a process-local dictionary.

    Nothing survives the process. Used by tests and when neither the OS
    keyring nor the encrypted file is usable.

    Example:
        >>> manager = MemoryTokenManager()
        >>> manager.store({"server_url": "https://a.example", "email": "u@x.com", "token": "t1"})
        >>> manager.get("https://a.example").token
        't1'
    """

    def __init__(self, validator: RemoteValidator | None = None) -> None:
        self._validator = validator or RemoteValidator()
        self._credentials: dict[str, CredentialRecord] = {}
        self._lock = ReadWriteLock()

    @property
    def name(self) -> str:
        return "memory"

    @property
    def available(self) -> bool:
        """Memory backend is always available."""
        return True

    def store(self, record: CredentialRecord | Mapping[str, Any]) -> None:
        creds = coerce_record(record)
        with self._lock.write_locked():
            self._credentials[creds.server_url] = creds
        log.debug("credential_stored", backend=self.name, server_url=creds.server_url)

    def get(self, server_url: str) -> CredentialRecord:
        with self._lock.read_locked():
            creds = self._credentials.get(server_url)
        if creds is None:
            raise CredentialNotFoundError("Credentials not found", reference=server_url)
        return creds

    def delete(self, server_url: str) -> None:
        with self._lock.write_locked():
            removed = self._credentials.pop(server_url, None)
        if removed is not None:
            log.debug("credential_deleted", backend=self.name, server_url=server_url)

    def validate(
        self, server_url: str, email: str, token: str, timeout: float | None = None
    ) -> UserIdentity:
        return self._validator.validate(server_url, email, token, timeout=timeout)

    async def validate_async(
        self, server_url: str, email: str, token: str, timeout: float | None = None
    ) -> UserIdentity:
        return await self._validator.validate_async(server_url, email, token, timeout=timeout)
