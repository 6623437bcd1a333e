"""OS-level keyring backend using system credential stores.

Platform Support:
- Linux: Secret Service API (GNOME Keyring, KWallet)
- macOS: Keychain
- Windows: Windows Credential Locker

Each server gets one keyring entry: service ``atlassian-cli``, username
the server URL, password the record serialised as JSON.
"""

from collections.abc import Mapping
from typing import Any

import keyring
import structlog
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError
from pydantic import ValidationError

from atlassian_cli.credentials.backend import coerce_record
from atlassian_cli.credentials.validator import RemoteValidator
from atlassian_cli.exceptions import (
    BackendNotAvailableError,
    CredentialNotFoundError,
    PersistenceError,
)
from atlassian_cli.models.domain import CredentialRecord, UserIdentity

log = structlog.get_logger(__name__)

SERVICE_NAME = "atlassian-cli"
AVAILABILITY_PROBE_KEY = "test-availability"


class KeyringTokenManager:
    """Credential storage in the OS keyring.

    This is the preferred backend on developer machines as it:
    - Integrates with OS security features
    - Supports biometric unlock (Touch ID, Windows Hello)
    - Works across terminal sessions

    Example:
        >>> manager = KeyringTokenManager()
        >>> manager.store(record)
        >>> manager.get("https://example.atlassian.net").email
        'jdoe@example.com'
    """

    def __init__(
        self,
        validator: RemoteValidator | None = None,
        service_name: str = SERVICE_NAME,
    ) -> None:
        """Initialize keyring token manager.

        Args:
            validator: Remote validator used by :meth:`validate`
            service_name: Keyring service the entries are filed under
        """
        self._validator = validator or RemoteValidator()
        self.service_name = service_name

    @property
    def name(self) -> str:
        """Get backend identifier.

        Returns:
            Backend name constant "keyring"
        """
        return "keyring"

    @property
    def available(self) -> bool:
        """Check if a working keyring is configured.

        Returns False if:
        - Only the fail backend is configured (headless systems)
        - Backend fails to initialize
        - A test lookup fails (e.g. Secret Service without a D-Bus session)
        """
        try:
            backend = keyring.get_keyring()
            if isinstance(backend, fail.Keyring):
                return False
            keyring.get_password(self.service_name, AVAILABILITY_PROBE_KEY)
        except Exception as e:
            log.debug("keyring_unavailable", error=str(e))
            return False
        return True

    def _require_available(self) -> None:
        if not self.available:
            raise BackendNotAvailableError(
                "Keyring backend is not available",
                suggestion="Install a keyring backend (e.g. gnome-keyring) or use the encrypted backend",
            )

    def store(self, record: CredentialRecord | Mapping[str, Any]) -> None:
        """Store credentials in the OS keyring.

        Raises:
            CredentialValidationError: If the record is malformed
            BackendNotAvailableError: If keyring is not available
            PersistenceError: If the keyring operation fails
        """
        creds = coerce_record(record)
        self._require_available()

        try:
            keyring.set_password(self.service_name, creds.server_url, creds.model_dump_json())
        except KeyringError as e:
            raise PersistenceError(
                f"Failed to store credentials in keyring: {e}", reference=creds.server_url
            ) from e

        log.info("credential_stored", backend=self.name, server_url=creds.server_url)

    def get(self, server_url: str) -> CredentialRecord:
        """Retrieve credentials from the OS keyring.

        Raises:
            CredentialNotFoundError: If no entry exists for ``server_url``
            BackendNotAvailableError: If keyring is not available
            PersistenceError: If the keyring fails or the entry is unreadable
        """
        self._require_available()

        try:
            data = keyring.get_password(self.service_name, server_url)
        except KeyringError as e:
            raise PersistenceError(
                f"Failed to retrieve credentials from keyring: {e}", reference=server_url
            ) from e

        if data is None:
            raise CredentialNotFoundError("Credentials not found", reference=server_url)

        try:
            return CredentialRecord.model_validate_json(data)
        except ValidationError as e:
            raise PersistenceError(
                "Corrupted keyring entry",
                reference=server_url,
                suggestion="Run 'auth logout' and 'auth login' for this server",
            ) from e

    def delete(self, server_url: str) -> None:
        """Delete credentials from the OS keyring.

        Raises:
            BackendNotAvailableError: If keyring is not available
            PersistenceError: If the keyring operation fails
        """
        self._require_available()

        try:
            keyring.delete_password(self.service_name, server_url)
        except PasswordDeleteError:
            # Credential doesn't exist - not an error
            return
        except KeyringError as e:
            raise PersistenceError(
                f"Failed to delete credentials from keyring: {e}", reference=server_url
            ) from e

        log.info("credential_deleted", backend=self.name, server_url=server_url)

    def validate(
        self, server_url: str, email: str, token: str, timeout: float | None = None
    ) -> UserIdentity:
        return self._validator.validate(server_url, email, token, timeout=timeout)

    async def validate_async(
        self, server_url: str, email: str, token: str, timeout: float | None = None
    ) -> UserIdentity:
        return await self._validator.validate_async(server_url, email, token, timeout=timeout)
