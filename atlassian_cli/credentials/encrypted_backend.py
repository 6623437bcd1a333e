"""Encrypted file backend using AES-256-GCM.

Security Model:
- Key derived from the hostname and user id (see ``crypto``), no password
- Credentials for all servers sealed together with AES-256-GCM
- File stored at ~/.atlassian-cli/credentials.enc with mode 600
- Suitable for headless systems without keyring support

Trust boundary: the file is opaque to casual inspection, to other local
users and on other machines. It is not opaque to anything running as the
same user on the same machine, which can re-derive the key from public
inputs.

Known limitation: the read/write lock only serialises callers sharing one
instance. Two processes writing the same file cannot corrupt it (writes
are atomic renames) but the later writer wins and the earlier update to
the container is lost.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from atlassian_cli.credentials.backend import coerce_record
from atlassian_cli.credentials.crypto import derive_key, open_sealed, seal
from atlassian_cli.credentials.validator import RemoteValidator
from atlassian_cli.exceptions import CredentialNotFoundError, CryptoError, PersistenceError
from atlassian_cli.models.domain import CredentialRecord, UserIdentity
from atlassian_cli.utils.atomic import atomic_write
from atlassian_cli.utils.locking import ReadWriteLock

log = structlog.get_logger(__name__)

DEFAULT_CREDENTIALS_FILE = Path(".atlassian-cli") / "credentials.enc"

_CONTAINER = TypeAdapter(dict[str, CredentialRecord])


def default_credentials_path() -> Path:
    """Return ``~/.atlassian-cli/credentials.enc``.

    Raises:
        PersistenceError: If the home directory cannot be determined
    """
    try:
        return Path.home() / DEFAULT_CREDENTIALS_FILE
    except RuntimeError as e:
        raise PersistenceError(f"Failed to get home directory: {e}") from e


class EncryptedFileTokenManager:
    """Encrypted file-based credential storage.

    The whole server URL → record map lives in one sealed file. Every
    ``store`` and ``delete`` reads the file, changes the map and writes it
    back atomically; every ``get`` reads and decrypts it afresh.

    Example:
        >>> manager = EncryptedFileTokenManager(Path("/tmp/creds.enc"))
        >>> manager.store(record)
        >>> manager.get(record.server_url) == record
        True
    """

    def __init__(
        self,
        file_path: Path | str | None = None,
        validator: RemoteValidator | None = None,
    ) -> None:
        """Initialize encrypted file backend.

        Args:
            file_path: Path to the encrypted credentials file
                (default ``~/.atlassian-cli/credentials.enc``)
            validator: Remote validator used by :meth:`validate`

        Raises:
            PersistenceError: If the credentials directory cannot be created
        """
        self.file_path = Path(file_path) if file_path else default_credentials_path()
        self._validator = validator or RemoteValidator()
        self._key = derive_key()
        self._lock = ReadWriteLock()

        try:
            self.file_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to create credentials directory: {e}") from e

    @property
    def name(self) -> str:
        """Get backend identifier.

        Returns:
            Backend name constant "encrypted_file"
        """
        return "encrypted_file"

    @property
    def available(self) -> bool:
        """Usable whenever the credentials directory exists."""
        return self.file_path.parent.is_dir()

    def _load_all(self) -> dict[str, CredentialRecord]:
        """Read and decrypt the whole container.

        A missing file is an empty container.

        Raises:
            PersistenceError: If the file exists but cannot be read
            CryptoError: If the file cannot be decrypted or parsed
        """
        try:
            blob = self.file_path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise PersistenceError(f"Failed to read {self.file_path}: {e}") from e

        plaintext = open_sealed(self._key, blob)

        try:
            return _CONTAINER.validate_json(plaintext)
        except ValidationError as e:
            raise CryptoError("Decrypted credentials are not a valid credential map") from e

    def _save_all(self, credentials: dict[str, CredentialRecord]) -> None:
        """Encrypt and atomically write the whole container.

        Raises:
            PersistenceError: If the file cannot be written
        """
        blob = seal(self._key, _CONTAINER.dump_json(credentials))

        try:
            atomic_write(self.file_path, blob, mode=0o600)
        except OSError as e:
            raise PersistenceError(f"Failed to write {self.file_path}: {e}") from e

        log.debug("credentials_saved", path=str(self.file_path), entries=len(credentials))

    def store(self, record: CredentialRecord | Mapping[str, Any]) -> None:
        """Store credentials, replacing any existing record for the server.

        Raises:
            CredentialValidationError: If the record is malformed
            PersistenceError: If the file cannot be read or written
            CryptoError: If the existing file cannot be decrypted
        """
        creds = coerce_record(record)

        with self._lock.write_locked():
            credentials = self._load_all()
            credentials[creds.server_url] = creds
            self._save_all(credentials)

        log.info("credential_stored", backend=self.name, server_url=creds.server_url)

    def get(self, server_url: str) -> CredentialRecord:
        """Retrieve credentials for a server.

        Raises:
            CredentialNotFoundError: If nothing is stored for the server
            PersistenceError: If the file cannot be read
            CryptoError: If the file cannot be decrypted
        """
        with self._lock.read_locked():
            credentials = self._load_all()

        creds = credentials.get(server_url)
        if creds is None:
            raise CredentialNotFoundError("Credentials not found", reference=server_url)
        return creds

    def delete(self, server_url: str) -> None:
        """Delete credentials for a server.

        Removing the last entry removes the file. Deleting an absent entry
        is a no-op.

        Raises:
            PersistenceError: If the file cannot be read, written or removed
            CryptoError: If the file cannot be decrypted
        """
        with self._lock.write_locked():
            credentials = self._load_all()
            if credentials.pop(server_url, None) is None:
                return

            if credentials:
                self._save_all(credentials)
            else:
                try:
                    self.file_path.unlink(missing_ok=True)
                except OSError as e:
                    raise PersistenceError(f"Failed to delete {self.file_path}: {e}") from e

        log.info("credential_deleted", backend=self.name, server_url=server_url)

    def validate(
        self, server_url: str, email: str, token: str, timeout: float | None = None
    ) -> UserIdentity:
        return self._validator.validate(server_url, email, token, timeout=timeout)

    async def validate_async(
        self, server_url: str, email: str, token: str, timeout: float | None = None
    ) -> UserIdentity:
        return await self._validator.validate_async(server_url, email, token, timeout=timeout)
