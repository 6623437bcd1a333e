"""Token manager protocol shared by every credential backend."""

from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import ValidationError

from atlassian_cli.exceptions import CredentialValidationError
from atlassian_cli.models.domain import CredentialRecord, UserIdentity


class TokenManager(Protocol):
    """Protocol defining the interface for credential storage backends.

    Callers hold a ``TokenManager`` and never a concrete backend, so the
    memory, keyring and encrypted-file backends can be swapped freely.
    """

    @property
    def name(self) -> str:
        """Backend identifier (e.g., 'keyring', 'encrypted_file')."""
        ...

    @property
    def available(self) -> bool:
        """Check if this backend is usable on the current system."""
        ...

    def store(self, record: CredentialRecord | Mapping[str, Any]) -> None:
        """Store credentials, replacing any record for the same server.

        Args:
            record: Credentials to store

        Raises:
            CredentialValidationError: If the record is malformed
            PersistenceError: If the backing store cannot be written
        """
        ...

    def get(self, server_url: str) -> CredentialRecord:
        """Retrieve credentials for a server.

        Args:
            server_url: Atlassian instance URL used when storing

        Returns:
            The stored record

        Raises:
            CredentialNotFoundError: If nothing is stored for ``server_url``
            PersistenceError: If the backing store cannot be read
            CryptoError: If stored data cannot be decrypted
        """
        ...

    def delete(self, server_url: str) -> None:
        """Delete credentials for a server.

        Deleting credentials that do not exist is not an error.

        Args:
            server_url: Atlassian instance URL
        """
        ...

    def validate(
        self, server_url: str, email: str, token: str, timeout: float | None = None
    ) -> UserIdentity:
        """Check credentials against the live Atlassian API.

        Never reads or writes stored credentials; store only after this
        succeeds.

        Args:
            timeout: Caller deadline in seconds, overriding the validator's default

        Raises:
            UnreachableError, AuthenticationError, UnexpectedStatusError,
            ProtocolError: See :class:`RemoteValidator`
        """
        ...

    async def validate_async(
        self, server_url: str, email: str, token: str, timeout: float | None = None
    ) -> UserIdentity:
        """Async variant of :meth:`validate`; cancelling the task aborts the request."""
        ...


def coerce_record(record: CredentialRecord | Mapping[str, Any]) -> CredentialRecord:
    """Validate ``record`` and return it as a :class:`CredentialRecord`.

    Records are re-validated even when already model instances, since
    ``model_construct`` skips validation.

    Raises:
        CredentialValidationError: If a field is missing or malformed
    """
    if isinstance(record, CredentialRecord):
        data = record.model_dump()
    elif isinstance(record, Mapping):
        data = dict(record)
    else:
        raise CredentialValidationError(
            f"credentials must be a CredentialRecord or mapping, not {type(record).__name__}"
        )

    try:
        return CredentialRecord.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "record" for err in e.errors())
        raise CredentialValidationError(
            f"invalid credentials: {fields}",
            reference=str(data.get("server_url") or "") or None,
            suggestion="Provide an absolute server URL, a valid email and a non-empty token",
        ) from e
