"""Custom exception hierarchy for atlassian-cli.

Every error carries a ``kind`` (see :class:`atlassian_cli.enums.ErrorKind`)
so callers, including retry helpers, can classify failures without
inspecting message text.

Exception Hierarchy:
    AtlassianCliError (base)
    ├── ConfigurationError
    ├── CredentialError
    │   ├── CredentialValidationError
    │   ├── CredentialNotFoundError
    │   ├── PersistenceError
    │   ├── CryptoError
    │   └── BackendNotAvailableError
    └── ExternalServiceError
        ├── UnreachableError
        ├── AuthenticationError
        ├── UnexpectedStatusError
        └── ProtocolError

Example Usage:
    >>> from atlassian_cli.exceptions import CredentialNotFoundError
    >>> try:
    ...     creds = manager.get("https://example.atlassian.net")
    ... except CredentialNotFoundError:
    ...     click.echo("Run 'atlassian-cli auth login' first")
"""

from typing import ClassVar

from atlassian_cli.enums import ErrorKind

TOKEN_MANAGEMENT_URL = "https://id.atlassian.com/manage/api-tokens"


class AtlassianCliError(Exception):
    """Base exception for all atlassian-cli errors.

    Attributes:
        message: Human-readable error description
        kind: Machine-checkable error classification
    """

    kind: ClassVar[ErrorKind] = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """Whether repeating the same call could plausibly succeed."""
        return False


class ConfigurationError(AtlassianCliError):
    """Settings are missing or invalid."""

    kind = ErrorKind.CONFIGURATION


class CredentialError(AtlassianCliError):
    """Credential storage errors.

    Base class for failures of the local credential backends. Subclasses:
    - CredentialValidationError: Record shape is invalid
    - CredentialNotFoundError: No record stored for a server
    - PersistenceError: Reading or writing the backing store failed
    - CryptoError: Decryption or authentication of stored data failed
    - BackendNotAvailableError: Storage backend unavailable

    Attributes:
        message: Human-readable error description
        reference: The server URL (or other key) the error relates to
        suggestion: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        reference: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            reference: The key that failed, usually a server URL
            suggestion: Optional suggestion for resolution
        """
        self.reference = reference
        self.suggestion = suggestion

        full_message = message
        if reference:
            full_message = f"{message} (server: {reference})"
        if suggestion:
            full_message = f"{full_message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        # Preserve original message (super sets self.message to full_message)
        self.message = message


class CredentialValidationError(CredentialError):
    """Credential record is malformed (bad URL, email or empty token)."""

    kind = ErrorKind.VALIDATION


class CredentialNotFoundError(CredentialError):
    """No credentials are stored for the requested server."""

    kind = ErrorKind.NOT_FOUND


class PersistenceError(CredentialError):
    """I/O failure while reading or writing the credential store."""

    kind = ErrorKind.PERSISTENCE


class CryptoError(CredentialError):
    """Stored credentials could not be decrypted or failed authentication.

    Never raised for a missing store: an absent file is an empty store.
    """

    kind = ErrorKind.CRYPTO

    def __init__(
        self,
        message: str,
        reference: str | None = None,
        suggestion: str | None = (
            "The credentials file may be corrupted or this machine's identity "
            "(hostname or user) changed. Delete it and run 'auth login' again"
        ),
    ) -> None:
        super().__init__(message, reference=reference, suggestion=suggestion)


class BackendNotAvailableError(CredentialError):
    """Requested backend is not available on this system."""

    kind = ErrorKind.BACKEND_UNAVAILABLE


class ExternalServiceError(AtlassianCliError):
    """Communication with the Atlassian API failed.

    Attributes:
        message: Error message
        status_code: HTTP status code, when a response was received
        response_text: Raw response body, when a response was received
        url: The request URL
        suggestion: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
        url: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
            url: Request URL (if applicable)
            suggestion: Optional suggestion for resolution
        """
        self.status_code = status_code
        self.response_text = response_text
        self.url = url
        self.suggestion = suggestion

        full_message = message
        if status_code and str(status_code) not in message:
            full_message = f"{message} (HTTP {status_code})"
        if suggestion:
            full_message = f"{full_message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        self.message = message


class UnreachableError(ExternalServiceError):
    """No response was received from the server (DNS, refused, timeout)."""

    kind = ErrorKind.UNREACHABLE

    @property
    def retryable(self) -> bool:
        return True


class AuthenticationError(ExternalServiceError):
    """The server rejected the email / API token pair (HTTP 401)."""

    kind = ErrorKind.AUTHENTICATION


class UnexpectedStatusError(ExternalServiceError):
    """The server answered with a non-2xx status other than 401."""

    kind = ErrorKind.UNEXPECTED_STATUS

    @property
    def retryable(self) -> bool:
        return self.status_code is not None and (
            self.status_code == 429 or self.status_code >= 500
        )


class ProtocolError(ExternalServiceError):
    """A 2xx response body could not be parsed into a user identity."""

    kind = ErrorKind.PROTOCOL
