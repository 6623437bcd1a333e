"""Enumerations for atlassian-cli credential backends and error kinds."""

from enum import Enum


class BackendType(str, Enum):
    """Credential storage backends supported by atlassian-cli.

    - auto: OS keyring if usable, then the encrypted file, then memory
    - keyring: OS secret store (macOS Keychain, Secret Service, Windows Locker)
    - encrypted: AES-256-GCM file under the user's home directory
    - memory: volatile, process-local storage (tests and last-resort fallback)
    """

    AUTO = "auto"
    KEYRING = "keyring"
    ENCRYPTED = "encrypted"
    MEMORY = "memory"

    def __str__(self) -> str:
        return self.value


class ErrorKind(str, Enum):
    """Machine-checkable classification carried by every atlassian-cli error.

    Callers branch on ``error.kind`` instead of matching on message text;
    the text is reserved for humans.
    """

    INTERNAL = "internal"
    CONFIGURATION = "configuration"

    # Local credential storage
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERSISTENCE = "persistence"
    CRYPTO = "crypto"
    BACKEND_UNAVAILABLE = "backend_unavailable"

    # Remote token validation
    UNREACHABLE = "unreachable"
    AUTHENTICATION = "authentication"
    UNEXPECTED_STATUS = "unexpected_status"
    PROTOCOL = "protocol"

    def __str__(self) -> str:
        return self.value
