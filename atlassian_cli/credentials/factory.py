"""Token manager selection with tiered fallback."""

import structlog

from atlassian_cli.config.settings import VaultSettings
from atlassian_cli.credentials.backend import TokenManager
from atlassian_cli.credentials.encrypted_backend import EncryptedFileTokenManager
from atlassian_cli.credentials.keyring_backend import KeyringTokenManager
from atlassian_cli.credentials.memory_backend import MemoryTokenManager
from atlassian_cli.credentials.validator import RemoteValidator
from atlassian_cli.enums import BackendType
from atlassian_cli.exceptions import BackendNotAvailableError, CredentialError

log = structlog.get_logger(__name__)


def create_token_manager(
    settings: VaultSettings,
    validator: RemoteValidator | None = None,
) -> TokenManager:
    """Create the token manager described by ``settings``.

    With ``backend=auto`` the priority is keyring, then encrypted file, then
    memory. An explicitly requested backend is returned as-is or fails.

    Args:
        settings: Vault settings
        validator: Shared remote validator (built from settings if omitted)

    Raises:
        BackendNotAvailableError: If an explicitly requested keyring is unusable
        PersistenceError: If the encrypted file directory cannot be created
    """
    validator = validator or RemoteValidator(timeout=settings.validation_timeout)

    if settings.backend == BackendType.MEMORY:
        return MemoryTokenManager(validator=validator)

    if settings.backend == BackendType.ENCRYPTED:
        return EncryptedFileTokenManager(settings.credentials_file, validator=validator)

    keyring_manager = KeyringTokenManager(validator=validator)

    if settings.backend == BackendType.KEYRING:
        if not keyring_manager.available:
            raise BackendNotAvailableError(
                "Keyring backend is not available",
                suggestion="Use --backend encrypted on systems without a keyring",
            )
        return keyring_manager

    if keyring_manager.available:
        log.debug("token_manager_selected", backend=keyring_manager.name)
        return keyring_manager

    try:
        encrypted_manager = EncryptedFileTokenManager(settings.credentials_file, validator=validator)
    except CredentialError as e:
        log.warning("encrypted_backend_unavailable", error=e.message)
    else:
        log.info("token_manager_selected", backend=encrypted_manager.name, reason="keyring_unavailable")
        return encrypted_manager

    log.warning("token_manager_selected", backend="memory", reason="no_persistent_backend")
    return MemoryTokenManager(validator=validator)
