"""Secure credential management for atlassian-cli.

This package provides:
- A uniform ``TokenManager`` protocol (store / get / delete / validate)
- Three interchangeable backends: OS keyring, encrypted file, memory
- Live token validation against the Atlassian REST API
- Backend selection with keyring → encrypted file → memory fallback

Example usage:

    from atlassian_cli.config import VaultSettings
    from atlassian_cli.credentials import create_token_manager

    manager = create_token_manager(VaultSettings.load())
    user = manager.validate(server_url, email, token)
    manager.store({"server_url": server_url, "email": email, "token": token})
"""

from atlassian_cli.credentials.backend import TokenManager, coerce_record
from atlassian_cli.credentials.encrypted_backend import (
    EncryptedFileTokenManager,
    default_credentials_path,
)
from atlassian_cli.credentials.factory import create_token_manager
from atlassian_cli.credentials.keyring_backend import KeyringTokenManager
from atlassian_cli.credentials.memory_backend import MemoryTokenManager
from atlassian_cli.credentials.validator import RemoteValidator

__all__ = [
    # Protocol
    "TokenManager",
    "coerce_record",
    # Backends
    "MemoryTokenManager",
    "KeyringTokenManager",
    "EncryptedFileTokenManager",
    "default_credentials_path",
    # Selection and validation
    "create_token_manager",
    "RemoteValidator",
]
