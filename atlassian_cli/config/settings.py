"""
Settings for credential storage, using pydantic-settings.

Values come from ``ATLASSIAN_CLI_*`` environment variables, and command
line options override them:

    ATLASSIAN_CLI_BACKEND=encrypted
    ATLASSIAN_CLI_CREDENTIALS_FILE=/secure/creds.enc
    ATLASSIAN_CLI_VALIDATION_TIMEOUT=5
    ATLASSIAN_CLI_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from atlassian_cli.enums import BackendType
from atlassian_cli.exceptions import ConfigurationError


class VaultSettings(BaseSettings):
    """Credential vault settings."""

    model_config = SettingsConfigDict(
        env_prefix="ATLASSIAN_CLI_",
        case_sensitive=False,
    )

    backend: BackendType = Field(default=BackendType.AUTO, description="Credential storage backend")
    credentials_file: Path | None = Field(
        default=None,
        description="Encrypted credentials file (default ~/.atlassian-cli/credentials.enc)",
    )
    validation_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for token validation requests"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Minimum log level"
    )

    @classmethod
    def load(cls, **overrides: Any) -> VaultSettings:
        """Build settings from the environment plus explicit overrides.

        ``None`` overrides are ignored so unset CLI options fall through to
        the environment.

        Raises:
            ConfigurationError: If a value is invalid
        """
        values = {key: value for key, value in overrides.items() if value is not None}
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings: {e}") from e
