"""Configuration for atlassian-cli."""

from atlassian_cli.config.settings import VaultSettings

__all__ = ["VaultSettings"]
