"""Domain models for atlassian-cli."""

from atlassian_cli.models.domain import CredentialRecord, UserIdentity

__all__ = ["CredentialRecord", "UserIdentity"]
