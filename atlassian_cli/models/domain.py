"""
Domain models for stored credentials and authenticated users.

These are the only entities the credential subsystem deals with. A
``CredentialRecord`` is created at login and persisted by a token manager;
a ``UserIdentity`` is produced by the remote validator and never stored.

Example:
    Building a record and reading a validation result::

        record = CredentialRecord(
            server_url="https://example.atlassian.net",
            email="jdoe@example.com",
            token="ATATT3x...",
        )
        identity = UserIdentity.model_validate(response.json())
        print(identity.display_name)
"""

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email


class CredentialRecord(BaseModel):
    """Credentials for one Atlassian server.

    ``server_url`` is the storage key: storing a second record for the same
    URL replaces the first. The URL is kept verbatim so that the key used
    to store is the key used to look up. The email is validated but also
    kept as entered.
    """

    model_config = ConfigDict(frozen=True)

    server_url: str = Field(..., min_length=1, description="Atlassian instance URL")
    email: str = Field(..., description="Account email used for Basic auth")
    token: str = Field(..., min_length=1, repr=False, description="API token")

    @field_validator("server_url")
    @classmethod
    def _require_absolute_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("must be an absolute URL such as https://your-domain.atlassian.net")
        return value

    @field_validator("email")
    @classmethod
    def _require_valid_email(cls, value: str) -> str:
        # Checked but not normalised: Basic auth sends the address as typed
        validate_email(value)
        return value


class UserIdentity(BaseModel):
    """Profile of the user a token authenticates as.

    Parsed from the ``/rest/api/3/myself`` response, whose field names
    (``accountId``, ``displayName``, ``emailAddress``) differ from ours.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    account_id: str = Field(..., alias="accountId", min_length=1)
    display_name: str = Field(..., alias="displayName")
    email: str = Field(default="", alias="emailAddress")
    active: bool = False
