"""Live token validation against the Atlassian REST API.

A single ``GET /rest/api/3/myself`` with Basic auth tells us whether an
email / API token pair is accepted and who it belongs to. The validator
sends exactly one request per call and never retries; retry policy is
the caller's business and can be driven by ``error.retryable``.
"""

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from atlassian_cli.exceptions import (
    TOKEN_MANAGEMENT_URL,
    AuthenticationError,
    ProtocolError,
    UnexpectedStatusError,
    UnreachableError,
)
from atlassian_cli.models.domain import UserIdentity

log = structlog.get_logger(__name__)

MYSELF_PATH = "/rest/api/3/myself"
DEFAULT_TIMEOUT = 10.0


class RemoteValidator:
    """Checks credentials against an Atlassian instance.

    Construct one and hand it to the token managers that need it. The
    transports are injectable so tests can answer requests with
    ``httpx.MockTransport``.

    Example:
        >>> validator = RemoteValidator()
        >>> user = validator.validate(
        ...     "https://example.atlassian.net", "jdoe@example.com", "ATATT3x..."
        ... )
        >>> user.display_name
        'Jane Doe'
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize validator.

        Args:
            timeout: Per-request timeout in seconds
            transport: Optional sync transport (tests)
            async_transport: Optional async transport (tests)
        """
        self.timeout = timeout
        self._transport = transport
        self._async_transport = async_transport

    @staticmethod
    def endpoint(server_url: str) -> str:
        """Return the "who am I" URL for ``server_url``."""
        return f"{server_url.rstrip('/')}{MYSELF_PATH}"

    def validate(
        self,
        server_url: str,
        email: str,
        token: str,
        timeout: float | None = None,
    ) -> UserIdentity:
        """Validate credentials, blocking for at most the timeout.

        Args:
            server_url: Atlassian instance URL
            email: Account email
            token: API token
            timeout: Optional per-call deadline overriding the default

        Returns:
            The authenticated user's identity

        Raises:
            UnreachableError: No response (DNS, connection refused, timeout)
            AuthenticationError: Server answered 401
            UnexpectedStatusError: Any other non-2xx status
            ProtocolError: 2xx body is not a user profile
        """
        url = self.endpoint(server_url)
        log.debug("token_validation_started", url=url)

        try:
            with httpx.Client(
                timeout=self.timeout if timeout is None else timeout,
                transport=self._transport,
            ) as client:
                response = client.get(url, auth=(email, token), headers={"Accept": "application/json"})
        except httpx.DecodingError as e:
            raise self._undecodable(url, e) from e
        except (httpx.TransportError, httpx.InvalidURL) as e:
            raise self._unreachable(server_url, url, e) from e

        return self._classify(response, url)

    async def validate_async(
        self,
        server_url: str,
        email: str,
        token: str,
        timeout: float | None = None,
    ) -> UserIdentity:
        """Async variant of :meth:`validate`.

        Cancelling the awaiting task aborts the in-flight request.
        """
        url = self.endpoint(server_url)
        log.debug("token_validation_started", url=url)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout if timeout is None else timeout,
                transport=self._async_transport,
            ) as client:
                response = await client.get(url, auth=(email, token), headers={"Accept": "application/json"})
        except httpx.DecodingError as e:
            raise self._undecodable(url, e) from e
        except (httpx.TransportError, httpx.InvalidURL) as e:
            raise self._unreachable(server_url, url, e) from e

        return self._classify(response, url)

    @staticmethod
    def _unreachable(server_url: str, url: str, error: Exception) -> UnreachableError:
        log.warning("token_validation_unreachable", url=url, error=str(error))
        return UnreachableError(
            f"cannot reach {server_url}: {error}",
            url=url,
            suggestion="Check the URL and your network connection",
        )

    @staticmethod
    def _undecodable(url: str, error: Exception) -> ProtocolError:
        log.warning("token_validation_undecodable", url=url, error=str(error))
        return ProtocolError(f"failed to parse user info: {error}", url=url)

    @staticmethod
    def _classify(response: httpx.Response, url: str) -> UserIdentity:
        """Turn a response into a user identity or a classified error."""
        status = response.status_code

        if status == 401:
            log.info("token_validation_rejected", url=url)
            raise AuthenticationError(
                "authentication failed: invalid email or API token",
                status_code=status,
                url=url,
                suggestion=f"Generate a new token at {TOKEN_MANAGEMENT_URL}",
            )

        if not response.is_success:
            log.warning("token_validation_unexpected_status", url=url, status_code=status)
            raise UnexpectedStatusError(
                f"API request failed with status {status}: {response.text}",
                status_code=status,
                response_text=response.text,
                url=url,
            )

        try:
            payload: Any = response.json()
            identity = UserIdentity.model_validate(payload)
        except (ValueError, ValidationError) as e:
            raise ProtocolError(
                f"failed to parse user info: {e}",
                status_code=status,
                response_text=response.text,
                url=url,
            ) from e

        log.info("token_validation_succeeded", url=url, account_id=identity.account_id)
        return identity
