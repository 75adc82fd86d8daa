"""Client-credentials token exchange against an OpenID Connect server."""

import logging

import aiohttp
from pydantic import ValidationError

from vault.auth.exceptions import (
    AuthenticationError,
    InvalidCredentialsConfigError,
    MalformedTokenResponseError,
)
from vault.models import AuthTokenResponse

logger = logging.getLogger(__name__)

AUTH_TOKEN_PATH = "protocol/openid-connect/token"

DEFAULT_AUTH_TIMEOUT = aiohttp.ClientTimeout(total=15, connect=15, sock_read=15)


def join_url(base: str, path: str) -> str:
    """Join a base URL and a relative path with exactly one slash."""
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


class ClientCredentialsProvider:
    """
    Performs the client_credentials grant.

    There is no caching and no retry here; AuthTokenManager owns both
    concerns. Network failures propagate unchanged.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        auth_url: str,
        timeout: aiohttp.ClientTimeout | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Initialize provider.

        Args:
            client_id: OAuth2 client ID
            client_secret: OAuth2 client secret
            auth_url: Realm base URL; the token path is appended
            timeout: Per-request timeout (default: 15s total/connect/read)
            session: Optional shared session; created lazily when omitted

        Raises:
            InvalidCredentialsConfigError: If required parameters are missing
        """
        if not all([client_id, client_secret, auth_url]):
            raise InvalidCredentialsConfigError(
                "client_id, client_secret, and auth_url are required"
            )

        self.client_id = client_id
        self._client_secret = client_secret
        self.token_url = join_url(auth_url, AUTH_TOKEN_PATH)
        self.timeout = timeout or DEFAULT_AUTH_TIMEOUT
        self._session = session
        self._owns_session = session is None

        logger.debug(
            "Initialized client-credentials provider",
            extra={"http_url": self.token_url},
        )

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP client session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def exchange(self) -> AuthTokenResponse:
        """
        Exchange client credentials for an access token.

        Returns:
            Parsed token response

        Raises:
            AuthenticationError: Non-2xx response (status and body attached)
            MalformedTokenResponseError: 2xx response without a usable token
            aiohttp.ClientError, asyncio.TimeoutError: Network failures
        """
        session = await self._ensure_session()

        form = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self._client_secret,
        }

        async with session.post(
            self.token_url,
            data=form,
            timeout=self.timeout,
        ) as response:
            if not 200 <= response.status < 300:
                error_text = await response.text()
                logger.error(
                    "Token exchange failed: HTTP %s",
                    response.status,
                    extra={
                        "http_status": response.status,
                        "error_message": error_text[:200],
                    },
                )
                raise AuthenticationError(response.status, error_text)

            try:
                body = await response.json(content_type=None)
                token = AuthTokenResponse.model_validate(body)
            except (ValueError, ValidationError) as e:
                raise MalformedTokenResponseError(
                    "Auth server returned an unreadable token response", cause=e
                ) from e

        logger.debug(
            "Acquired access token",
            extra={"expires_in": token.expires_in},
        )
        return token

    async def close(self) -> None:
        """Close HTTP client session if this provider created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()


__all__ = ["ClientCredentialsProvider", "AUTH_TOKEN_PATH", "join_url"]
