"""Bearer token lifecycle: cache, buffer-zone expiry, refresh."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Optional

from vault.auth.models import DEFAULT_BUFFER_SECONDS, AccessToken
from vault.auth.provider import ClientCredentialsProvider

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class AuthTokenManager:
    """
    Caches one access token and replaces it when it nears expiry.

    Concurrent callers that find no valid token share a single exchange:
    the token is re-checked after the lock is acquired, so only the first
    waiter talks to the auth server.

    Usage:
        manager = AuthTokenManager(ClientCredentialsProvider(...))
        token = await manager.get_access_token()
        headers = {"Authorization": f"Bearer {token}"}
    """

    def __init__(
        self,
        provider: ClientCredentialsProvider,
        buffer_seconds: int = DEFAULT_BUFFER_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ):
        self._provider = provider
        self._token: Optional[AccessToken] = None
        self._lock = asyncio.Lock()
        self.buffer_seconds = buffer_seconds
        self._clock = clock or utc_now

    def is_token_valid(self) -> bool:
        """Pure check: a token is held and is outside the buffer zone."""
        token = self._token
        return token is not None and token.is_valid(self._clock(), self.buffer_seconds)

    async def get_access_token(self) -> str:
        """
        Get a valid access token, exchanging credentials if needed.

        Raises:
            AuthenticationError: If the auth server rejects the exchange
        """
        token = self._token
        if token is not None and token.is_valid(self._clock(), self.buffer_seconds):
            return token.value

        async with self._lock:
            # Another coroutine may have refreshed while we waited
            token = self._token
            if token is not None and token.is_valid(
                self._clock(), self.buffer_seconds
            ):
                logger.debug("Token was refreshed by another coroutine")
                return token.value

            return await self._exchange_and_store()

    async def refresh_access_token(self) -> str:
        """
        Unconditionally exchange credentials and replace the held token.

        Raises:
            AuthenticationError: If the auth server rejects the exchange
        """
        async with self._lock:
            logger.info("Forcing access token refresh")
            return await self._exchange_and_store()

    async def _exchange_and_store(self) -> str:
        # Caller holds self._lock
        response = await self._provider.exchange()
        self._token = AccessToken(
            value=response.access_token,
            obtained_at=self._clock(),
            expires_in_seconds=response.expires_in,
            token_type=response.token_type,
        )
        logger.info(
            "Access token valid until %s",
            self._token.expires_at.isoformat(),
            extra={"expires_in": response.expires_in},
        )
        return self._token.value

    async def close(self) -> None:
        await self._provider.close()


__all__ = ["AuthTokenManager", "utc_now"]
