"""
Public entry point for the vault tokenization client.

Usage:
    from vault import VaultClient, load_config

    async with VaultClient(load_config()) as client:
        result = await client.tokenize("4111111111111111")
        if result.is_success:
            token = result.payload.token
"""

import logging
import threading
from typing import Any, Optional

from core.resilience.retry import RetryConfig, RetryHandler
from vault.auth.manager import AuthTokenManager
from vault.auth.provider import ClientCredentialsProvider
from vault.cache.manager import CacheManager
from vault.cache.token_cache import TokenCache
from vault.config import VaultConfig, load_config
from vault.encryption.manager import EncryptionManager
from vault.repository import TokenRepository
from vault.results import RepoResult
from vault.transport import VaultApiClient

logger = logging.getLogger(__name__)

# Package loggers lowered to DEBUG when debug_mode is set
DEBUG_LOGGERS = ("vault", "core")


class VaultClient:
    """
    Tokenize and detokenize values against a vault service.

    Every call returns a RepoResult: Success with the typed response, or
    Error with a message. Batch calls outside the endpoint limits raise
    BatchValidationError before any I/O.
    """

    def __init__(self, config: VaultConfig):
        config.validate()
        self.config = config

        if config.debug_mode:
            for name in DEBUG_LOGGERS:
                logging.getLogger(name).setLevel(logging.DEBUG)

        timeout = config.client_timeout()

        self._provider = ClientCredentialsProvider(
            client_id=config.client_id,
            client_secret=config.client_secret,
            auth_url=config.auth_url,
            timeout=timeout,
        )
        self._auth_manager = AuthTokenManager(
            self._provider, buffer_seconds=config.token_buffer_seconds
        )
        self._encryption_manager = EncryptionManager(enabled=config.enable_encryption)
        self._token_cache = TokenCache(enabled=config.enable_cache)
        self._api = VaultApiClient(config.api_url, timeout=timeout)
        self._retry_handler = RetryHandler(
            self._auth_manager,
            RetryConfig(
                max_retries=config.max_retries,
                initial_delay_ms=config.initial_delay_ms,
            ),
        )
        self._repository = TokenRepository(
            auth_manager=self._auth_manager,
            api=self._api,
            encryption_manager=self._encryption_manager,
            cache_manager=CacheManager(self._token_cache),
            retry_handler=self._retry_handler,
        )

        logger.info(
            "Vault client initialized",
            extra={
                "http_url": config.api_url,
                "encryption_enabled": config.enable_encryption,
                "cache_enabled": config.enable_cache,
            },
        )

    async def __aenter__(self) -> "VaultClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def repository(self) -> TokenRepository:
        return self._repository

    async def tokenize(self, value: str) -> RepoResult:
        """Tokenize one value; Success payload is a TokenizeResponse."""
        if self.config.enable_encryption:
            return await self._repository.tokenize_with_encryption(value)
        return await self._repository.tokenize(value)

    async def detokenize(self, token: str) -> RepoResult:
        """Resolve one token; Success payload is a DetokenizeResponse."""
        if self.config.enable_encryption:
            return await self._repository.detokenize_with_encryption(token)
        return await self._repository.detokenize(token)

    async def batch_tokenize(self, values: list[str]) -> RepoResult:
        """Tokenize up to 1000 values, preserving the order of first sight."""
        if self.config.enable_encryption:
            return await self._repository.batch_tokenize_with_encryption(values)
        return await self._repository.batch_tokenize(values)

    async def batch_detokenize(self, tokens: list[str]) -> RepoResult:
        """Resolve up to 10000 tokens."""
        if self.config.enable_encryption:
            return await self._repository.batch_detokenize_with_encryption(tokens)
        return await self._repository.batch_detokenize(tokens)

    def clear_cache(self) -> None:
        logger.debug("Clearing token cache")
        self._repository.clear_cache()

    async def close(self) -> None:
        """Close the HTTP sessions owned by the API and auth clients."""
        await self._api.close()
        await self._auth_manager.close()
        logger.debug("Vault client closed")


# Singleton instance for default usage
_default_client: VaultClient | None = None
_client_lock = threading.Lock()


def initialize(
    config: Optional[VaultConfig] = None, **overrides: Any
) -> VaultClient:
    """
    Create the default VaultClient, or return it if it already exists.

    Args:
        config: Explicit configuration; loaded with load_config() when omitted
        **overrides: Field overrides applied when loading configuration

    Returns:
        Default VaultClient instance
    """
    global _default_client

    if _default_client is None:
        with _client_lock:
            if _default_client is None:
                if config is None:
                    config = load_config(overrides=overrides or None)
                _default_client = VaultClient(config)

    return _default_client


def get_client() -> VaultClient:
    """
    Get the default VaultClient.

    Raises:
        RuntimeError: If initialize() has not been called
    """
    if _default_client is None:
        raise RuntimeError("VaultClient is not initialized. Call initialize() first.")
    return _default_client


def reset_client() -> None:
    """Forget the default client (useful for testing); does not close it."""
    global _default_client
    _default_client = None


__all__ = ["VaultClient", "initialize", "get_client", "reset_client"]
