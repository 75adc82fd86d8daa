"""Shared fixtures for operation tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from core.resilience.retry import RetryConfig, RetryHandler
from vault.cache.manager import CacheManager
from vault.cache.token_cache import TokenCache
from vault.encryption.strategy import NoEncryptionStrategy


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def auth():
    manager = MagicMock()
    manager.get_access_token = AsyncMock(return_value="access-1")
    manager.refresh_access_token = AsyncMock(return_value="access-2")
    return manager


@pytest.fixture
def api():
    client = MagicMock()
    client.post = AsyncMock()
    return client


@pytest.fixture
def token_cache():
    return TokenCache()


@pytest.fixture
def cache_manager(token_cache):
    return CacheManager(token_cache)


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def make_operation(auth, api, cache_manager, sleep):
    """Build an operation with plain transport and a no-wait retry handler."""

    def _make(op_cls, strategy=None, max_retries=1):
        handler = RetryHandler(
            auth, RetryConfig(max_retries=max_retries), sleep=sleep
        )
        return op_cls(
            auth, api, strategy or NoEncryptionStrategy(), handler, cache_manager
        )

    return _make
