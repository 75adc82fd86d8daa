"""Tests for AuthTokenManager caching, expiry and refresh serialization."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from vault.auth.exceptions import AuthenticationError
from vault.auth.manager import AuthTokenManager
from vault.models import AuthTokenResponse


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


def _provider(*tokens, expires_in=300):
    provider = MagicMock()
    provider.exchange = AsyncMock(
        side_effect=[
            AuthTokenResponse(access_token=t, expires_in=expires_in) for t in tokens
        ]
    )
    provider.close = AsyncMock()
    return provider


class TestGetAccessToken:
    async def test_first_call_exchanges(self, clock):
        provider = _provider("tok-1")
        manager = AuthTokenManager(provider, clock=clock)

        assert await manager.get_access_token() == "tok-1"
        assert provider.exchange.await_count == 1
        assert manager.is_token_valid()

    async def test_valid_token_is_reused(self, clock):
        provider = _provider("tok-1", "tok-2")
        manager = AuthTokenManager(provider, clock=clock)

        await manager.get_access_token()
        clock.advance(100)
        assert await manager.get_access_token() == "tok-1"
        assert provider.exchange.await_count == 1

    async def test_token_in_buffer_zone_is_replaced(self, clock):
        provider = _provider("tok-1", "tok-2")
        manager = AuthTokenManager(provider, buffer_seconds=30, clock=clock)

        await manager.get_access_token()
        clock.advance(271)

        assert not manager.is_token_valid()
        assert await manager.get_access_token() == "tok-2"
        assert provider.exchange.await_count == 2

    async def test_concurrent_callers_share_one_exchange(self, clock):
        gate = asyncio.Event()

        async def slow_exchange():
            await gate.wait()
            return AuthTokenResponse(access_token="tok-shared", expires_in=300)

        provider = MagicMock()
        provider.exchange = AsyncMock(side_effect=slow_exchange)
        manager = AuthTokenManager(provider, clock=clock)

        tasks = [asyncio.create_task(manager.get_access_token()) for _ in range(5)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*tasks)

        assert results == ["tok-shared"] * 5
        assert provider.exchange.await_count == 1

    async def test_exchange_failure_propagates_and_keeps_no_token(self, clock):
        provider = MagicMock()
        provider.exchange = AsyncMock(side_effect=AuthenticationError(401, "nope"))
        manager = AuthTokenManager(provider, clock=clock)

        with pytest.raises(AuthenticationError):
            await manager.get_access_token()
        assert not manager.is_token_valid()


class TestRefreshAccessToken:
    async def test_refresh_always_exchanges(self, clock):
        provider = _provider("tok-1", "tok-2")
        manager = AuthTokenManager(provider, clock=clock)

        await manager.get_access_token()
        assert await manager.refresh_access_token() == "tok-2"
        assert await manager.get_access_token() == "tok-2"
        assert provider.exchange.await_count == 2


async def test_close_closes_provider(clock):
    provider = _provider("tok-1")
    manager = AuthTokenManager(provider, clock=clock)
    await manager.close()
    provider.close.assert_awaited_once()
