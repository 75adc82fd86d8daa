"""Tests for VaultClient wiring and routing."""

import json
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.errors.exceptions import ConfigurationError
from vault import client as client_module
from vault.client import VaultClient, get_client, initialize, reset_client
from vault.config import VaultConfig
from vault.models import AuthTokenResponse
from vault.results import Success


def _config(**overrides):
    values = {
        "client_id": "cid",
        "client_secret": "secret",
        "api_url": "https://vault.example.com",
        "auth_url": "https://auth.example.com/realms/vault",
    }
    values.update(overrides)
    return VaultConfig(**values)


@pytest.fixture(autouse=True)
def _reset_default_client():
    reset_client()
    yield
    reset_client()


@pytest.fixture
def package_loggers():
    loggers = [logging.getLogger(name) for name in client_module.DEBUG_LOGGERS]
    for log in loggers:
        log.setLevel(logging.NOTSET)
    yield
    for log in loggers:
        log.setLevel(logging.NOTSET)


def _stub_repository(client):
    repo = MagicMock()
    for name in [
        "tokenize",
        "detokenize",
        "batch_tokenize",
        "batch_detokenize",
        "tokenize_with_encryption",
        "detokenize_with_encryption",
        "batch_tokenize_with_encryption",
        "batch_detokenize_with_encryption",
    ]:
        setattr(repo, name, AsyncMock(return_value=Success(name)))
    client._repository = repo
    return repo


class TestRouting:
    async def test_encrypted_routes_when_enabled(self):
        client = VaultClient(_config(enable_encryption=True))
        _stub_repository(client)

        assert (await client.tokenize("v")).payload == "tokenize_with_encryption"
        assert (await client.detokenize("t")).payload == "detokenize_with_encryption"
        assert (
            await client.batch_tokenize(["v"])
        ).payload == "batch_tokenize_with_encryption"
        assert (
            await client.batch_detokenize(["t"])
        ).payload == "batch_detokenize_with_encryption"

    async def test_plain_routes_when_disabled(self):
        client = VaultClient(_config(enable_encryption=False))
        _stub_repository(client)

        assert (await client.tokenize("v")).payload == "tokenize"
        assert (await client.detokenize("t")).payload == "detokenize"
        assert (await client.batch_tokenize(["v"])).payload == "batch_tokenize"
        assert (await client.batch_detokenize(["t"])).payload == "batch_detokenize"


class TestConstruction:
    def test_invalid_config_raises(self):
        with pytest.raises(ConfigurationError):
            VaultClient(_config(client_id=""))

    def test_debug_mode_lowers_package_loggers_only(self, package_loggers):
        root = logging.getLogger()
        handler = logging.NullHandler()
        root_level = root.level
        root.addHandler(handler)
        try:
            VaultClient(_config(debug_mode=True))
            assert handler in root.handlers
            assert root.level == root_level
        finally:
            root.removeHandler(handler)
        assert logging.getLogger("vault").level == logging.DEBUG
        assert logging.getLogger("core").level == logging.DEBUG

    def test_package_loggers_untouched_by_default(self, package_loggers):
        VaultClient(_config())
        assert logging.getLogger("vault").level == logging.NOTSET
        assert logging.getLogger("core").level == logging.NOTSET

    def test_retry_settings_applied(self):
        client = VaultClient(_config(max_retries=3, initial_delay_ms=10))
        assert client._retry_handler.max_retries == 3
        assert client._retry_handler.config.initial_delay_ms == 10


class TestEndToEnd:
    """Full stack with the HTTP layer replaced at the transport and provider."""

    @staticmethod
    def _wire(client, api_bodies):
        client._provider.exchange = AsyncMock(
            return_value=AuthTokenResponse(access_token="access", expires_in=300)
        )
        responses = []
        for body in api_bodies:
            resp = AsyncMock()
            resp.status = 200
            resp.text = AsyncMock(return_value=json.dumps(body))
            resp.__aenter__ = AsyncMock(return_value=resp)
            resp.__aexit__ = AsyncMock(return_value=False)
            responses.append(resp)
        session = MagicMock()
        session.closed = False
        session.post = MagicMock(side_effect=responses)
        client._api._session = session
        client._api._owns_session = False
        return session

    async def test_tokenize_then_detokenize_from_cache(self):
        client = VaultClient(_config(enable_encryption=False))
        session = self._wire(client, [{"token": "tok-1", "newlyCreated": True}])

        tokenized = await client.tokenize("4111111111111111")
        detokenized = await client.detokenize("tok-1")

        assert tokenized.payload.token == "tok-1"
        assert detokenized.payload.value == "4111111111111111"
        assert session.post.call_count == 1

    async def test_clear_cache_forces_remote_call(self):
        client = VaultClient(_config(enable_encryption=False))
        session = self._wire(
            client,
            [{"token": "tok-1"}, {"token": "tok-1", "exists": True}],
        )

        await client.tokenize("v")
        client.clear_cache()
        second = await client.tokenize("v")

        assert second.payload.exists
        assert session.post.call_count == 2

    async def test_close_closes_collaborators(self):
        client = VaultClient(_config())
        client._api.close = AsyncMock()
        client._auth_manager.close = AsyncMock()

        async with client:
            pass

        client._api.close.assert_awaited_once()
        client._auth_manager.close.assert_awaited_once()


class TestDefaultClient:
    def test_get_before_initialize_raises(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            get_client()

    def test_initialize_is_idempotent(self):
        first = initialize(_config())
        second = initialize(_config(client_id="other"))
        assert first is second
        assert get_client() is first
        assert first.config.client_id == "cid"
