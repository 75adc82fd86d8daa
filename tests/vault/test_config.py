"""Tests for vault configuration loading."""

import aiohttp
import pytest

from core.errors.exceptions import ConfigurationError
from vault.config import VaultConfig, _expand_env_vars, load_config

VALID = {
    "client_id": "cid",
    "client_secret": "secret",
    "api_url": "https://vault.example.com",
    "auth_url": "https://auth.example.com/realms/vault",
}


@pytest.fixture(autouse=True)
def _clear_vault_env(monkeypatch):
    for name in [
        "VAULT_CLIENT_ID",
        "VAULT_CLIENT_SECRET",
        "VAULT_API_URL",
        "VAULT_AUTH_URL",
        "VAULT_ENABLE_CACHE",
        "VAULT_MAX_RETRIES",
    ]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    def _write(text):
        path = tmp_path / "config.yaml"
        path.write_text(text)
        return path

    return _write


class TestVaultConfig:
    def test_defaults(self):
        config = VaultConfig(**VALID)
        assert config.enable_encryption
        assert config.enable_cache
        assert not config.debug_mode
        assert config.max_retries == 1
        assert config.initial_delay_ms == 1000
        assert config.token_buffer_seconds == 30
        config.validate()

    def test_coerces_string_values(self):
        config = VaultConfig(
            **VALID, enable_cache="false", max_retries="3", read_timeout_seconds="2.5"
        )
        assert config.enable_cache is False
        assert config.max_retries == 3
        assert config.read_timeout_seconds == 2.5

    def test_bad_boolean(self):
        with pytest.raises(ConfigurationError, match="enable_cache"):
            VaultConfig(**VALID, enable_cache="maybe")

    def test_bad_integer(self):
        with pytest.raises(ConfigurationError, match="max_retries"):
            VaultConfig(**VALID, max_retries="lots")

    def test_missing_required(self):
        config = VaultConfig(api_url="https://x", auth_url="https://y")
        with pytest.raises(ConfigurationError, match="client_id, client_secret"):
            config.validate()

    def test_bad_scheme(self):
        config = VaultConfig(**{**VALID, "api_url": "vault.example.com"})
        with pytest.raises(ConfigurationError, match="api_url"):
            config.validate()

    def test_negative_retries(self):
        with pytest.raises(ConfigurationError, match="max_retries"):
            VaultConfig(**VALID, max_retries=-1).validate()

    def test_client_timeout(self):
        timeout = VaultConfig(**VALID, connect_timeout_seconds=3).client_timeout()
        assert isinstance(timeout, aiohttp.ClientTimeout)
        assert timeout.connect == 3
        assert timeout.total == 15

    def test_repr_hides_secret(self):
        assert "secret" not in repr(VaultConfig(**VALID))


class TestExpandEnvVars:
    def test_expands_set_variable(self, monkeypatch):
        monkeypatch.setenv("VAULT_TEST_SECRET", "s3cr3t")
        assert _expand_env_vars({"a": ["${VAULT_TEST_SECRET}"]}) == {"a": ["s3cr3t"]}

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("VAULT_TEST_UNSET", raising=False)
        assert _expand_env_vars("${VAULT_TEST_UNSET:-fallback}") == "fallback"

    def test_unset_without_default_is_left_alone(self, monkeypatch):
        monkeypatch.delenv("VAULT_TEST_UNSET", raising=False)
        assert _expand_env_vars("${VAULT_TEST_UNSET}") == "${VAULT_TEST_UNSET}"


class TestLoadConfig:
    def test_loads_vault_section(self, config_file):
        path = config_file(
            """
vault:
  client_id: cid
  client_secret: secret
  api_url: https://vault.example.com
  auth_url: https://auth.example.com
  enable_encryption: false
  max_retries: 2
"""
        )
        config = load_config(path)
        assert config.client_id == "cid"
        assert config.enable_encryption is False
        assert config.max_retries == 2

    def test_env_overrides_file(self, config_file, monkeypatch):
        path = config_file(
            "vault:\n  client_id: cid\n  client_secret: s\n"
            "  api_url: https://a\n  auth_url: https://b\n  max_retries: 2\n"
        )
        monkeypatch.setenv("VAULT_MAX_RETRIES", "4")
        monkeypatch.setenv("VAULT_ENABLE_CACHE", "no")

        config = load_config(path)

        assert config.max_retries == 4
        assert config.enable_cache is False

    def test_overrides_win(self, config_file, monkeypatch):
        path = config_file(
            "client_id: cid\nclient_secret: s\napi_url: https://a\nauth_url: https://b\n"
        )
        monkeypatch.setenv("VAULT_MAX_RETRIES", "4")

        config = load_config(path, overrides={"max_retries": 0})

        assert config.max_retries == 0

    def test_expands_placeholders(self, config_file, monkeypatch):
        monkeypatch.setenv("MY_VAULT_SECRET", "from-env")
        path = config_file(
            "vault:\n  client_id: cid\n  client_secret: ${MY_VAULT_SECRET}\n"
            "  api_url: https://a\n  auth_url: https://b\n"
        )
        assert load_config(path).client_secret == "from-env"

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_result_raises(self, config_file):
        path = config_file("vault:\n  client_id: cid\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_env_only(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for key, value in VALID.items():
            monkeypatch.setenv(f"VAULT_{key.upper()}", value)

        config = load_config()

        assert config.api_url == VALID["api_url"]
