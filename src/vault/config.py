"""Vault client configuration from YAML, environment variables, and overrides.

Precedence (highest first):
    1. ``overrides`` passed to load_config()
    2. ``VAULT_*`` environment variables
    3. Values from the YAML file (``vault:`` section or top level)
    4. Dataclass defaults

Environment variables ARE supported inside the YAML file using ${VAR_NAME}
and ${VAR_NAME:-default} syntax.
"""

import logging
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import aiohttp
import yaml

from core.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "VAULT_"

# Default config file: config/config.yaml relative to the working directory
DEFAULT_CONFIG_FILE = Path("config") / "config.yaml"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-(([^}]*))?)?\}")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return _ENV_VAR_PATTERN.sub(replacer, data)
    else:
        return data


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _to_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", cause=e)


def _to_float(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}", cause=e)


@dataclass
class VaultConfig:
    """Settings for one VaultClient.

    Configuration structure (config/config.yaml):
        vault:
          client_id: ...
          client_secret: ${VAULT_CLIENT_SECRET}
          api_url: https://vault.example.com
          auth_url: https://auth.example.com/realms/vault
          enable_encryption: true
          enable_cache: true
          debug_mode: false
          max_retries: 1
          initial_delay_ms: 1000
          connect_timeout_seconds: 15
          read_timeout_seconds: 15
          total_timeout_seconds: 15
          token_buffer_seconds: 30
    """

    client_id: str = ""
    client_secret: str = ""
    api_url: str = ""
    auth_url: str = ""
    enable_encryption: bool = True
    enable_cache: bool = True
    debug_mode: bool = False
    max_retries: int = 1
    initial_delay_ms: int = 1000
    connect_timeout_seconds: float = 15
    read_timeout_seconds: float = 15
    total_timeout_seconds: float = 15
    token_buffer_seconds: int = 30

    def __post_init__(self):
        # YAML and env values arrive as strings or mixed types
        self.client_id = str(self.client_id or "")
        self.client_secret = str(self.client_secret or "")
        self.api_url = str(self.api_url or "")
        self.auth_url = str(self.auth_url or "")
        self.enable_encryption = _to_bool("enable_encryption", self.enable_encryption)
        self.enable_cache = _to_bool("enable_cache", self.enable_cache)
        self.debug_mode = _to_bool("debug_mode", self.debug_mode)
        self.max_retries = _to_int("max_retries", self.max_retries)
        self.initial_delay_ms = _to_int("initial_delay_ms", self.initial_delay_ms)
        self.connect_timeout_seconds = _to_float(
            "connect_timeout_seconds", self.connect_timeout_seconds
        )
        self.read_timeout_seconds = _to_float(
            "read_timeout_seconds", self.read_timeout_seconds
        )
        self.total_timeout_seconds = _to_float(
            "total_timeout_seconds", self.total_timeout_seconds
        )
        self.token_buffer_seconds = _to_int(
            "token_buffer_seconds", self.token_buffer_seconds
        )

    def validate(self) -> None:
        """Validate required fields, URL schemes, and numeric ranges.

        Raises:
            ConfigurationError: On the first invalid setting
        """
        missing = [
            name
            for name in ("client_id", "client_secret", "api_url", "auth_url")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required vault settings: {', '.join(missing)}",
                context={"missing": missing},
            )

        for name in ("api_url", "auth_url"):
            url = getattr(self, name)
            if not url.startswith(("http://", "https://")):
                raise ConfigurationError(
                    f"{name} must start with http:// or https://, got: {url!r}"
                )

        self._validate_min("max_retries", 0, inclusive=True)
        self._validate_min("initial_delay_ms", 0, inclusive=True)
        self._validate_min("token_buffer_seconds", 0, inclusive=True)
        for name in (
            "connect_timeout_seconds",
            "read_timeout_seconds",
            "total_timeout_seconds",
        ):
            self._validate_min(name, 0, inclusive=False)

    def _validate_min(self, key: str, min_value: float, inclusive: bool) -> None:
        value = getattr(self, key)
        if inclusive and value < min_value:
            raise ConfigurationError(f"{key} must be >= {min_value}, got {value}")
        elif not inclusive and value <= min_value:
            raise ConfigurationError(f"{key} must be > {min_value}, got {value}")

    def client_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(
            total=self.total_timeout_seconds,
            connect=self.connect_timeout_seconds,
            sock_read=self.read_timeout_seconds,
        )

    def __repr__(self) -> str:
        return (
            f"VaultConfig(client_id={self.client_id!r}, api_url={self.api_url!r}, "
            f"auth_url={self.auth_url!r}, enable_encryption={self.enable_encryption}, "
            f"enable_cache={self.enable_cache}, max_retries={self.max_retries})"
        )


def _field_names() -> list[str]:
    return [f.name for f in fields(VaultConfig)]


def _env_overrides() -> Dict[str, Any]:
    """Collect VAULT_<FIELD> environment variables."""
    found = {}
    for name in _field_names():
        value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            found[name] = value
    return found


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> VaultConfig:
    """Load and validate vault configuration.

    An explicit config_path must exist. When omitted, config/config.yaml is
    used if present and the environment alone is used otherwise.

    Raises:
        FileNotFoundError: Explicit config_path does not exist
        ConfigurationError: Resulting settings are invalid
    """
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        config_path = DEFAULT_CONFIG_FILE

    yaml_data = _expand_env_vars(load_yaml(config_path))
    if yaml_data:
        logger.info("Loading configuration from file: %s", config_path)

    section = yaml_data.get("vault", yaml_data)
    if not isinstance(section, dict):
        raise ConfigurationError(
            "Invalid config file: 'vault:' section must be a mapping"
        )

    known = set(_field_names())
    unknown = sorted(set(section) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", unknown)

    values = {k: v for k, v in section.items() if k in known}

    env_values = _env_overrides()
    if env_values:
        logger.debug("Applying environment overrides: %s", sorted(env_values))
        values.update(env_values)

    if overrides:
        logger.debug("Applying overrides: %s", sorted(overrides))
        values.update({k: v for k, v in overrides.items() if k in known})

    config = VaultConfig(**values)
    config.validate()
    logger.debug("Configuration validation passed")
    return config


__all__ = ["VaultConfig", "load_config", "load_yaml", "DEFAULT_CONFIG_FILE", "ENV_PREFIX"]
