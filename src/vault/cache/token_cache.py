"""
Thread-safe bidirectional value/token cache.

This module keeps the mapping between sensitive values and their tokens in
memory for the lifetime of the process, so that repeated tokenize and
detokenize calls for the same data never leave the process.

Each logical mapping is stored twice:
    value -> (token, data_type)
    token -> (value, data_type)

Both directions are written under the same lock, so a reader never observes
one direction without the other.

Lifecycle:
    Entries are created from successful vault responses, overwritten when the
    same value or token is seen again, and erased only by clear(). There is no
    TTL and no eviction.

Thread Safety:
    All cache operations are protected by a threading.Lock. The lock is never
    held across an await.

Example:
    >>> cache = TokenCache()
    >>> cache.put("4111111111111111", "4929512345678901", "string")
    >>> cache.get_token("4111111111111111").paired
    '4929512345678901'
    >>> cache.get_value("4929512345678901").paired
    '4111111111111111'
"""

import threading
from dataclasses import dataclass
from typing import Dict, Optional

DEFAULT_DATA_TYPE = "string"


@dataclass(frozen=True)
class CacheEntry:
    """
    One direction of a cached mapping.

    Attributes:
        key: Lookup key (value or token)
        paired: The other side of the mapping (token or value)
        data_type: Declared data type, "string" when the vault gave none
    """

    key: str
    paired: str
    data_type: str = DEFAULT_DATA_TYPE


class TokenCache:
    """
    Thread-safe in-memory cache of value/token pairs.

    When constructed with enabled=False every lookup returns None and every
    write is ignored, whatever was put before.

    Thread Safety:
        All operations (get/put/clear) are protected by a threading.Lock to
        ensure safe concurrent access from multiple threads and tasks.
    """

    def __init__(self, enabled: bool = True):
        """Initialize empty cache with thread lock."""
        self._enabled = enabled
        self._value_to_token: Dict[str, CacheEntry] = {}
        self._token_to_value: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def get_token(self, value: str) -> Optional[CacheEntry]:
        """
        Look up the token for a value.

        Args:
            value: Sensitive value

        Returns:
            CacheEntry whose ``paired`` is the token, or None if not cached
            or the cache is disabled.
        """
        if not self._enabled:
            return None
        with self._lock:
            return self._value_to_token.get(value)

    def get_value(self, token: str) -> Optional[CacheEntry]:
        """
        Look up the value for a token.

        Args:
            token: Token previously returned by the vault

        Returns:
            CacheEntry whose ``paired`` is the value, or None if not cached
            or the cache is disabled.
        """
        if not self._enabled:
            return None
        with self._lock:
            return self._token_to_value.get(token)

    def put(self, value: str, token: str, data_type: Optional[str] = None) -> None:
        """
        Store a mapping in both directions atomically.

        Args:
            value: Sensitive value
            token: Its token
            data_type: Declared data type (defaults to "string")
        """
        if not self._enabled:
            return
        actual_type = data_type or DEFAULT_DATA_TYPE
        with self._lock:
            self._value_to_token[value] = CacheEntry(value, token, actual_type)
            self._token_to_value[token] = CacheEntry(token, value, actual_type)

    def clear(self) -> None:
        """Remove every cached mapping."""
        with self._lock:
            self._value_to_token.clear()
            self._token_to_value.clear()

    def __len__(self) -> int:
        """Number of cached value/token pairs."""
        with self._lock:
            return len(self._value_to_token)


__all__ = ["TokenCache", "CacheEntry", "DEFAULT_DATA_TYPE"]
