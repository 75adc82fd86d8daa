"""Cache lookups and write-back rules used by the operation pipeline."""

import logging
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from vault.cache.token_cache import TokenCache
from vault.models import BatchDetokenItem, BatchTokenItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TokenCacheHit:
    token: str
    data_type: str


@dataclass(frozen=True)
class ValueCacheHit:
    value: str
    data_type: str


@dataclass(frozen=True)
class BatchCacheResult(Generic[T]):
    """
    Partition of a batch input.

    Attributes:
        cached: Items answered from cache, in discovery order
        uncached: Inputs still to fetch, in input order
    """

    cached: list[T] = field(default_factory=list)
    uncached: list[str] = field(default_factory=list)


class CacheManager:
    """
    Wraps TokenCache with typed hits and the write-back rules.

    When the cache is disabled every lookup returns None (or an all-uncached
    partition) without touching the store, and every store is a no-op.
    """

    def __init__(self, token_cache: TokenCache):
        self._cache = token_cache

    @property
    def enabled(self) -> bool:
        return self._cache.enabled

    def get_token_from_cache(self, value: str) -> Optional[TokenCacheHit]:
        if not self.enabled:
            return None
        entry = self._cache.get_token(value)
        if entry is None:
            return None
        logger.debug("Token found in cache")
        return TokenCacheHit(token=entry.paired, data_type=entry.data_type)

    def get_value_from_cache(self, token: str) -> Optional[ValueCacheHit]:
        if not self.enabled:
            return None
        entry = self._cache.get_value(token)
        if entry is None:
            return None
        logger.debug("Value found in cache")
        return ValueCacheHit(value=entry.paired, data_type=entry.data_type)

    def get_batch_tokens_from_cache(
        self, values: list[str]
    ) -> BatchCacheResult[BatchTokenItem]:
        if not self.enabled:
            return BatchCacheResult(cached=[], uncached=list(values))

        cached: list[BatchTokenItem] = []
        uncached: list[str] = []
        for value in values:
            entry = self._cache.get_token(value)
            if entry is None:
                uncached.append(value)
                continue
            cached.append(
                BatchTokenItem(
                    original_value=value,
                    token=entry.paired,
                    exists=True,
                    newly_created=False,
                    data_type=entry.data_type,
                )
            )

        logger.debug(
            "Batch token cache lookup",
            extra={
                "batch_size": len(values),
                "cached_count": len(cached),
                "uncached_count": len(uncached),
            },
        )
        return BatchCacheResult(cached=cached, uncached=uncached)

    def get_batch_values_from_cache(
        self, tokens: list[str]
    ) -> BatchCacheResult[BatchDetokenItem]:
        if not self.enabled:
            return BatchCacheResult(cached=[], uncached=list(tokens))

        cached: list[BatchDetokenItem] = []
        uncached: list[str] = []
        for token in tokens:
            entry = self._cache.get_value(token)
            if entry is None:
                uncached.append(token)
                continue
            cached.append(
                BatchDetokenItem(
                    token=token,
                    value=entry.paired,
                    exists=True,
                    data_type=entry.data_type,
                )
            )

        logger.debug(
            "Batch value cache lookup",
            extra={
                "batch_size": len(tokens),
                "cached_count": len(cached),
                "uncached_count": len(uncached),
            },
        )
        return BatchCacheResult(cached=cached, uncached=uncached)

    def store_token_in_cache(
        self, value: str, token: str, data_type: Optional[str] = None
    ) -> None:
        if not self.enabled:
            return
        self._cache.put(value, token, data_type)
        logger.debug("Token stored in cache")

    def store_value_in_cache(
        self, token: str, value: str, data_type: Optional[str] = None
    ) -> None:
        if not self.enabled:
            return
        self._cache.put(value, token, data_type)
        logger.debug("Value stored in cache")

    def store_batch_tokens_in_cache(self, items: list[BatchTokenItem]) -> None:
        """Store items that resolved to a real token (exists or newly created)."""
        if not self.enabled:
            return
        stored = 0
        for item in items:
            if item.exists or item.newly_created:
                self._cache.put(item.original_value, item.token, item.data_type)
                stored += 1
        logger.debug("Batch tokens stored in cache", extra={"batch_size": stored})

    def store_batch_values_in_cache(self, items: list[BatchDetokenItem]) -> None:
        """Store items the vault resolved to a value."""
        if not self.enabled:
            return
        stored = 0
        for item in items:
            if item.exists and item.value is not None:
                self._cache.put(item.value, item.token, item.data_type)
                stored += 1
        logger.debug("Batch values stored in cache", extra={"batch_size": stored})

    def clear(self) -> None:
        self._cache.clear()


__all__ = [
    "CacheManager",
    "TokenCacheHit",
    "ValueCacheHit",
    "BatchCacheResult",
]
