"""In-memory value/token cache and the pipeline-facing cache manager."""

from vault.cache.manager import (
    BatchCacheResult,
    CacheManager,
    TokenCacheHit,
    ValueCacheHit,
)
from vault.cache.token_cache import CacheEntry, TokenCache

__all__ = [
    "TokenCache",
    "CacheEntry",
    "CacheManager",
    "TokenCacheHit",
    "ValueCacheHit",
    "BatchCacheResult",
]
