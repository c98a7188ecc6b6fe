"""Process-wide result cache for Wrapped aggregates."""

from backend_wrapped.cache.result_cache import (
    CacheBackend,
    CacheEntry,
    InMemoryCacheBackend,
    ResultCache,
    get_result_cache,
    reset_result_cache,
)

__all__ = [
    "CacheBackend",
    "CacheEntry",
    "InMemoryCacheBackend",
    "ResultCache",
    "get_result_cache",
    "reset_result_cache",
]
