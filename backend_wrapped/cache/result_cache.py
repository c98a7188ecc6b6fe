"""
Result cache: time-boxed memoization of pipeline output keyed by (address, year).

An entry written at T is served for reads before T + ttl and treated as a miss
from T + ttl on. Clock and storage backend are injected; the default backend is
an in-memory dict behind a lock. Only successful results are stored.
Concurrent misses for the same key are not de-duplicated: both callers compute.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from backend_wrapped.config import get_settings
from backend_wrapped.wrapped_logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SEC = 3600.0


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    written_at: float

    def is_fresh(self, now: float, ttl_sec: float) -> bool:
        return now - self.written_at < ttl_sec


class CacheBackend(ABC):
    """Storage for cache entries. Implementations must tolerate concurrent access."""

    @abstractmethod
    def get(self, key: Hashable) -> CacheEntry | None:
        """Return the stored entry or None."""

    @abstractmethod
    def set(self, key: Hashable, entry: CacheEntry) -> None:
        """Store or replace the entry for key."""

    @abstractmethod
    def delete(self, key: Hashable) -> None:
        """Remove key if present."""

    def discard(self, key: Hashable, entry: CacheEntry) -> None:
        """Remove key only while it still holds this exact entry. Backends should make this atomic."""
        if self.get(key) is entry:
            self.delete(key)

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""


class InMemoryCacheBackend(CacheBackend):
    """Single-process backend: dict guarded by a lock."""

    def __init__(self) -> None:
        self._store: dict[Hashable, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> CacheEntry | None:
        with self._lock:
            return self._store.get(key)

    def set(self, key: Hashable, entry: CacheEntry) -> None:
        with self._lock:
            self._store[key] = entry

    def delete(self, key: Hashable) -> None:
        with self._lock:
            self._store.pop(key, None)

    def discard(self, key: Hashable, entry: CacheEntry) -> None:
        with self._lock:
            if self._store.get(key) is entry:
                del self._store[key]

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


class ResultCache:
    def __init__(
        self,
        ttl_sec: float = DEFAULT_TTL_SEC,
        backend: CacheBackend | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = float(ttl_sec)
        self._backend = backend if backend is not None else InMemoryCacheBackend()
        self._clock = clock

    @property
    def ttl_sec(self) -> float:
        return self._ttl

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    def get(self, key: Hashable) -> Any | None:
        """Fresh cached value or None. Stale entries are evicted on read."""
        entry = self._backend.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock(), self._ttl):
            # A concurrent set() may have replaced the entry since it was read.
            self._backend.discard(key, entry)
            return None
        return entry.value

    def set(self, key: Hashable, value: Any) -> None:
        self._backend.set(key, CacheEntry(value=value, written_at=self._clock()))

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """
        Return the fresh cached value for key, else run compute() and store its result.
        Exceptions from compute propagate and nothing is stored.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("result_cache_hit", key=str(key))
            return cached
        logger.debug("result_cache_miss", key=str(key))
        value = compute()
        self.set(key, value)
        return value

    def invalidate(self, key: Hashable) -> None:
        self._backend.delete(key)

    def clear(self) -> None:
        self._backend.clear()


_result_cache: ResultCache | None = None
_result_cache_lock = threading.Lock()


def get_result_cache() -> ResultCache:
    """Process-wide cache, created on first use with WRAPPED_CACHE_TTL_SEC."""
    global _result_cache
    with _result_cache_lock:
        if _result_cache is None:
            _result_cache = ResultCache(ttl_sec=get_settings().cache_ttl_sec)
        return _result_cache


def reset_result_cache() -> None:
    """Drop the process-wide cache. For tests only."""
    global _result_cache
    with _result_cache_lock:
        _result_cache = None
