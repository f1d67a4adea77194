"""In-memory TTL cache with request coalescing for upstream lookups."""

import asyncio
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    expires_at: float

    def is_live(self, now: float) -> bool:
        return now < self.expires_at


class CacheMetrics:
    """Thread-safe cache metrics tracker."""

    def __init__(self):
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.coalesced = 0

    def record_hit(self):
        with self._lock:
            self.hits += 1

    def record_miss(self):
        with self._lock:
            self.misses += 1

    def record_eviction(self):
        with self._lock:
            self.evictions += 1

    def record_coalesced(self):
        with self._lock:
            self.coalesced += 1

    def hit_rate(self) -> float:
        """Return cache hit rate as percentage (0-100)."""
        with self._lock:
            total = self.hits + self.misses
            if total == 0:
                return 0.0
            return (self.hits / total) * 100

    def reset(self):
        with self._lock:
            self.hits = 0
            self.misses = 0
            self.evictions = 0
            self.coalesced = 0


class CacheService:
    """Thread-safe in-memory cache with TTL expiry and an LRU size bound.

    ``get_or_fetch`` adds single-flight semantics: while a fetch for a key is
    outstanding, every other caller for that key awaits the same task instead
    of starting another upstream call. The in-flight map belongs to the event
    loop; only the entry map is shared with other threads.
    """

    def __init__(
        self,
        default_ttl: int = 600,
        max_entries: int | None = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._inflight: dict[str, asyncio.Task] = {}
        self.metrics = CacheMetrics()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self.metrics.record_miss()
                return None
            if not entry.is_live(self._clock()):
                del self._store[key]
                self.metrics.record_miss()
                return None
            self._store.move_to_end(key)
            self.metrics.record_hit()
            return entry.value

    def set(self, key: str, value: Any, ttl: int | float | None = None) -> None:
        ttl = ttl if ttl is not None else self._default_ttl
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl)
        with self._lock:
            self._store.pop(key, None)
            self._store[key] = entry
            if self._max_entries is not None and len(self._store) > self._max_entries:
                self._purge_expired_locked()
                while len(self._store) > self._max_entries:
                    oldest_key, _ = self._store.popitem(last=False)
                    self.metrics.record_eviction()
                    logger.debug(f"Evicted least recently used cache entry {oldest_key}")

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def __len__(self) -> int:
        return self.size()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        with self._lock:
            return self._purge_expired_locked()

    def _purge_expired_locked(self) -> int:
        now = self._clock()
        expired = [k for k, entry in self._store.items() if not entry.is_live(now)]
        for key in expired:
            del self._store[key]
        return len(expired)

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        ttl: int | float | None = None,
    ) -> Any:
        """Return the live value for ``key``, fetching it at most once concurrently.

        A failed fetch is not cached; every caller waiting on it receives the
        same exception.
        """
        value = self.get(key)
        if value is not None:
            return value

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, fetch, ttl))
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._forget_inflight(key, t))
        else:
            self.metrics.record_coalesced()
        return await asyncio.shield(task)

    async def _load(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        ttl: int | float | None,
    ) -> Any:
        value = await fetch()
        if value is not None:
            self.set(key, value, ttl)
        return value

    def _forget_inflight(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark the failure retrieved; every waiter may have been cancelled
        if not task.cancelled():
            task.exception()
