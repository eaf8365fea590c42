"""In-process TTL cache for query results, with whole-cache invalidation."""

import threading
import time
from collections.abc import Callable, Hashable
from typing import Any

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class ResultCache:
    """
    Memoizes query results keyed by the full query-parameter tuple.

    Entries expire ttl_seconds after insertion. invalidate_all() bumps a
    generation counter; set() calls carrying a generation observed before the
    bump are dropped, so a query computed before a mutation cannot be cached
    after it.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._generation = 0
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def generation(self) -> int:
        return self._generation

    def get(self, key: Hashable) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                self.misses += 1
                return None

            self.hits += 1
            return value

    def set(self, key: Hashable, value: Any, generation: int | None = None) -> bool:
        """Store value unless the cache was invalidated since `generation` was read."""
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Dropping stale cache write", key=key)
                return False
            now = self._clock()
            self._evict_expired(now)
            self._entries[key] = (now + self.ttl_seconds, value)
            return True

    def _evict_expired(self, now: float) -> int:
        # Caller holds self._lock
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Read-through helper. Concurrent misses may both compute; last write wins."""
        cached = self.get(key)
        if cached is not None:
            return cached

        generation = self._generation
        value = compute()
        self.set(key, value, generation=generation)
        return value

    def delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_all(self) -> int:
        """Evict every entry. Returns the number of entries dropped."""
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
            self._generation += 1

        if dropped:
            logger.debug("Result cache invalidated", dropped=dropped)
        return dropped

    def __len__(self) -> int:
        return len(self._entries)
