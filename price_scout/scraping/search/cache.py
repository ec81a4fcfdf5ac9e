"""
In-memory TTL cache for search results.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from price_scout.domain.competitor_pricing import SearchCandidate


class SearchResultCache:
    """
    Query-keyed cache of candidate lists with a fixed time-to-live.

    Shared by every provider in a process; guarded by a lock because batch
    workers search concurrently.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = max(0.0, ttl_seconds)
        self._clock = clock
        self._entries: dict[str, tuple[float, list[SearchCandidate]]] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    @staticmethod
    def make_key(provider: str, query: str, count: int) -> str:
        return f"{provider}:{count}:{query}"

    def get(self, key: str) -> list[SearchCandidate] | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            stored_at, candidates = entry
            if self._clock() - stored_at > self._ttl_seconds:
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return list(candidates)

    def set(self, key: str, candidates: list[SearchCandidate]) -> None:
        if self._ttl_seconds <= 0:
            return
        with self._lock:
            self._entries[key] = (self._clock(), list(candidates))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {"size": len(self._entries), "hits": self._hits, "misses": self._misses}
