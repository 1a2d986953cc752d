"""Time-to-live cache in front of the API client."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

DEFAULT_TTL = 30.0
DEFAULT_MAX_ENTRIES = 256


@dataclass
class CacheEntry:
    key: str
    value: Any
    fetched_at: float


class FetchCache:
    """Serve cached responses younger than ``ttl`` seconds, fetch otherwise.

    Each endpoint keeps one timestamp, so callers using different ttl values
    judge freshness against the same fetch. Failed fetches are never stored.
    The least recently used entry is evicted once ``max_entries`` is reached.
    """

    def __init__(
        self,
        fetcher: Callable[[str], Any],
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._fetcher = fetcher
        self._clock = clock
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def _fresh_entry(self, key: str, ttl: float) -> CacheEntry | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or self._clock() - entry.fetched_at >= ttl:
                return None
            self._entries.move_to_end(key)
            return entry

    def _store(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value, fetched_at=self._clock())
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def fetch(self, endpoint: str, ttl: float = DEFAULT_TTL) -> Any:
        entry = self._fresh_entry(endpoint, ttl)
        if entry is not None:
            return entry.value

        # The fetch runs outside the lock; concurrent misses may both hit the API.
        value = self._fetcher(endpoint)
        self._store(endpoint, value)
        return value

    def invalidate(self, endpoint: str) -> None:
        with self._lock:
            self._entries.pop(endpoint, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
