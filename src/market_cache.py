"""
In-process TTL cache for market lookups by slug.

Each entry is stored as (value, inserted_at). Staleness is checked on every
read; a stale entry is evicted and treated as a miss.
"""

import time
from typing import Any, Callable, Optional


class MarketCache:
    """Explicit key -> (value, inserted_at) map with a fixed TTL."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}

    def is_stale(self, inserted_at: float) -> bool:
        return self._clock() - inserted_at >= self.ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, inserted_at = entry
        if self.is_stale(inserted_at):
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (value, self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
