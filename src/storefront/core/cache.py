"""Thread-safe LRU cache with statistics.

Used to memoise pure computations (compiled style layers) across requests.
Values must be treated as immutable by callers.
"""

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .hash import hash_string, Algorithm

T = TypeVar("T")


@dataclass
class Stats:
    """Cache statistics."""

    size: int = 0
    max_size: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate (0.0 to 1.0)."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": self.hit_rate,
        }


class LRUCache(Generic[T]):
    """
    LRU cache keyed by strings, hashed with xxhash.

    Examples:
        >>> cache = LRUCache[dict](max_size=100)
        >>> cache.set("key", {"a": 1})
        >>> cache.get("key")
        {'a': 1}
    """

    def __init__(
        self,
        max_size: int = 100,
        hash_algorithm: Algorithm = Algorithm.XXHASH64,
    ):
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self.max_size = max_size
        self.hash_algorithm = hash_algorithm

        self._cache: OrderedDict[str, T] = OrderedDict()
        self._lock = threading.Lock()
        self._stats = Stats(max_size=max_size)

    def _compute_key(self, key: str) -> str:
        return hash_string(key, self.hash_algorithm, truncate=16)

    def get(self, key: str) -> T | None:
        """Get cached value or None."""
        cache_key = self._compute_key(key)
        with self._lock:
            if cache_key in self._cache:
                self._cache.move_to_end(cache_key)
                self._stats.hits += 1
                return self._cache[cache_key]
            self._stats.misses += 1
            return None

    def set(self, key: str, value: T) -> None:
        """Cache value, evicting the least recently used entry when full."""
        cache_key = self._compute_key(key)
        with self._lock:
            self._cache[cache_key] = value
            self._cache.move_to_end(cache_key)
            if len(self._cache) > self.max_size:
                self._cache.popitem(last=False)
                self._stats.evictions += 1
            self._stats.size = len(self._cache)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._stats.size = 0

    @property
    def stats(self) -> Stats:
        return self._stats

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        """Check if key exists (doesn't update LRU order)."""
        return self._compute_key(key) in self._cache


__all__ = ["LRUCache", "Stats"]
