# intentnet/storage/lru_cache.py
"""
Bounded in-memory caches

Used for classification results keyed by raw text and for tokenized
utterances inside the encoder.
"""

import threading
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any

from loguru import logger


class BoundedCache(ABC):
    """
    Interface for fixed-capacity key/value caches
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the cached value or None"""
        pass

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """Store a value, evicting if the cache is full"""
        pass


class LRUCache(BoundedCache):
    """
    Least-recently-used cache with a fixed capacity.

    Safe for concurrent get/put: every operation holds an internal lock.
    """

    def __init__(self, maxsize: int = 10000):
        """
        Initialize cache

        Args:
            maxsize: Maximum number of entries kept
        """
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")

        self._cache: OrderedDict[str, Any] = OrderedDict()
        self._maxsize = maxsize
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

        logger.debug(f"LRUCache initialized (maxsize={maxsize})")

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def get(self, key: str) -> Any | None:
        with self._lock:
            if key not in self._cache:
                self._misses += 1
                return None

            # Move to end (most recently used)
            self._cache.move_to_end(key)
            self._hits += 1
            return self._cache[key]

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            self._cache[key] = value

            while len(self._cache) > self._maxsize:
                self._cache.popitem(last=False)
                self._evictions += 1

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics"""
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._cache),
                "maxsize": self._maxsize,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": self._hits / total if total > 0 else 0.0,
            }

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
