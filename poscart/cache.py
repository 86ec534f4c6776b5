"""
Simple in-memory cache with per-entry TTL.

Entries without a TTL never expire. Expired entries are dropped when they
are read, or in bulk by `cleanup()`.
"""

import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

T = TypeVar("T")


@dataclass
class CacheItem:
    value: Any
    expiry: Optional[float]  # None means no expiry


class TTLCache:
    """Key-value cache; `clock` returns seconds and defaults to time.monotonic."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._items: Dict[str, CacheItem] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._items)

    def _expired(self, item: CacheItem) -> bool:
        return item.expiry is not None and self._clock() > item.expiry

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """
        Store a value.

        Args:
            key: Cache key
            value: Value to store
            ttl: Time to live in seconds (None or 0 means no expiry)
        """
        expiry = self._clock() + ttl if ttl else None
        self._items[key] = CacheItem(value=value, expiry=expiry)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or `default` if missing or expired."""
        item = self._items.get(key)
        if item is None:
            return default
        if self._expired(item):
            del self._items[key]
            return default
        return item.value

    def has(self, key: str) -> bool:
        item = self._items.get(key)
        if item is None:
            return False
        if self._expired(item):
            del self._items[key]
            return False
        return True

    def delete(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        ttl: Optional[float] = None,
    ) -> T:
        """
        Return the cached value, or await `factory()` and cache its result.

        Exceptions from the factory propagate and nothing is cached.
        """
        if self.has(key):
            return self._items[key].value

        value = await factory()
        self.set(key, value, ttl)
        return value

    def cleanup(self) -> int:
        """Remove all expired entries. Returns the number removed."""
        expired = [key for key, item in self._items.items() if self._expired(item)]
        for key in expired:
            del self._items[key]
        return len(expired)
