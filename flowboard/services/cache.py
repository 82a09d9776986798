"""TTL response cache for the domain services.

Entries are keyed by request signature (operation name plus canonical
variables) and dropped wholesale after any mutation.
"""

import json
import time
from collections import OrderedDict
from typing import Any


def request_key(operation: str, variables: dict[str, Any] | None = None) -> str:
    """Build a stable cache key for a GraphQL request."""
    canonical = json.dumps(variables or {}, sort_keys=True, default=str)
    return f"{operation}:{canonical}"


class TTLCache:
    """In-memory cache with time-to-live and max-size (LRU) eviction.

    Usage::

        cache = TTLCache(ttl=300, max_size=100)
        cache.set("key", value)
        hit = cache.get("key")  # returns value or None if expired/missing
    """

    def __init__(self, ttl: float = 300, max_size: int = 100) -> None:
        self._ttl = ttl
        self._max_size = max_size
        self._store: OrderedDict[str, tuple[Any, float]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> Any | None:
        """Return the cached value if present and not expired, else None."""
        entry = self._store.get(key)
        if entry is None:
            return None
        value, ts = entry
        if time.monotonic() - ts > self._ttl:
            del self._store[key]
            return None
        self._store.move_to_end(key)
        return value

    def set(self, key: str, value: Any) -> None:
        """Store a value under *key*, evicting the oldest entry if at capacity."""
        if key in self._store:
            self._store.move_to_end(key)
        self._store[key] = (value, time.monotonic())
        while len(self._store) > self._max_size:
            self._store.popitem(last=False)

    def invalidate(self, prefix: str = "") -> int:
        """Drop every entry whose key starts with *prefix* (all when empty).

        Returns the number of entries removed.
        """
        if not prefix:
            removed = len(self._store)
            self._store.clear()
            return removed
        stale = [k for k in self._store if k.startswith(prefix)]
        for k in stale:
            del self._store[k]
        return len(stale)
