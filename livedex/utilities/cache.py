"""In-memory cache with an explicit eviction policy.

Used for auxiliary lookups (ability/move descriptions) that are fetched
once and reused. The policy is always stated by the caller:

- EvictionPolicy.NEVER: entries live for the process lifetime. Used for
  static game text, which never changes between releases of the data.
- EvictionPolicy.TTL_LRU: time-based expiration plus LRU eviction at
  max_size. Used for anything that may change upstream.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class EvictionPolicy(str, Enum):
    """How a LookupCache drops entries."""

    NEVER = "never"
    TTL_LRU = "ttl_lru"


@dataclass
class CacheEntry:
    """A cached value with optional expiration."""

    value: Any
    expires_at: datetime | None
    last_accessed: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at


class LookupCache:
    """Thread-safe in-memory cache.

    Usage:
        cache = LookupCache(policy=EvictionPolicy.NEVER)
        cache.set("ability:static", text)
        result = cache.get("ability:static")

        cache = LookupCache(EvictionPolicy.TTL_LRU, default_ttl_seconds=3600, max_size=500)
    """

    # Default max size for TTL_LRU (0 = unlimited)
    DEFAULT_MAX_SIZE = 10000

    def __init__(
        self,
        policy: EvictionPolicy = EvictionPolicy.NEVER,
        default_ttl_seconds: int = 3600,
        max_size: int = DEFAULT_MAX_SIZE,
    ):
        self._policy = policy
        self._cache: dict[str, CacheEntry] = {}
        self._default_ttl = timedelta(seconds=default_ttl_seconds)
        # NEVER means never: no size bound either
        self._max_size = max_size if policy == EvictionPolicy.TTL_LRU else 0
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def policy(self) -> EvictionPolicy:
        return self._policy

    def get(self, key: str) -> Any | None:
        """Get value if present and not expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None
            now = datetime.now()
            if entry.is_expired(now):
                del self._cache[key]
                self._misses += 1
                return None
            # Update last accessed time for LRU
            entry.last_accessed = now
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Set value. ttl_seconds is ignored under EvictionPolicy.NEVER."""
        now = datetime.now()
        if self._policy == EvictionPolicy.NEVER:
            expires_at = None
        else:
            ttl = timedelta(seconds=ttl_seconds) if ttl_seconds else self._default_ttl
            expires_at = now + ttl

        with self._lock:
            # Evict if at max size and key is new
            if self._max_size > 0 and key not in self._cache:
                self._evict_if_needed()

            self._cache[key] = CacheEntry(
                value=value,
                expires_at=expires_at,
                last_accessed=now,
            )

    def _evict_if_needed(self) -> None:
        """Evict entries if cache is at max size. Called with lock held."""
        if self._max_size <= 0:
            return

        now = datetime.now()
        expired_keys = [k for k, v in self._cache.items() if v.is_expired(now)]
        for key in expired_keys:
            del self._cache[key]

        while len(self._cache) >= self._max_size:
            lru_key = min(self._cache.keys(), key=lambda k: self._cache[k].last_accessed)
            logger.debug("[CACHE] Evicting LRU entry %s", lru_key)
            del self._cache[lru_key]

    def delete(self, key: str) -> None:
        """Delete a key from cache."""
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        """Clear all cached values."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    @property
    def size(self) -> int:
        """Current number of entries (including possibly expired)."""
        return len(self._cache)

    def stats(self) -> dict:
        """Get cache statistics."""
        now = datetime.now()
        with self._lock:
            total = len(self._cache)
            expired = sum(1 for v in self._cache.values() if v.is_expired(now))
            total_requests = self._hits + self._misses
            hit_rate = self._hits / total_requests if total_requests > 0 else 0
            return {
                "policy": self._policy.value,
                "total_entries": total,
                "active_entries": total - expired,
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 3),
            }


def make_cache_key(*parts: str) -> str:
    """Create a cache key from parts."""
    return ":".join(str(p) for p in parts)
