"""
Steam Trust Check - Result Cache Layer

Every completed check is memoised in-process so repeat lookups of the same
profile don't hit Steam five more times.

Cache Strategy:
    - TTL = 5 min, checked lazily on read (expired entries are dropped then)
    - Max 500 entries; at capacity the oldest-INSERTED entry goes first
      (insertion order, not access order)
    - Only fully aggregated payloads are ever stored

Key Schema:
    {steamid}:{appid}    → payload for a check with a selected game
    {steamid}:none       → payload for a plain check

Not shared across processes. A miss always falls back to recomputation.
"""
import copy
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Dict, Any, Callable

import structlog

logger = structlog.get_logger()

NO_TITLE = "none"


def cache_key(steamid: str, appid: Optional[int] = None) -> str:
    return f"{steamid}:{int(appid) if appid else NO_TITLE}"


@dataclass(frozen=True)
class CacheEntry:
    key: str
    inserted_at: float
    payload: Dict[str, Any]


class ResultCache:
    """
    In-memory TTL + capacity-bounded cache for check results.

    Usage:
        cache = ResultCache(ttl_seconds=300, max_entries=500)

        cached = cache.get(cache_key(steamid, appid))
        if cached:
            return cached

        # ... aggregate + score ...

        cache.set(cache_key(steamid, appid), payload)
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_entries: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Return a copy of the cached payload, or None on miss.
        An entry older than the TTL counts as a miss and is deleted.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._clock() - entry.inserted_at > self.ttl_seconds:
                del self._entries[key]
                self._expirations += 1
                self._misses += 1
                logger.debug("cache_expired", key=key)
                return None
            self._hits += 1
            payload = entry.payload

        logger.debug("cache_hit", key=key)
        return copy.deepcopy(payload)

    def set(self, key: str, payload: Dict[str, Any]) -> None:
        """Store a payload, evicting the oldest-inserted entry when full."""
        entry = CacheEntry(key=key, inserted_at=self._clock(), payload=copy.deepcopy(payload))
        with self._lock:
            if key in self._entries:
                # Re-insert so a refreshed key counts as newest
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug("cache_evicted", key=evicted)
            self._entries[key] = entry
        logger.debug("cache_set", key=key, ttl=self.ttl_seconds)

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "expirations": self._expirations,
            }

    def close(self) -> None:
        self.clear()
        logger.info("result_cache_closed")
