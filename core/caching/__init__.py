"""
Feather Core Caching — Expiring Tenant Cache
============================================
Bounded, thread-safe map from tenant id to a value that expires.

Doctrine: the cache is disposable; the database is the source of truth.
Writes evict explicitly; the TTL only bounds how stale a missed
eviction can get. Callers pass "now" in, so expiry follows whatever
Clock they were given.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, NamedTuple, Optional


class _Slot(NamedTuple):
    value: Any
    stored_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time counters. ``expired`` misses are counted in ``misses`` too."""

    hits: int = 0
    misses: int = 0
    expired: int = 0
    capacity_evictions: int = 0
    invalidations: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "expired": self.expired,
            "capacity_evictions": self.capacity_evictions,
            "invalidations": self.invalidations,
            "size": self.size,
            "hit_rate": round(self.hit_rate, 4),
        }


class TTLCache:
    """
    Usage:
        cache = TTLCache(max_entries=1000, ttl_seconds=300)
        cache.put("acme", scripts, now)
        cache.get("acme", now)        # scripts, or None once expired
        cache.pop("acme")             # after a write for that tenant

    When full, the least recently read tenant is dropped first.
    Two threads that miss on the same tenant at once both load it;
    the later put wins.
    """

    def __init__(self, max_entries: int = 1000, ttl_seconds: int = 300) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive.")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive.")
        self._max_entries = max_entries
        self._ttl = timedelta(seconds=ttl_seconds)
        self._slots: "OrderedDict[str, _Slot]" = OrderedDict()
        self._lock = threading.RLock()
        self._counters = {
            "hits": 0,
            "misses": 0,
            "expired": 0,
            "capacity_evictions": 0,
            "invalidations": 0,
        }

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def get(self, key: str, now: datetime) -> Optional[Any]:
        with self._lock:
            slot = self._slots.get(key)
            if slot is None:
                self._counters["misses"] += 1
                return None
            if now >= slot.expires_at:
                del self._slots[key]
                self._counters["expired"] += 1
                self._counters["misses"] += 1
                return None
            self._slots.move_to_end(key)
            self._counters["hits"] += 1
            return slot.value

    def put(self, key: str, value: Any, now: datetime) -> None:
        with self._lock:
            self._slots.pop(key, None)
            while len(self._slots) >= self._max_entries:
                self._slots.popitem(last=False)
                self._counters["capacity_evictions"] += 1
            self._slots[key] = _Slot(value, now, now + self._ttl)

    def pop(self, key: str) -> bool:
        """Forget one key. True if it was present (expired or not)."""
        with self._lock:
            if self._slots.pop(key, None) is None:
                return False
            self._counters["invalidations"] += 1
            return True

    def clear(self) -> int:
        with self._lock:
            count = len(self._slots)
            self._slots.clear()
            self._counters["invalidations"] += count
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._slots), **self._counters)
