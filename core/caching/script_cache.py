"""
Feather Core Caching — Active Script Cache
============================================
Per-tenant cache of active logic scripts grouped by trigger point.

Every storefront page load prices every visible product, and each
pricing pass needs the tenant's storefront_load scripts. This cache
keeps that off the database for up to five minutes.

Contract:
- get_active_scripts() is read-through: miss or expiry → store query
- any script write must call invalidate(tenant) before it returns
- a store failure yields {} (no rules) and is NOT cached
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from core.caching import CacheStats, TTLCache
from core.script_store.records import ScriptRecord
from core.script_store.repository import ScriptStore
from core.time.clock import Clock, SystemClock

logger = logging.getLogger("feather.cache")

DEFAULT_SCRIPT_TTL_SECONDS = 5 * 60

ScriptsByTrigger = Dict[str, Tuple[ScriptRecord, ...]]


def _cache_key(tenant_id: str) -> str:
    return f"scripts:{tenant_id}"


def group_by_trigger_point(records) -> ScriptsByTrigger:
    """Group records by trigger point, keeping their relative order."""
    grouped: Dict[str, list] = {}
    for record in records:
        grouped.setdefault(record.trigger_point, []).append(record)
    return {trigger: tuple(scripts) for trigger, scripts in grouped.items()}


class ScriptCache:
    """
    Read-through, write-invalidate cache over a ScriptStore.

    Usage:
        cache = ScriptCache(DjangoScriptStore(), clock=SystemClock())
        scripts = cache.get_scripts("acme", "submit")
        ...
        cache.invalidate("acme")     # after any script write
    """

    def __init__(
        self,
        store: ScriptStore,
        clock: Optional[Clock] = None,
        ttl_seconds: int = DEFAULT_SCRIPT_TTL_SECONDS,
        max_tenants: int = 1000,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._cache = TTLCache(max_entries=max_tenants, ttl_seconds=ttl_seconds)

    def get_active_scripts(self, tenant_id: str) -> ScriptsByTrigger:
        now = self._clock.now_utc()
        key = _cache_key(tenant_id)

        cached = self._cache.get(key, now)
        if cached is not None:
            return dict(cached)

        logger.debug(f"Script cache miss for tenant {tenant_id}")
        try:
            records = self._store.fetch_active_scripts(tenant_id)
        except Exception as exc:
            logger.error(
                f"Failed to load logic scripts for tenant {tenant_id}: {exc}",
                exc_info=True,
            )
            return {}

        grouped = group_by_trigger_point(r for r in records if r.active)
        self._cache.put(key, grouped, now)
        return dict(grouped)

    def get_scripts(self, tenant_id: str, trigger_point: str) -> Tuple[ScriptRecord, ...]:
        """Active scripts for one trigger point; () when there are none."""
        return self.get_active_scripts(tenant_id).get(trigger_point, ())

    def invalidate(self, tenant_id: str) -> bool:
        removed = self._cache.pop(_cache_key(tenant_id))
        logger.debug(f"Script cache invalidated for tenant {tenant_id} (hit={removed})")
        return removed

    def invalidate_all(self) -> int:
        count = self._cache.clear()
        logger.info(f"Script cache cleared ({count} tenants)")
        return count

    @property
    def stats(self) -> CacheStats:
        return self._cache.stats
