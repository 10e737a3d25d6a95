"""
Feather Django Adapter Wiring
=============================
Constructs HttpApiDependencies for the running process.

This module is adapter-only glue:
- one DB-backed script store shared by every request
- one process-wide script cache, evicted by the authoring service
- pricing and rule gate read through that cache
"""

from __future__ import annotations

import logging
import threading

from django.conf import settings

from core.caching.script_cache import DEFAULT_SCRIPT_TTL_SECONDS, ScriptCache
from core.http_api.dependencies import HttpApiDependencies
from core.script_store.repository import DjangoScriptStore
from core.script_store.service import LogicScriptService
from core.scripting.runner import ScriptRunner
from core.time.clock import SystemClock
from engines.business_rules.services import BusinessRuleGate
from engines.pricing.services import PricingOrchestrator

logger = logging.getLogger("feather.wiring")

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: HttpApiDependencies | None = None


def _cache_ttl_seconds() -> int:
    return int(
        getattr(settings, "LOGIC_SCRIPT_CACHE_TTL_SECONDS", DEFAULT_SCRIPT_TTL_SECONDS)
    )


def _create_dependencies() -> HttpApiDependencies:
    ttl_seconds = _cache_ttl_seconds()
    script_cache = ScriptCache(
        DjangoScriptStore(),
        clock=SystemClock(),
        ttl_seconds=ttl_seconds,
    )
    runner = ScriptRunner()

    logger.info(f"Script engine wired: cache_ttl={ttl_seconds}s")
    return HttpApiDependencies(
        pricing=PricingOrchestrator(script_cache, runner=runner),
        rule_gate=BusinessRuleGate(script_cache, runner=runner),
        script_service=LogicScriptService(invalidate=script_cache.invalidate),
    )


def build_dependencies() -> HttpApiDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def reset_dependencies() -> None:
    """Drop the singleton so the next request wires a fresh cache."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = None
