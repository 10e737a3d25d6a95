"""
Feather Core Time — Injectable Clock
====================================
The script cache decides freshness from "now". It never calls
datetime.now() itself; a Clock is injected so that TTL expiry can be
exercised in tests by moving a FixedClock forward.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now_utc(self) -> datetime:
        ...  # pragma: no cover


class SystemClock:
    """Wall-clock UTC time. Used by the HTTP wiring."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Manually advanced clock for cache expiry tests.

    Usage:
        clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        cache = ScriptCache(store, clock=clock)
        clock.advance(301)   # past the 5 minute TTL
    """

    def __init__(self, start: datetime) -> None:
        if start.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._current = start

    def now_utc(self) -> datetime:
        return self._current

    def advance(self, seconds: float) -> datetime:
        self._current = self._current + timedelta(seconds=seconds)
        return self._current
