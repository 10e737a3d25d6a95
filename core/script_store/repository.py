"""
Feather Script Store - Read Port
================================
The script cache reads active scripts through the ScriptStore protocol.

Implementations:
- DjangoScriptStore: the ``logic_scripts`` table (production)
- InMemoryScriptStore: dict-backed double for tests and local wiring
"""

from __future__ import annotations

import threading
from typing import Dict, List, Protocol, Sequence

from core.script_store.records import ScriptRecord, execution_order_key


class ScriptStore(Protocol):
    def fetch_active_scripts(self, distributor_id: str) -> Sequence[ScriptRecord]:
        """All active scripts of one tenant, in execution order."""
        ...  # pragma: no cover


class DjangoScriptStore:
    def fetch_active_scripts(self, distributor_id: str) -> List[ScriptRecord]:
        from core.script_store.models import LogicScript

        rows = LogicScript.objects.filter(
            distributor_id=distributor_id,
            active=True,
        ).order_by("sequence_order", "created_at", "id")
        return [ScriptRecord.from_model(row) for row in rows]


class InMemoryScriptStore:
    """
    Thread-safe in-memory script store.

    ``fetch_count`` counts reads so tests can assert cache hits.
    """

    def __init__(self, records: Sequence[ScriptRecord] = ()):
        self._records: Dict[str, ScriptRecord] = {}
        self._lock = threading.Lock()
        self.fetch_count = 0
        for record in records:
            self.save(record)

    def save(self, record: ScriptRecord) -> None:
        with self._lock:
            self._records[record.id] = record

    def delete(self, script_id: str) -> bool:
        with self._lock:
            return self._records.pop(script_id, None) is not None

    def all_scripts(self, distributor_id: str) -> List[ScriptRecord]:
        with self._lock:
            scoped = [
                r for r in self._records.values()
                if r.distributor_id == distributor_id
            ]
        return sorted(scoped, key=execution_order_key)

    def fetch_active_scripts(self, distributor_id: str) -> List[ScriptRecord]:
        with self._lock:
            self.fetch_count += 1
        return [r for r in self.all_scripts(distributor_id) if r.active]
