"""
Feather Script Store - Authoring Service
========================================
DB-backed create / update / delete / reorder of tenant logic scripts.

Every mutation evicts the tenant's script-cache entry once its
transaction commits (immediately under autocommit), so the next
pricing or rule evaluation reads the new rule set instead of waiting
out the cache TTL.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from typing import Any, Callable, List, Optional

from django.db import transaction
from django.db.models import Max

from core.script_store.errors import ScriptNotFoundError
from core.script_store.models import LogicScript
from core.script_store.records import ScriptRecord
from core.scripting.compiler import check_script_syntax
from core.scripting.contracts import (
    LOGIC_SCRIPT_PARAMETERS,
    PRICING_SCRIPT_PARAMETERS,
    TriggerPoint,
    is_known_trigger_point,
)

logger = logging.getLogger("feather.script_store")

UPDATABLE_FIELDS = frozenset({
    "active",
    "description",
    "original_prompt",
    "script_content",
    "sequence_order",
    "trigger_point",
})


def _clean_string(value: Any, *, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a non-empty string.")
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field_name} must be a non-empty string.")
    return cleaned


def _clean_optional_text(value: Any, *, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string or null.")
    return value


def _canonical_uuid(value: Any, *, field_name: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(value).strip())
    except Exception as exc:
        raise ValueError(f"{field_name} must be a valid UUID.") from exc


def _normalize_trigger_point(value: Any) -> str:
    trigger_point = _clean_string(value, field_name="trigger_point")
    if not is_known_trigger_point(trigger_point):
        raise ValueError(
            f"trigger_point '{trigger_point}' not valid. "
            f"Must be one of: {sorted(TriggerPoint.ALL)}"
        )
    return trigger_point


def _normalize_sequence_order(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("sequence_order must be an integer.")
    return value


def _normalize_active(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError("active must be a boolean.")
    return value


def _parameters_for(trigger_point: str) -> tuple[str, ...]:
    if trigger_point == TriggerPoint.PRICING:
        return PRICING_SCRIPT_PARAMETERS
    return LOGIC_SCRIPT_PARAMETERS


def _normalize_script_content(value: Any, *, trigger_point: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("script_content must be a non-empty string.")
    check_script_syntax(value, _parameters_for(trigger_point))
    return value


class LogicScriptService:
    """
    Authoring operations over the ``logic_scripts`` table.

    Args:
        invalidate: called with the distributor id after every committed
            write; normally ``ScriptCache.invalidate``.
    """

    def __init__(self, invalidate: Callable[[str], Any]):
        self._invalidate = invalidate

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def list_scripts(
        self,
        distributor_id: str,
        trigger_point: Optional[str] = None,
    ) -> List[ScriptRecord]:
        distributor_id = _clean_string(distributor_id, field_name="distributor_id")
        rows = LogicScript.objects.filter(distributor_id=distributor_id)
        if trigger_point is not None:
            rows = rows.filter(trigger_point=trigger_point)
        rows = rows.order_by("trigger_point", "sequence_order", "created_at", "id")
        return [ScriptRecord.from_model(row) for row in rows]

    # ══════════════════════════════════════════════════════════
    # WRITES (each one invalidates)
    # ══════════════════════════════════════════════════════════

    def create_script(
        self,
        *,
        distributor_id: str,
        trigger_point: str,
        script_content: str,
        description: str = "",
        original_prompt: Optional[str] = None,
        active: bool = True,
        sequence_order: Optional[int] = None,
    ) -> ScriptRecord:
        distributor_id = _clean_string(distributor_id, field_name="distributor_id")
        trigger_point = _normalize_trigger_point(trigger_point)
        script_content = _normalize_script_content(
            script_content, trigger_point=trigger_point
        )
        description = _clean_optional_text(description, field_name="description") or ""
        original_prompt = _clean_optional_text(
            original_prompt, field_name="original_prompt"
        )
        active = _normalize_active(active)

        with transaction.atomic():
            if sequence_order is None:
                sequence_order = self._next_sequence_order(distributor_id, trigger_point)
            else:
                sequence_order = _normalize_sequence_order(sequence_order)
            row = LogicScript.objects.create(
                distributor_id=distributor_id,
                trigger_point=trigger_point,
                script_content=script_content,
                description=description,
                original_prompt=original_prompt,
                active=active,
                sequence_order=sequence_order,
            )

        self._after_write(distributor_id)
        logger.info(
            f"Logic script created: {row.id} distributor={distributor_id} "
            f"trigger={trigger_point} seq={sequence_order}"
        )
        return ScriptRecord.from_model(row)

    def update_script(
        self,
        distributor_id: str,
        script_id: Any,
        changes: Mapping[str, Any],
    ) -> ScriptRecord:
        if not isinstance(changes, Mapping) or not changes:
            raise ValueError("changes must be a non-empty object.")
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        with transaction.atomic():
            row = self._get_row(distributor_id, script_id)
            trigger_point = row.trigger_point
            if "trigger_point" in changes:
                trigger_point = _normalize_trigger_point(changes["trigger_point"])
                row.trigger_point = trigger_point
            if "script_content" in changes:
                row.script_content = _normalize_script_content(
                    changes["script_content"], trigger_point=trigger_point
                )
            if "description" in changes:
                row.description = (
                    _clean_optional_text(changes["description"], field_name="description")
                    or ""
                )
            if "original_prompt" in changes:
                row.original_prompt = _clean_optional_text(
                    changes["original_prompt"], field_name="original_prompt"
                )
            if "sequence_order" in changes:
                row.sequence_order = _normalize_sequence_order(changes["sequence_order"])
            if "active" in changes:
                row.active = _normalize_active(changes["active"])
            row.save()

        self._after_write(row.distributor_id)
        logger.info(
            f"Logic script updated: {row.id} distributor={row.distributor_id} "
            f"fields={sorted(changes)}"
        )
        return ScriptRecord.from_model(row)

    def set_active(self, distributor_id: str, script_id: Any, active: bool) -> ScriptRecord:
        return self.update_script(distributor_id, script_id, {"active": active})

    def delete_script(self, distributor_id: str, script_id: Any) -> None:
        with transaction.atomic():
            row = self._get_row(distributor_id, script_id)
            row_id = row.id
            row.delete()

        self._after_write(distributor_id)
        logger.info(f"Logic script deleted: {row_id} distributor={distributor_id}")

    def reorder_scripts(
        self,
        distributor_id: str,
        ordering: Iterable[Mapping[str, Any]],
    ) -> List[ScriptRecord]:
        """
        Apply ``[{"id": ..., "sequence_order": n}, ...]`` atomically.

        Every id must belong to the tenant, otherwise nothing is written.
        """
        distributor_id = _clean_string(distributor_id, field_name="distributor_id")
        if isinstance(ordering, (str, bytes)) or isinstance(ordering, Mapping):
            raise ValueError("scripts must be a list of {id, sequence_order} objects.")

        updates: dict[uuid.UUID, int] = {}
        for entry in ordering:
            if not isinstance(entry, Mapping):
                raise ValueError("scripts must be a list of {id, sequence_order} objects.")
            script_uuid = _canonical_uuid(entry.get("id"), field_name="id")
            updates[script_uuid] = _normalize_sequence_order(entry.get("sequence_order"))
        if not updates:
            raise ValueError("scripts must contain at least one entry.")

        with transaction.atomic():
            rows = {
                row.id: row
                for row in LogicScript.objects.select_for_update().filter(
                    distributor_id=distributor_id,
                    id__in=list(updates),
                )
            }
            for script_uuid in updates:
                if script_uuid not in rows:
                    raise ScriptNotFoundError(distributor_id, str(script_uuid))
            for script_uuid, sequence_order in updates.items():
                row = rows[script_uuid]
                row.sequence_order = sequence_order
                row.save(update_fields=["sequence_order", "updated_at"])

        self._after_write(distributor_id)
        logger.info(
            f"Logic scripts reordered: distributor={distributor_id} count={len(updates)}"
        )
        return self.list_scripts(distributor_id)

    # ══════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════

    def _get_row(self, distributor_id: str, script_id: Any) -> LogicScript:
        distributor_id = _clean_string(distributor_id, field_name="distributor_id")
        script_uuid = _canonical_uuid(script_id, field_name="script_id")
        row = LogicScript.objects.filter(
            id=script_uuid,
            distributor_id=distributor_id,
        ).first()
        if row is None:
            raise ScriptNotFoundError(distributor_id, str(script_uuid))
        return row

    @staticmethod
    def _next_sequence_order(distributor_id: str, trigger_point: str) -> int:
        current = LogicScript.objects.filter(
            distributor_id=distributor_id,
            trigger_point=trigger_point,
        ).aggregate(max_order=Max("sequence_order"))["max_order"]
        return 1 if current is None else current + 1

    def _after_write(self, distributor_id: str) -> None:
        # Evict only once the outermost transaction commits.
        transaction.on_commit(lambda: self._invalidate(distributor_id))
