"""
Feather Script Store - Read Records
===================================
Frozen view of a stored script. The cache, the pricing orchestrator
and the rule gate only ever see these, never ORM rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class ScriptRecord:
    id: str
    distributor_id: str
    trigger_point: str
    script_content: str
    description: str = ""
    sequence_order: int = 0
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    original_prompt: Optional[str] = None

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("id must be a non-empty string.")
        if not self.distributor_id or not isinstance(self.distributor_id, str):
            raise ValueError("distributor_id must be a non-empty string.")
        if not isinstance(self.trigger_point, str):
            raise ValueError("trigger_point must be a string.")
        if not isinstance(self.script_content, str):
            raise ValueError("script_content must be a string.")

    @classmethod
    def from_model(cls, row: Any) -> "ScriptRecord":
        return cls(
            id=str(row.id),
            distributor_id=row.distributor_id,
            trigger_point=row.trigger_point,
            script_content=row.script_content,
            description=row.description or "",
            sequence_order=row.sequence_order,
            active=bool(row.active),
            created_at=row.created_at,
            updated_at=row.updated_at,
            original_prompt=row.original_prompt,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "distributor_id": self.distributor_id,
            "trigger_point": self.trigger_point,
            "script_content": self.script_content,
            "description": self.description,
            "sequence_order": self.sequence_order,
            "active": self.active,
            "created_at": _iso_or_none(self.created_at),
            "updated_at": _iso_or_none(self.updated_at),
            "original_prompt": self.original_prompt,
        }


def _iso_or_none(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def execution_order_key(record: ScriptRecord) -> tuple:
    """
    Sort key for scripts within one trigger point.

    Equal sequence orders fall back to creation time then id; which of
    two colliding scripts runs first is not part of the contract.
    """
    created = record.created_at.timestamp() if record.created_at else 0.0
    return (record.sequence_order, created, record.id)
