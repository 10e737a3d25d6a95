"""
Feather HTTP API - Contracts
============================
Framework-agnostic request/response DTOs for the script engine endpoints.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional


def _check_distributor_id(value: Any) -> None:
    if not value or not isinstance(value, str) or not value.strip():
        raise ValueError("distributor_id must be a non-empty string.")


def _check_mapping_tuple(value: Any, field_name: str) -> None:
    if not isinstance(value, tuple):
        raise ValueError(f"{field_name} must be a tuple.")
    for entry in value:
        if not isinstance(entry, Mapping):
            raise ValueError(f"{field_name} entries must be objects.")


def _check_mapping(value: Any, field_name: str) -> None:
    if not isinstance(value, Mapping):
        raise ValueError(f"{field_name} must be an object.")


@dataclass(frozen=True)
class TenantReadRequest:
    distributor_id: str
    trigger_point: Optional[str] = None

    def __post_init__(self):
        _check_distributor_id(self.distributor_id)
        if self.trigger_point is not None and not isinstance(self.trigger_point, str):
            raise ValueError("trigger_point must be a string or None.")


@dataclass(frozen=True)
class ExecuteLogicScriptsHttpRequest:
    distributor_id: str
    trigger_point: str
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        _check_distributor_id(self.distributor_id)
        if not self.trigger_point or not isinstance(self.trigger_point, str):
            raise ValueError("trigger_point must be a non-empty string.")
        _check_mapping(self.context, "context")


@dataclass(frozen=True)
class PriceProductsHttpRequest:
    distributor_id: str
    products: tuple[dict[str, Any], ...]
    customer: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        _check_distributor_id(self.distributor_id)
        _check_mapping_tuple(self.products, "products")
        _check_mapping(self.customer, "customer")


@dataclass(frozen=True)
class PriceCartHttpRequest:
    distributor_id: str
    items: tuple[dict[str, Any], ...]
    customer: dict[str, Any] = field(default_factory=dict)
    form_values: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        _check_distributor_id(self.distributor_id)
        _check_mapping_tuple(self.items, "items")
        _check_mapping(self.customer, "customer")
        _check_mapping(self.form_values, "form_values")


@dataclass(frozen=True)
class LogicScriptCreateHttpRequest:
    distributor_id: str
    trigger_point: str
    script_content: str
    description: str = ""
    original_prompt: Optional[str] = None
    active: bool = True
    sequence_order: Optional[int] = None

    def __post_init__(self):
        _check_distributor_id(self.distributor_id)
        if not self.trigger_point or not isinstance(self.trigger_point, str):
            raise ValueError("trigger_point must be a non-empty string.")
        if not self.script_content or not isinstance(self.script_content, str):
            raise ValueError("script_content must be a non-empty string.")
        if not isinstance(self.active, bool):
            raise ValueError("active must be a boolean.")


@dataclass(frozen=True)
class LogicScriptUpdateHttpRequest:
    distributor_id: str
    script_id: str
    changes: dict[str, Any]

    def __post_init__(self):
        _check_distributor_id(self.distributor_id)
        if not self.script_id or not isinstance(self.script_id, str):
            raise ValueError("script_id must be a non-empty string.")
        _check_mapping(self.changes, "changes")
        if not self.changes:
            raise ValueError("changes must not be empty.")


@dataclass(frozen=True)
class LogicScriptDeleteHttpRequest:
    distributor_id: str
    script_id: str

    def __post_init__(self):
        _check_distributor_id(self.distributor_id)
        if not self.script_id or not isinstance(self.script_id, str):
            raise ValueError("script_id must be a non-empty string.")


@dataclass(frozen=True)
class LogicScriptReorderHttpRequest:
    distributor_id: str
    scripts: tuple[dict[str, Any], ...]

    def __post_init__(self):
        _check_distributor_id(self.distributor_id)
        _check_mapping_tuple(self.scripts, "scripts")
        if not self.scripts:
            raise ValueError("scripts must contain at least one entry.")


@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class HttpApiResponse:
    ok: bool
    data: Any = None
    error: Optional[HttpApiErrorBody] = None
    meta: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            payload = {"ok": True, "data": self.data}
        else:
            if self.error is None:
                raise ValueError("error must be set when ok is False.")
            payload = {"ok": False, "error": self.error.to_dict()}
        if self.meta:
            payload["meta"] = dict(self.meta)
        return payload
