"""
Feather HTTP API - Framework-Agnostic Handlers
==============================================
Pure handler functions over contracts and injected dependencies.

Every handler returns an envelope dict and never raises:
validation problems become INVALID_REQUEST, unknown scripts become
NOT_FOUND, anything else is logged and reported as INTERNAL_ERROR.
"""

from __future__ import annotations

import logging
from typing import Any

from core.http_api.contracts import (
    ExecuteLogicScriptsHttpRequest,
    LogicScriptCreateHttpRequest,
    LogicScriptDeleteHttpRequest,
    LogicScriptReorderHttpRequest,
    LogicScriptUpdateHttpRequest,
    PriceCartHttpRequest,
    PriceProductsHttpRequest,
    TenantReadRequest,
)
from core.http_api.errors import ErrorCode, error_response, success_response
from core.script_store.errors import ScriptNotFoundError
from core.scripting.context import line_total

logger = logging.getLogger("feather.http_api")


def _invalid(exc: Exception) -> dict[str, Any]:
    return error_response(code=ErrorCode.INVALID_REQUEST, message=str(exc))


def _not_found(exc: ScriptNotFoundError) -> dict[str, Any]:
    return error_response(
        code=ErrorCode.NOT_FOUND,
        message="Logic script not found.",
        details={"script_id": str(exc.script_id)},
    )


def _internal(exc: Exception, message: str) -> dict[str, Any]:
    logger.error(f"{message} ({type(exc).__name__}: {exc})", exc_info=True)
    return error_response(
        code=ErrorCode.INTERNAL_ERROR,
        message=message,
        details={"error_type": type(exc).__name__},
    )


def _priced_cart_payload(priced: list) -> dict[str, Any]:
    items = []
    subtotal = 0
    for result in priced:
        line = result.to_dict()
        items.append(line)
        subtotal += line_total(line)
    return {"items": items, "subtotal": subtotal}


# ══════════════════════════════════════════════════════════════
# STOREFRONT
# ══════════════════════════════════════════════════════════════


def post_execute_logic_scripts(
    request: ExecuteLogicScriptsHttpRequest,
    dependencies,
) -> dict[str, Any]:
    try:
        decision = dependencies.rule_gate.evaluate(
            request.trigger_point,
            request.distributor_id,
            request.context,
        )
    except Exception as exc:
        return _internal(exc, "Failed to execute logic scripts.")
    return success_response(decision.to_dict())


def post_price_products(
    request: PriceProductsHttpRequest,
    dependencies,
) -> dict[str, Any]:
    try:
        priced = dependencies.pricing.price_products(
            request.products,
            request.distributor_id,
            customer=request.customer,
        )
    except Exception as exc:
        return _internal(exc, "Failed to price products.")
    return success_response([result.to_dict() for result in priced])


def post_price_cart(
    request: PriceCartHttpRequest,
    dependencies,
) -> dict[str, Any]:
    try:
        priced = dependencies.pricing.price_cart_items(
            request.items,
            request.distributor_id,
            customer=request.customer,
            form_values=request.form_values,
        )
    except Exception as exc:
        return _internal(exc, "Failed to price cart.")
    return success_response(_priced_cart_payload(priced))


# ══════════════════════════════════════════════════════════════
# SCRIPT AUTHORING
# ══════════════════════════════════════════════════════════════


def list_logic_scripts(
    request: TenantReadRequest,
    dependencies,
) -> dict[str, Any]:
    try:
        records = dependencies.script_service.list_scripts(
            request.distributor_id,
            trigger_point=request.trigger_point,
        )
    except ValueError as exc:
        return _invalid(exc)
    except Exception as exc:
        return _internal(exc, "Failed to read logic scripts.")
    return success_response([record.to_dict() for record in records])


def post_logic_script_create(
    request: LogicScriptCreateHttpRequest,
    dependencies,
) -> dict[str, Any]:
    try:
        record = dependencies.script_service.create_script(
            distributor_id=request.distributor_id,
            trigger_point=request.trigger_point,
            script_content=request.script_content,
            description=request.description,
            original_prompt=request.original_prompt,
            active=request.active,
            sequence_order=request.sequence_order,
        )
    except ValueError as exc:
        return _invalid(exc)
    except Exception as exc:
        return _internal(exc, "Failed to create logic script.")
    return success_response(record.to_dict())


def post_logic_script_update(
    request: LogicScriptUpdateHttpRequest,
    dependencies,
) -> dict[str, Any]:
    try:
        record = dependencies.script_service.update_script(
            request.distributor_id,
            request.script_id,
            request.changes,
        )
    except ScriptNotFoundError as exc:
        return _not_found(exc)
    except ValueError as exc:
        return _invalid(exc)
    except Exception as exc:
        return _internal(exc, "Failed to update logic script.")
    return success_response(record.to_dict())


def post_logic_script_delete(
    request: LogicScriptDeleteHttpRequest,
    dependencies,
) -> dict[str, Any]:
    try:
        dependencies.script_service.delete_script(
            request.distributor_id,
            request.script_id,
        )
    except ScriptNotFoundError as exc:
        return _not_found(exc)
    except ValueError as exc:
        return _invalid(exc)
    except Exception as exc:
        return _internal(exc, "Failed to delete logic script.")
    return success_response({"deleted": True, "script_id": request.script_id})


def post_logic_script_reorder(
    request: LogicScriptReorderHttpRequest,
    dependencies,
) -> dict[str, Any]:
    try:
        records = dependencies.script_service.reorder_scripts(
            request.distributor_id,
            request.scripts,
        )
    except ScriptNotFoundError as exc:
        return _not_found(exc)
    except ValueError as exc:
        return _invalid(exc)
    except Exception as exc:
        return _internal(exc, "Failed to reorder logic scripts.")
    return success_response([record.to_dict() for record in records])
