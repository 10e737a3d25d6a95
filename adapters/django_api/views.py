"""
Feather Django Adapter Views
============================
Pass-through HTTP views over core/http_api handlers.
"""

from __future__ import annotations

import json
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_dependencies
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
from core.http_api.errors import ErrorCode, error_response, http_status_for
from core.http_api.handlers import (
    list_logic_scripts,
    post_execute_logic_scripts,
    post_logic_script_create,
    post_logic_script_delete,
    post_logic_script_reorder,
    post_logic_script_update,
    post_price_cart,
    post_price_products,
)

_UPDATE_ENVELOPE_KEYS = frozenset({"distributor_id", "script_id", "changes"})


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _json_payload(payload: dict[str, Any]) -> JsonResponse:
    return JsonResponse(payload, status=http_status_for(payload))


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except Exception as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _coerce_objects(value: Any, field_name: str) -> tuple[Any, ...]:
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    raise ValueError(f"{field_name} must be a list.")


def _optional_object(body: dict[str, Any], key: str) -> dict[str, Any]:
    value = body.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be an object.")
    return value


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        ErrorCode.METHOD_NOT_ALLOWED,
        "Method not allowed for this endpoint.",
        status=405,
    )


def _dispatch_write(write_handler, request_contract_factory, request: HttpRequest):
    try:
        body = _parse_json_body(request)
        contract = request_contract_factory(body=body)
    except KeyError as exc:
        return _json_error(
            ErrorCode.INVALID_REQUEST,
            f"{exc.args[0]} is required.",
            status=400,
        )
    except ValueError as exc:
        return _json_error(ErrorCode.INVALID_REQUEST, str(exc), status=400)

    return _json_payload(write_handler(contract, build_dependencies()))


# ══════════════════════════════════════════════════════════════
# CONTRACT FACTORIES
# ══════════════════════════════════════════════════════════════


def _execute_contract_factory(*, body):
    return ExecuteLogicScriptsHttpRequest(
        distributor_id=body["distributor_id"],
        trigger_point=body["trigger_point"],
        context=_optional_object(body, "context"),
    )


def _price_products_contract_factory(*, body):
    return PriceProductsHttpRequest(
        distributor_id=body["distributor_id"],
        products=_coerce_objects(body["products"], "products"),
        customer=_optional_object(body, "customer"),
    )


def _price_cart_contract_factory(*, body):
    return PriceCartHttpRequest(
        distributor_id=body["distributor_id"],
        items=_coerce_objects(body["items"], "items"),
        customer=_optional_object(body, "customer"),
        form_values=_optional_object(body, "form_values"),
    )


def _create_contract_factory(*, body):
    return LogicScriptCreateHttpRequest(
        distributor_id=body["distributor_id"],
        trigger_point=body["trigger_point"],
        script_content=body["script_content"],
        description=body.get("description") or "",
        original_prompt=body.get("original_prompt"),
        active=body.get("active", True),
        sequence_order=body.get("sequence_order"),
    )


def _update_contract_factory(*, body):
    # Accepts either {"changes": {...}} or the changed fields at top level.
    changes = body.get("changes")
    if changes is None:
        changes = {
            key: value
            for key, value in body.items()
            if key not in _UPDATE_ENVELOPE_KEYS
        }
    return LogicScriptUpdateHttpRequest(
        distributor_id=body["distributor_id"],
        script_id=body["script_id"],
        changes=changes,
    )


def _delete_contract_factory(*, body):
    return LogicScriptDeleteHttpRequest(
        distributor_id=body["distributor_id"],
        script_id=body["script_id"],
    )


def _reorder_contract_factory(*, body):
    return LogicScriptReorderHttpRequest(
        distributor_id=body["distributor_id"],
        scripts=_coerce_objects(body["scripts"], "scripts"),
    )


# ══════════════════════════════════════════════════════════════
# STOREFRONT VIEWS
# ══════════════════════════════════════════════════════════════


@csrf_exempt
def execute_logic_scripts_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(
        post_execute_logic_scripts,
        _execute_contract_factory,
        request,
    )


@csrf_exempt
def price_products_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(
        post_price_products,
        _price_products_contract_factory,
        request,
    )


@csrf_exempt
def price_cart_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(
        post_price_cart,
        _price_cart_contract_factory,
        request,
    )


# ══════════════════════════════════════════════════════════════
# AUTHORING VIEWS
# ══════════════════════════════════════════════════════════════


@csrf_exempt
def logic_scripts_view(request: HttpRequest) -> JsonResponse:
    if request.method == "POST":
        return _dispatch_write(
            post_logic_script_create,
            _create_contract_factory,
            request,
        )
    if request.method != "GET":
        return _method_not_allowed()

    try:
        distributor_id = request.GET.get("distributor_id")
        if distributor_id is None:
            raise ValueError("distributor_id is required.")
        contract = TenantReadRequest(
            distributor_id=distributor_id,
            trigger_point=request.GET.get("trigger_point") or None,
        )
    except ValueError as exc:
        return _json_error(ErrorCode.INVALID_REQUEST, str(exc), status=400)

    return _json_payload(list_logic_scripts(contract, build_dependencies()))


@csrf_exempt
def logic_scripts_update_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(
        post_logic_script_update,
        _update_contract_factory,
        request,
    )


@csrf_exempt
def logic_scripts_delete_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(
        post_logic_script_delete,
        _delete_contract_factory,
        request,
    )


@csrf_exempt
def logic_scripts_reorder_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(
        post_logic_script_reorder,
        _reorder_contract_factory,
        request,
    )
