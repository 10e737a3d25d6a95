"""
Feather Business Rules — Rule Gate
====================================
Allows or blocks a storefront action using the tenant's scripts for a
trigger point (add_to_cart, quantity_change, submit, ...).

Evaluation is a short-circuiting AND over the ordered script list:

    evaluating[i] ──allow=False──▶ BLOCKED   (stop, remaining scripts never run)
         │
         └──otherwise──▶ evaluating[i+1] ... ──exhausted──▶ ALLOWED

Fail-open per rule: a script that raises or returns garbage counts as
allow for that script only. Nothing here raises to the caller.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, Optional

from core.caching.script_cache import ScriptCache
from core.scripting.context import empty_cart, merge_form_values
from core.scripting.contracts import (
    DEFAULT_BLOCK_MESSAGE,
    RESULT_ALLOW,
    RESULT_MESSAGE,
)
from core.scripting.runner import ScriptRunner
from engines.business_rules.models import GateDecision

logger = logging.getLogger("feather.rules")

FORM_VALUES_KEY = "form_values"


def build_logic_context(tenant_id: str, context: Optional[Mapping[str, Any]]) -> dict:
    """
    Resolve the four script parameters from a caller context.

    customer/cart/products come from the context when present. Other
    keys describe the action itself (``item``, ``quantity``,
    ``newQuantity`` ...) and are merged into the cart, next to dynamic
    form values, without overriding existing cart fields. The tenant id
    always comes from the caller, never from the context.
    """
    ctx = copy.deepcopy(dict(context or {}))

    customer = ctx.pop("customer", None)
    cart = ctx.pop("cart", None)
    products = ctx.pop("products", None)
    form_values = ctx.pop(FORM_VALUES_KEY, None)
    ctx.pop("distributor_id", None)

    cart = dict(cart) if isinstance(cart, Mapping) else empty_cart()
    cart = merge_form_values(cart, form_values if isinstance(form_values, Mapping) else None)
    for key, value in ctx.items():
        cart.setdefault(key, value)

    return {
        "customer": dict(customer) if isinstance(customer, Mapping) else {},
        "cart": cart,
        "products": list(products) if isinstance(products, (list, tuple)) else [],
        "distributor_id": tenant_id,
    }


class BusinessRuleGate:
    """
    Usage:
        gate = BusinessRuleGate(script_cache)
        decision = gate.evaluate("submit", "acme", {"cart": cart})
        if not decision.allowed:
            return error(decision.message)
    """

    def __init__(self, script_cache: ScriptCache, runner: Optional[ScriptRunner] = None):
        self._script_cache = script_cache
        self._runner = runner or ScriptRunner()

    def evaluate(
        self,
        trigger_point: str,
        tenant_id: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> GateDecision:
        scripts = self._script_cache.get_scripts(tenant_id, trigger_point)
        if not scripts:
            return GateDecision(allowed=True, trigger_point=trigger_point)

        params = build_logic_context(tenant_id, context)

        scripts_run = 0
        for script in scripts:
            result = self._runner.run_logic(
                script.script_content,
                script_id=script.id,
                **params,
            )
            scripts_run += 1

            if result is None:
                continue
            if not isinstance(result, Mapping):
                logger.debug(
                    f"Logic script {script.id} returned {type(result).__name__}; "
                    f"treated as allow."
                )
                continue
            if result.get(RESULT_ALLOW) is False:
                message = result.get(RESULT_MESSAGE) or DEFAULT_BLOCK_MESSAGE
                logger.info(
                    f"Action blocked: tenant={tenant_id} trigger={trigger_point} "
                    f"script={script.id} message={message!r}"
                )
                return GateDecision(
                    allowed=False,
                    trigger_point=trigger_point,
                    message=str(message),
                    blocked_by=script.id,
                    scripts_run=scripts_run,
                )

        return GateDecision(
            allowed=True,
            trigger_point=trigger_point,
            scripts_run=scripts_run,
        )

    def validate_action(
        self,
        trigger_point: str,
        tenant_id: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> GateDecision:
        return self.evaluate(trigger_point, tenant_id, context)
