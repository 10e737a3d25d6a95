"""
Feather Pricing Engine — Pricing Orchestrator
===============================================
Applies a tenant's storefront_load scripts to products.

Scripts run in stored order and COMPOSE: the product handed to script
N+1 carries the price script N produced. There is no conflict detection
between rules; order is the only tie-break.

A script signals a price change by returning the product mapping (same
sku) with a new unitPrice. Anything else means "no change". A script
that raises is skipped and the chain continues (logged by the runner).

Numeric policy: prices are plain int/float; no rounding is applied here.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Sequence

from core.caching.script_cache import ScriptCache
from core.script_store.records import ScriptRecord
from core.scripting.context import build_cart_context, empty_cart
from core.scripting.contracts import (
    PRODUCT_PRICING_RULE,
    PRODUCT_SKU,
    PRODUCT_UNIT_PRICE,
    TriggerPoint,
)
from core.scripting.runner import ScriptRunner
from engines.pricing.models import (
    AppliedRule,
    PricingResult,
    RuleType,
    classify_price_change,
    is_price,
)

logger = logging.getLogger("feather.pricing")

ON_SALE_FIELD = "onSale"


class PricingOrchestrator:
    """
    Usage:
        pricing = PricingOrchestrator(script_cache)
        results = pricing.price_cart_items(items, "acme", customer)
        payload = [r.to_dict() for r in results]
    """

    def __init__(self, script_cache: ScriptCache, runner: Optional[ScriptRunner] = None):
        self._script_cache = script_cache
        self._runner = runner or ScriptRunner()

    # ══════════════════════════════════════════════════════════
    # PUBLIC OPERATIONS
    # ══════════════════════════════════════════════════════════

    def price_product(
        self,
        product: Mapping[str, Any],
        tenant_id: str,
        customer: Optional[Mapping[str, Any]] = None,
        cart: Optional[Mapping[str, Any]] = None,
        custom_tables: Optional[Mapping[str, Any]] = None,
        order_history: Optional[Sequence[Any]] = None,
    ) -> PricingResult:
        scripts = self._pricing_scripts(tenant_id)
        return self._price_with_scripts(
            product,
            scripts,
            tenant_id=tenant_id,
            customer=customer,
            cart=cart if cart is not None else empty_cart(),
            custom_tables=custom_tables,
            order_history=order_history,
        )

    def price_products(
        self,
        products: Iterable[Mapping[str, Any]],
        tenant_id: str,
        customer: Optional[Mapping[str, Any]] = None,
    ) -> List[PricingResult]:
        """Price each product on its own, against an empty cart."""
        scripts = self._pricing_scripts(tenant_id)
        return [
            self._price_with_scripts(
                product,
                scripts,
                tenant_id=tenant_id,
                customer=customer,
                cart=empty_cart(),
            )
            for product in products
        ]

    def price_cart_items(
        self,
        items: Iterable[Mapping[str, Any]],
        tenant_id: str,
        customer: Optional[Mapping[str, Any]] = None,
        form_values: Optional[Mapping[str, Any]] = None,
    ) -> List[PricingResult]:
        """
        Price cart lines against one shared aggregate cart context, so
        quantity-threshold rules see the whole cart. Aggregates use the
        pre-rule unit prices.
        """
        lines = list(items)
        cart = build_cart_context(lines, form_values)
        scripts = self._pricing_scripts(tenant_id)
        return [
            self._price_with_scripts(
                line,
                scripts,
                tenant_id=tenant_id,
                customer=customer,
                cart=cart,
            )
            for line in lines
        ]

    # ══════════════════════════════════════════════════════════
    # SCRIPT CHAIN
    # ══════════════════════════════════════════════════════════

    def _pricing_scripts(self, tenant_id: str) -> Sequence[ScriptRecord]:
        return self._script_cache.get_scripts(tenant_id, TriggerPoint.PRICING)

    def _price_with_scripts(
        self,
        product: Mapping[str, Any],
        scripts: Sequence[ScriptRecord],
        *,
        tenant_id: str,
        customer: Optional[Mapping[str, Any]],
        cart: Mapping[str, Any],
        custom_tables: Optional[Mapping[str, Any]] = None,
        order_history: Optional[Sequence[Any]] = None,
    ) -> PricingResult:
        working = copy.deepcopy(dict(product))
        sku = working.get(PRODUCT_SKU)
        original_price = working.get(PRODUCT_UNIT_PRICE)
        applied: List[AppliedRule] = []

        for script in scripts:
            result = self._runner.run_pricing(
                script.script_content,
                customer=copy.deepcopy(dict(customer or {})),
                product=copy.deepcopy(working),
                cart=copy.deepcopy(dict(cart)),
                custom_tables=copy.deepcopy(dict(custom_tables or {})),
                order_history=copy.deepcopy(list(order_history or [])),
                distributor_id=tenant_id,
                script_id=script.id,
            )
            accepted = self._accept_result(result, sku=sku, script=script)
            if accepted is None:
                continue

            old_price = working.get(PRODUCT_UNIT_PRICE)
            new_price = accepted.get(PRODUCT_UNIT_PRICE)
            if new_price != old_price:
                rule = AppliedRule(
                    script_id=script.id,
                    description=self._describe(script, previous=working, current=accepted),
                    rule_type=classify_price_change(old_price, new_price),
                    old_price=old_price,
                    new_price=new_price,
                )
                applied.append(rule)
                logger.debug(
                    f"Pricing rule applied: sku={sku} script={script.id} "
                    f"{old_price} -> {new_price}"
                )
            working = accepted

        return self._build_result(working, sku=sku, original_price=original_price, applied=applied)

    @staticmethod
    def _accept_result(
        result: Any,
        *,
        sku: Any,
        script: ScriptRecord,
    ) -> Optional[dict]:
        """The new working product, or None when the result means no change."""
        if result is None:
            return None
        if not isinstance(result, Mapping):
            logger.debug(
                f"Pricing script {script.id} returned {type(result).__name__}; ignored."
            )
            return None
        if result.get(PRODUCT_SKU) != sku:
            return None
        if not is_price(result.get(PRODUCT_UNIT_PRICE)):
            logger.warning(
                f"Pricing script {script.id} returned non-numeric unitPrice "
                f"{result.get(PRODUCT_UNIT_PRICE)!r} for sku={sku}; ignored."
            )
            return None
        return dict(result)

    @staticmethod
    def _describe(script: ScriptRecord, *, previous: Mapping, current: Mapping) -> str:
        rule_text = current.get(PRODUCT_PRICING_RULE)
        if rule_text and rule_text != previous.get(PRODUCT_PRICING_RULE):
            return str(rule_text)
        return script.description or f"Logic script {script.id}"

    @staticmethod
    def _build_result(
        working: dict,
        *,
        sku: Any,
        original_price: Any,
        applied: List[AppliedRule],
    ) -> PricingResult:
        unit_price = working.get(PRODUCT_UNIT_PRICE)
        price_changed = unit_price != original_price

        pricing_rule = None
        if price_changed:
            pricing_rule = working.get(PRODUCT_PRICING_RULE)
            if not pricing_rule and applied:
                pricing_rule = applied[-1].description

        if ON_SALE_FIELD in working:
            on_sale = bool(working[ON_SALE_FIELD])
        else:
            on_sale = price_changed and (
                classify_price_change(original_price, unit_price) == RuleType.DISCOUNT
            )

        return PricingResult(
            sku=sku,
            original_price=original_price,
            unit_price=unit_price,
            price_changed=price_changed,
            pricing_rule=pricing_rule,
            on_sale=on_sale,
            applied_rules=tuple(applied),
            product=working,
        )
