"""
Feather Pricing Engine — Result Models
========================================
AppliedRule: one script that moved a product's price.
PricingResult: final price of one product plus its audit trail.

Computed per request and attached to the API response. Never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple


class RuleType:
    DISCOUNT = "discount"
    SURCHARGE = "surcharge"
    OVERRIDE = "override"


def classify_price_change(old_price: Any, new_price: Any) -> str:
    if is_price(old_price) and is_price(new_price):
        if new_price < old_price:
            return RuleType.DISCOUNT
        if new_price > old_price:
            return RuleType.SURCHARGE
    return RuleType.OVERRIDE


def is_price(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ══════════════════════════════════════════════════════════════
# APPLIED RULE (audit entry)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AppliedRule:
    script_id: str
    description: str
    rule_type: str
    old_price: Any
    new_price: Any

    def to_dict(self) -> dict:
        return {
            "script_id": self.script_id,
            "description": self.description,
            "rule_type": self.rule_type,
            "old_price": self.old_price,
            "new_price": self.new_price,
        }


# ══════════════════════════════════════════════════════════════
# PRICING RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PricingResult:
    """
    Fields:
        sku:            Identity key of the priced product.
        original_price: unitPrice before any script ran.
        unit_price:     unitPrice after the last script.
        price_changed:  unit_price != original_price.
        pricing_rule:   Badge text for the storefront ("20% off Oil").
        on_sale:        True when the product should show a sale badge.
        applied_rules:  Scripts that moved the price, in execution order.
        product:        Final product mapping, tenant fields included.
    """

    sku: Any
    original_price: Any
    unit_price: Any
    price_changed: bool
    pricing_rule: Optional[str] = None
    on_sale: bool = False
    applied_rules: Tuple[AppliedRule, ...] = ()
    product: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Product mapping enriched for the storefront."""
        data = dict(self.product)
        data["unitPrice"] = self.unit_price
        if self.price_changed:
            data["originalPrice"] = self.original_price
        else:
            data.pop("originalPrice", None)
        data["onSale"] = self.on_sale
        data["pricingRule"] = self.pricing_rule
        data["appliedRules"] = [rule.to_dict() for rule in self.applied_rules]
        return data
