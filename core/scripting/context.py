"""
Feather Scripting — Context Builders
======================================
Builds the schema-less mappings scripts are invoked with.

Scripts see plain dicts and lists. The only fields the host computes
are the cart aggregates below; every other key is tenant data passed
through untouched. Callers' objects are deep-copied so a script that
writes to its arguments cannot reach back into the request.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional

from core.scripting.contracts import (
    PRODUCT_CATEGORY,
    PRODUCT_QUANTITY,
    PRODUCT_UNIT_PRICE,
)

CART_ITEMS = "items"
CART_TOTAL = "total"
CART_SUBTOTAL = "subtotal"
CART_ITEM_COUNT = "itemCount"
CART_TOTAL_QUANTITY = "totalQuantity"
CART_QUANTITY_BY_CATEGORY = "quantityByCategory"

RESERVED_CART_KEYS = frozenset({
    CART_ITEMS,
    CART_TOTAL,
    CART_SUBTOTAL,
    CART_ITEM_COUNT,
    CART_TOTAL_QUANTITY,
    CART_QUANTITY_BY_CATEGORY,
})

_WHITESPACE = re.compile(r"\s+")


def empty_cart() -> Dict[str, Any]:
    return {CART_ITEMS: [], CART_TOTAL: 0, CART_SUBTOTAL: 0}


def as_number(value: Any, default: float = 0) -> float:
    """Lenient numeric coercion for tenant-supplied price/quantity data."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def line_quantity(item: Mapping) -> float:
    return as_number(item.get(PRODUCT_QUANTITY, 1), default=1)


def line_total(item: Mapping) -> float:
    return as_number(item.get(PRODUCT_UNIT_PRICE, 0)) * line_quantity(item)


def form_field_keys(label: str) -> List[str]:
    """
    Keys under which a dynamic form value is readable from the cart.

    "Order Type" -> ["Order Type", "order type", "order_type"]
    """
    lowered = label.lower()
    keys = [label, lowered, _WHITESPACE.sub("_", lowered.strip())]
    return list(dict.fromkeys(keys))


def merge_form_values(
    cart: Mapping[str, Any],
    form_values: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """Return a copy of ``cart`` with dynamic form values merged in."""
    merged = dict(cart)
    for label, value in (form_values or {}).items():
        if not isinstance(label, str) or not label.strip():
            continue
        for key in form_field_keys(label):
            # Aggregates computed by the host win over form fields.
            if key in RESERVED_CART_KEYS:
                continue
            merged[key] = value
    return merged


def build_cart_context(
    items: Iterable[Mapping[str, Any]],
    form_values: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Aggregate cart context shared by every line of a cart pass.

    Totals use the unit prices as supplied, before any pricing rule ran.
    """
    lines = [copy.deepcopy(dict(item)) for item in items]

    subtotal = sum(line_total(line) for line in lines)
    quantity_by_category: Dict[str, float] = {}
    for line in lines:
        category = line.get(PRODUCT_CATEGORY)
        if not isinstance(category, str):
            continue
        quantity_by_category[category] = (
            quantity_by_category.get(category, 0) + line_quantity(line)
        )

    cart = {
        CART_ITEMS: lines,
        CART_TOTAL: subtotal,
        CART_SUBTOTAL: subtotal,
        CART_ITEM_COUNT: len(lines),
        CART_TOTAL_QUANTITY: sum(line_quantity(line) for line in lines),
        CART_QUANTITY_BY_CATEGORY: quantity_by_category,
    }
    return merge_form_values(cart, form_values)
