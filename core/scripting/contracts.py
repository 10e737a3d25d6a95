"""
Feather Scripting — Host/Script Contract
==========================================
Names that tenant-authored scripts depend on at runtime.

Every stored script is a function body compiled against one of the
parameter lists below. The names are part of the stored data: renaming
any of them breaks every script already saved for every tenant.
"""

from __future__ import annotations

from typing import Tuple


# ══════════════════════════════════════════════════════════════
# TRIGGER POINTS
# ══════════════════════════════════════════════════════════════

class TriggerPoint:
    """Moments in the storefront flow where tenant logic may run."""

    STOREFRONT_LOAD = "storefront_load"
    ADD_TO_CART = "add_to_cart"
    QUANTITY_CHANGE = "quantity_change"
    SUBMIT = "submit"

    ALL = frozenset({
        STOREFRONT_LOAD,
        ADD_TO_CART,
        QUANTITY_CHANGE,
        SUBMIT,
    })

    # storefront_load scripts are also the pricing scripts
    PRICING = STOREFRONT_LOAD


def is_known_trigger_point(value: object) -> bool:
    return isinstance(value, str) and value in TriggerPoint.ALL


# ══════════════════════════════════════════════════════════════
# PARAMETER LISTS
# ══════════════════════════════════════════════════════════════

LOGIC_SCRIPT_PARAMETERS: Tuple[str, ...] = (
    "customer",
    "cart",
    "products",
    "distributor_id",
)

PRICING_SCRIPT_PARAMETERS: Tuple[str, ...] = (
    "customer",
    "product",
    "cart",
    "customTables",
    "orderHistory",
    "distributor_id",
)


# ══════════════════════════════════════════════════════════════
# DOCUMENTED FIELD NAMES
# ══════════════════════════════════════════════════════════════

# Product fields the engine itself reads. Everything else on a product
# is opaque tenant data.
PRODUCT_SKU = "sku"
PRODUCT_UNIT_PRICE = "unitPrice"
PRODUCT_PRICING_RULE = "pricingRule"
PRODUCT_QUANTITY = "quantity"
PRODUCT_CATEGORY = "category"

# Logic script result fields.
RESULT_ALLOW = "allow"
RESULT_MESSAGE = "message"

DEFAULT_BLOCK_MESSAGE = "Action blocked by business rule"
