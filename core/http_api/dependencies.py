"""
Feather HTTP API - Dependencies
===============================
Injected services for handler wiring.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol


class PricingProtocol(Protocol):
    def price_products(self, products, tenant_id: str, customer=None) -> list:
        ...

    def price_cart_items(self, items, tenant_id: str, customer=None, form_values=None) -> list:
        ...


class RuleGateProtocol(Protocol):
    def evaluate(
        self,
        trigger_point: str,
        tenant_id: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        ...


@dataclass(frozen=True)
class HttpApiDependencies:
    pricing: PricingProtocol
    rule_gate: RuleGateProtocol
    script_service: Any
