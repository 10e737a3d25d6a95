from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from core.caching.script_cache import ScriptCache
from core.http_api.contracts import (
    ExecuteLogicScriptsHttpRequest,
    HttpApiErrorBody,
    HttpApiResponse,
    LogicScriptCreateHttpRequest,
    LogicScriptDeleteHttpRequest,
    LogicScriptReorderHttpRequest,
    LogicScriptUpdateHttpRequest,
    PriceCartHttpRequest,
    PriceProductsHttpRequest,
    TenantReadRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import http_status_for
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
from core.script_store.repository import DjangoScriptStore
from core.script_store.service import LogicScriptService
from core.time.clock import FixedClock
from engines.business_rules.services import BusinessRuleGate
from engines.pricing.services import PricingOrchestrator

pytestmark = pytest.mark.django_db(transaction=True)

T0 = datetime(2025, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
TENANT = "dist-http"

HALF_PRICE = "product['unitPrice'] = product['unitPrice'] / 2\nreturn product"
MINIMUM_ORDER = (
    "if cart.get('total', 0) < 100:\n"
    "    return {'allow': False, 'message': 'Minimum order is $100'}\n"
    "return {'allow': True}"
)


class BrokenPricing:
    def price_products(self, products, tenant_id, customer=None):
        raise RuntimeError("pricing backend down")

    def price_cart_items(self, items, tenant_id, customer=None, form_values=None):
        raise RuntimeError("pricing backend down")


def _build_dependencies(**overrides) -> HttpApiDependencies:
    cache = ScriptCache(DjangoScriptStore(), clock=FixedClock(T0))
    values = {
        "pricing": PricingOrchestrator(cache),
        "rule_gate": BusinessRuleGate(cache),
        "script_service": LogicScriptService(invalidate=cache.invalidate),
    }
    values.update(overrides)
    return HttpApiDependencies(**values)


def _create(deps, trigger_point, script_content, **kwargs):
    response = post_logic_script_create(
        LogicScriptCreateHttpRequest(
            distributor_id=TENANT,
            trigger_point=trigger_point,
            script_content=script_content,
            **kwargs,
        ),
        deps,
    )
    assert response["ok"] is True
    return response["data"]


class TestContracts:
    def test_blank_distributor_rejected(self):
        with pytest.raises(ValueError, match="distributor_id"):
            TenantReadRequest(distributor_id="  ")

    def test_products_must_be_objects(self):
        with pytest.raises(ValueError):
            PriceProductsHttpRequest(distributor_id=TENANT, products=("sku-1",))

    def test_reorder_needs_entries(self):
        with pytest.raises(ValueError):
            LogicScriptReorderHttpRequest(distributor_id=TENANT, scripts=())

    def test_update_needs_changes(self):
        with pytest.raises(ValueError):
            LogicScriptUpdateHttpRequest(distributor_id=TENANT, script_id="x", changes={})

    def test_error_envelope(self):
        payload = HttpApiResponse(
            ok=False, error=HttpApiErrorBody(code="NOT_FOUND", message="gone"),
        ).to_dict()
        assert payload == {
            "ok": False,
            "error": {"code": "NOT_FOUND", "message": "gone", "details": {}},
        }
        assert http_status_for(payload) == 404

    def test_success_envelope_with_meta(self):
        payload = HttpApiResponse(ok=True, data=[1], meta={"count": 1}).to_dict()
        assert payload == {"ok": True, "data": [1], "meta": {"count": 1}}
        assert http_status_for(payload) == 200


class TestStorefrontHandlers:
    def test_execute_without_scripts_allows(self):
        response = post_execute_logic_scripts(
            ExecuteLogicScriptsHttpRequest(distributor_id=TENANT, trigger_point="submit"),
            _build_dependencies(),
        )
        assert response["ok"] is True
        assert response["data"]["allowed"] is True

    def test_execute_blocks(self):
        deps = _build_dependencies()
        created = _create(deps, "submit", MINIMUM_ORDER)
        response = post_execute_logic_scripts(
            ExecuteLogicScriptsHttpRequest(
                distributor_id=TENANT,
                trigger_point="submit",
                context={"cart": {"total": 40}},
            ),
            deps,
        )
        assert response["data"] == {
            "allowed": False,
            "trigger_point": "submit",
            "scripts_run": 1,
            "message": "Minimum order is $100",
            "blocked_by": created["id"],
        }

    def test_price_products(self):
        deps = _build_dependencies()
        _create(deps, "storefront_load", HALF_PRICE, description="Half price")
        response = post_price_products(
            PriceProductsHttpRequest(
                distributor_id=TENANT,
                products=({"sku": "A", "unitPrice": 10, "name": "Oil"},),
            ),
            deps,
        )
        [line] = response["data"]
        assert line["unitPrice"] == 5
        assert line["originalPrice"] == 10
        assert line["onSale"] is True
        assert line["pricingRule"] == "Half price"
        assert line["name"] == "Oil"

    def test_price_cart_reports_subtotal(self):
        deps = _build_dependencies()
        _create(deps, "storefront_load", HALF_PRICE)
        response = post_price_cart(
            PriceCartHttpRequest(
                distributor_id=TENANT,
                items=(
                    {"sku": "A", "unitPrice": 10, "quantity": 3},
                    {"sku": "B", "unitPrice": 4},
                ),
            ),
            deps,
        )
        assert response["data"]["subtotal"] == 17
        assert [line["unitPrice"] for line in response["data"]["items"]] == [5, 2]

    def test_pricing_failure_is_internal_error(self):
        response = post_price_products(
            PriceProductsHttpRequest(distributor_id=TENANT, products=()),
            _build_dependencies(pricing=BrokenPricing()),
        )
        assert response["ok"] is False
        assert response["error"]["code"] == "INTERNAL_ERROR"
        assert response["error"]["details"] == {"error_type": "RuntimeError"}


class TestAuthoringHandlers:
    def test_create_and_list(self):
        deps = _build_dependencies()
        created = _create(deps, "submit", MINIMUM_ORDER, original_prompt="min $100")
        response = list_logic_scripts(TenantReadRequest(distributor_id=TENANT), deps)
        assert [row["id"] for row in response["data"]] == [created["id"]]
        assert response["data"][0]["original_prompt"] == "min $100"

    def test_create_with_syntax_error_is_invalid(self):
        response = post_logic_script_create(
            LogicScriptCreateHttpRequest(
                distributor_id=TENANT,
                trigger_point="submit",
                script_content="return (",
            ),
            _build_dependencies(),
        )
        assert response["error"]["code"] == "INVALID_REQUEST"
        assert http_status_for(response) == 400

    def test_update_changes_gate_outcome(self):
        deps = _build_dependencies()
        created = _create(deps, "submit", MINIMUM_ORDER)
        request = ExecuteLogicScriptsHttpRequest(distributor_id=TENANT, trigger_point="submit")
        assert post_execute_logic_scripts(request, deps)["data"]["allowed"] is False

        response = post_logic_script_update(
            LogicScriptUpdateHttpRequest(
                distributor_id=TENANT,
                script_id=created["id"],
                changes={"active": False},
            ),
            deps,
        )
        assert response["data"]["active"] is False
        assert post_execute_logic_scripts(request, deps)["data"]["allowed"] is True

    def test_update_unknown_script_is_not_found(self):
        missing = str(uuid.uuid4())
        response = post_logic_script_update(
            LogicScriptUpdateHttpRequest(
                distributor_id=TENANT, script_id=missing, changes={"active": False},
            ),
            _build_dependencies(),
        )
        assert response["error"]["code"] == "NOT_FOUND"
        assert response["error"]["details"] == {"script_id": missing}

    def test_delete(self):
        deps = _build_dependencies()
        created = _create(deps, "submit", MINIMUM_ORDER)
        response = post_logic_script_delete(
            LogicScriptDeleteHttpRequest(distributor_id=TENANT, script_id=created["id"]),
            deps,
        )
        assert response["data"] == {"deleted": True, "script_id": created["id"]}
        again = post_logic_script_delete(
            LogicScriptDeleteHttpRequest(distributor_id=TENANT, script_id=created["id"]),
            deps,
        )
        assert again["error"]["code"] == "NOT_FOUND"

    def test_reorder(self):
        deps = _build_dependencies()
        first = _create(deps, "storefront_load", HALF_PRICE)
        second = _create(deps, "storefront_load", HALF_PRICE)
        response = post_logic_script_reorder(
            LogicScriptReorderHttpRequest(
                distributor_id=TENANT,
                scripts=(
                    {"id": first["id"], "sequence_order": 10},
                    {"id": second["id"], "sequence_order": 5},
                ),
            ),
            deps,
        )
        assert [row["id"] for row in response["data"]] == [second["id"], first["id"]]
