"""
Tests for core.scripting.context — cart aggregates and form values.
"""

from __future__ import annotations

from core.scripting.context import (
    as_number,
    build_cart_context,
    empty_cart,
    form_field_keys,
    merge_form_values,
)


class TestAsNumber:
    def test_numbers_pass_through(self):
        assert as_number(3) == 3
        assert as_number(2.5) == 2.5

    def test_numeric_strings_are_parsed(self):
        assert as_number("4.5") == 4.5

    def test_garbage_uses_default(self):
        assert as_number("n/a") == 0
        assert as_number(None, default=7) == 7
        assert as_number(True, default=1) == 1


class TestFormValues:
    def test_field_keys(self):
        assert form_field_keys("Order Type") == ["Order Type", "order type", "order_type"]
        assert form_field_keys("po") == ["po"]

    def test_merge_exposes_every_key_form(self):
        cart = merge_form_values(empty_cart(), {"Delivery Date": "2025-03-02"})
        assert cart["Delivery Date"] == "2025-03-02"
        assert cart["delivery date"] == "2025-03-02"
        assert cart["delivery_date"] == "2025-03-02"

    def test_merge_never_overrides_aggregates(self):
        cart = merge_form_values({"total": 10, "items": []}, {"Total": 999})
        assert cart["total"] == 10
        assert cart["Total"] == 999

    def test_merge_skips_blank_labels(self):
        cart = merge_form_values({}, {"": 1, "  ": 2})
        assert cart == {}


class TestBuildCartContext:
    ITEMS = [
        {"sku": "OIL-5W30", "unitPrice": 20, "quantity": 6, "category": "Oil"},
        {"sku": "OIL-10W40", "unitPrice": 25, "quantity": 6, "category": "Oil"},
        {"sku": "FLT-01", "unitPrice": 8, "category": "Filters"},
    ]

    def test_aggregates(self):
        cart = build_cart_context(self.ITEMS)
        assert cart["subtotal"] == 20 * 6 + 25 * 6 + 8
        assert cart["total"] == cart["subtotal"]
        assert cart["itemCount"] == 3
        assert cart["totalQuantity"] == 13
        assert cart["quantityByCategory"] == {"Oil": 12, "Filters": 1}

    def test_lines_are_copies(self):
        items = [{"sku": "A", "unitPrice": 1, "tags": ["x"]}]
        cart = build_cart_context(items)
        cart["items"][0]["tags"].append("y")
        assert items[0]["tags"] == ["x"]

    def test_non_string_category_is_not_counted(self):
        cart = build_cart_context([{"sku": "A", "unitPrice": 1, "category": ["Oil"]}])
        assert cart["quantityByCategory"] == {}

    def test_form_values_are_merged(self):
        cart = build_cart_context(self.ITEMS, {"PO Number": "PO-7"})
        assert cart["po_number"] == "PO-7"

    def test_empty_cart(self):
        cart = build_cart_context([])
        assert cart["items"] == []
        assert cart["total"] == 0
        assert cart["itemCount"] == 0
