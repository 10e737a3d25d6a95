"""
Feather Script Store - Tenant Logic Scripts
===========================================
One row per tenant-authored script. Rows are scoped to exactly one
distributor (tenant) and one trigger point.
"""

from __future__ import annotations

import uuid

from django.db import models


class TriggerPointChoice(models.TextChoices):
    STOREFRONT_LOAD = "storefront_load", "Storefront Load"
    ADD_TO_CART = "add_to_cart", "Add to Cart"
    QUANTITY_CHANGE = "quantity_change", "Quantity Change"
    SUBMIT = "submit", "Submit Order"


class LogicScript(models.Model):
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )
    distributor_id = models.CharField(max_length=255, db_index=True)
    trigger_point = models.CharField(
        max_length=32,
        choices=TriggerPointChoice.choices,
    )
    script_content = models.TextField()
    description = models.TextField(blank=True, default="")
    # Unique per (distributor, trigger point) by convention only.
    sequence_order = models.IntegerField(default=0)
    active = models.BooleanField(default=True)
    original_prompt = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "logic_scripts"
        ordering = ["distributor_id", "trigger_point", "sequence_order", "created_at", "id"]
        indexes = [
            models.Index(
                fields=["distributor_id", "active", "trigger_point"],
                name="idx_logic_script_lookup",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.id} ({self.distributor_id}:{self.trigger_point}#{self.sequence_order})"
