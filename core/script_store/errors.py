"""
Feather Script Store - Errors
=============================
"""

from __future__ import annotations


class ScriptNotFoundError(LookupError):
    """No script with this id exists for the tenant."""

    def __init__(self, distributor_id: str, script_id: str):
        self.distributor_id = distributor_id
        self.script_id = script_id
        super().__init__(
            f"Logic script '{script_id}' not found for distributor '{distributor_id}'."
        )
