"""
Feather Scripting — Public API
================================
Runtime compilation and fail-open execution of tenant scripts.
"""

from core.scripting.compiler import (
    check_script_syntax,
    compile_script,
)
from core.scripting.contracts import (
    DEFAULT_BLOCK_MESSAGE,
    LOGIC_SCRIPT_PARAMETERS,
    PRICING_SCRIPT_PARAMETERS,
    TriggerPoint,
    is_known_trigger_point,
)
from core.scripting.context import build_cart_context, empty_cart, merge_form_values
from core.scripting.errors import ScriptCompilationError
from core.scripting.runner import ScriptRunner

__all__ = [
    "DEFAULT_BLOCK_MESSAGE",
    "LOGIC_SCRIPT_PARAMETERS",
    "PRICING_SCRIPT_PARAMETERS",
    "ScriptCompilationError",
    "ScriptRunner",
    "TriggerPoint",
    "build_cart_context",
    "check_script_syntax",
    "compile_script",
    "empty_cart",
    "is_known_trigger_point",
    "merge_form_values",
]
