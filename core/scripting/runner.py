"""
Feather Scripting — Fail-Open Script Runner
=============================================
Executes one tenant script against named parameters.

GUARANTEE: run() NEVER raises. A script that fails to compile, raises
at runtime, calls exit(), or is otherwise broken yields the
caller-supplied fallback and an ERROR log line on ``feather.scripts``.
The caller keeps going with the next script in the chain. Only
KeyboardInterrupt passes through.

What run() does NOT do:
- time out (an infinite loop blocks the calling thread)
- limit memory or CPU
- isolate the script from the host process
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Mapping, Optional

from core.scripting.compiler import compile_script
from core.scripting.contracts import (
    LOGIC_SCRIPT_PARAMETERS,
    PRICING_SCRIPT_PARAMETERS,
    RESULT_ALLOW,
)

logger = logging.getLogger("feather.scripts")

Compiler = Callable[..., Callable[..., Any]]


def allow_result() -> dict:
    return {RESULT_ALLOW: True}


class ScriptRunner:
    """
    Compile-and-call wrapper with absolute error isolation.

    Usage:
        runner = ScriptRunner()
        value = runner.run(
            "return {'allow': cart['total'] >= 100}",
            {"customer": {}, "cart": cart, "products": [], "distributor_id": "d1"},
            fallback={"allow": True},
        )
    """

    def __init__(self, compiler: Compiler = compile_script):
        self._compiler = compiler

    def run(
        self,
        script_body: str,
        named_parameters: Mapping[str, Any],
        *,
        fallback: Any = None,
        script_id: Optional[str] = None,
    ) -> Any:
        """
        Compile ``script_body`` with the keys of ``named_parameters`` as
        its formal parameters (in mapping order) and call it.

        Returns the script's return value, or ``fallback`` on any error.
        """
        label = script_id or "anonymous"
        try:
            fn = self._compiler(
                script_body,
                tuple(named_parameters.keys()),
                filename=f"<logic_script:{label}>",
            )
            return fn(**named_parameters)
        except KeyboardInterrupt:
            raise
        except BaseException as exc:
            logger.error(
                f"Logic script {label} failed: {type(exc).__name__}: {exc}",
                exc_info=True,
            )
            return fallback

    # ── Typed entry points ────────────────────────────────────

    def run_logic(
        self,
        script_body: str,
        *,
        customer: Any,
        cart: Any,
        products: Any,
        distributor_id: Any,
        script_id: Optional[str] = None,
    ) -> Any:
        """Business-rule script. Falls back to ``{"allow": True}``."""
        params = dict(zip(
            LOGIC_SCRIPT_PARAMETERS,
            (customer, cart, products, distributor_id),
        ))
        return self.run(
            script_body, params, fallback=allow_result(), script_id=script_id,
        )

    def run_pricing(
        self,
        script_body: str,
        *,
        customer: Any,
        product: Any,
        cart: Any,
        custom_tables: Any,
        order_history: Any,
        distributor_id: Any,
        script_id: Optional[str] = None,
    ) -> Any:
        """
        Pricing script. Falls back to a copy of the product taken before
        the call, so a script that writes a price and then raises leaves
        no trace.
        """
        unmodified = copy.deepcopy(product)
        params = dict(zip(
            PRICING_SCRIPT_PARAMETERS,
            (customer, product, cart, custom_tables, order_history, distributor_id),
        ))
        return self.run(
            script_body, params, fallback=unmodified, script_id=script_id,
        )
