"""
Feather Scripting — Script Compiler
=====================================
Turns stored script text into a callable.

A stored script is the BODY of a function. The compiler wraps it as

    def tenant_script(<parameter names>):
        <script body>

compiles it, and execs the definition into a fresh globals namespace so
nothing assigned at module level by one invocation is visible to the
next. Code objects are memoized per (body, parameters, filename); the
exec into a new namespace still happens on every call to compile_script.

Security model: there is none. The namespace carries the full builtins,
including __import__. Whoever can store a script can run arbitrary code
in the server process.
"""

from __future__ import annotations

import builtins
import keyword
import textwrap
from functools import lru_cache
from types import CodeType
from typing import Any, Callable, Sequence, Tuple

from core.scripting.errors import ScriptCompilationError

FUNCTION_NAME = "tenant_script"
COMPILE_CACHE_SIZE = 512


def _validate_parameter_names(parameter_names: Sequence[str]) -> Tuple[str, ...]:
    names = tuple(parameter_names)
    for name in names:
        if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
            raise ValueError(f"Invalid script parameter name: {name!r}.")
    if len(set(names)) != len(names):
        raise ValueError("Script parameter names must be unique.")
    return names


def build_function_source(script_body: str, parameter_names: Sequence[str]) -> str:
    """Render the def statement that wraps a script body."""
    if not isinstance(script_body, str):
        raise ScriptCompilationError("Script body must be a string.")

    body = textwrap.dedent(script_body).strip("\n")
    if not body.strip():
        body = "pass"

    indented = "\n".join(
        f"    {line}" if line.strip() else ""
        for line in body.splitlines()
    )
    params = ", ".join(parameter_names)
    return f"def {FUNCTION_NAME}({params}):\n{indented}\n"


@lru_cache(maxsize=COMPILE_CACHE_SIZE)
def _compile_code(
    script_body: str,
    parameter_names: Tuple[str, ...],
    filename: str,
) -> CodeType:
    source = build_function_source(script_body, parameter_names)
    try:
        return compile(source, filename, "exec")
    except SyntaxError as exc:
        # Line 1 of the generated source is the def header.
        lineno = exc.lineno - 1 if exc.lineno else None
        raise ScriptCompilationError(
            f"Script does not compile: {exc.msg} (line {lineno}).",
            lineno=lineno,
        ) from exc


def compile_script(
    script_body: str,
    parameter_names: Sequence[str],
    *,
    filename: str = "<logic_script>",
) -> Callable[..., Any]:
    """
    Compile a script body into a function taking exactly
    ``parameter_names`` as its formal parameters.

    Raises:
        ScriptCompilationError: the body is not valid Python.
        ValueError: a parameter name is not a valid identifier.
    """
    names = _validate_parameter_names(parameter_names)
    code = _compile_code(script_body, names, filename)

    namespace: dict[str, Any] = {"__builtins__": builtins, "__name__": filename}
    exec(code, namespace)  # noqa: S102
    return namespace[FUNCTION_NAME]


def check_script_syntax(script_body: str, parameter_names: Sequence[str]) -> None:
    """Raise ScriptCompilationError if the body would not compile."""
    names = _validate_parameter_names(parameter_names)
    _compile_code(script_body, names, "<syntax_check>")
