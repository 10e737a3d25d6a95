"""
Feather Scripting — Errors
============================
Raised only at authoring time. The runtime path (ScriptRunner.run)
converts every failure into its fallback value instead.
"""

from __future__ import annotations


class ScriptCompilationError(ValueError):
    """Script body is not valid source for a function body."""

    def __init__(self, message: str, *, lineno: int | None = None):
        self.lineno = lineno
        super().__init__(message)
