"""
Script engine (Python, RestrictedPython) with `using` namespace directives.

Exports: ScriptEngine, compile_expression, compile_statements, build_restricted_globals.
"""

from .engine import ScriptEngine
from .sandbox import build_restricted_globals, compile_expression, compile_statements

__all__ = [
    "ScriptEngine",
    "compile_expression",
    "compile_statements",
    "build_restricted_globals",
]
