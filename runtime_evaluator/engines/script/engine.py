"""
ScriptEngine: incremental RestrictedPython evaluator with a persistent scope.

Each evaluate() call compiles one snippet and runs it against the same globals
dict, so names defined by earlier snippets stay visible to later ones.
Compile errors and warnings are written to the report sink as text; exceptions
raised while a snippet runs propagate to the caller.
"""

import importlib
import io
import logging
from typing import Any, TextIO

from runtime_evaluator.engines.base import EngineSettings

from .directives import apply_directive, parse_directive, split_directives
from .sandbox import build_restricted_globals, compile_expression, compile_statements

_log = logging.getLogger(__name__)


class ScriptEngine:
    """
    Sandboxed Python evaluator with `using` namespace directives.

    report receives diagnostic text. settings.library_references may be
    appended to at any time; new references are resolved at the start of the
    next evaluate().
    """

    def __init__(
        self,
        report: TextIO | None = None,
        settings: EngineSettings | None = None,
        *,
        filename: str = "<input>",
        context: dict[str, Any] | None = None,
    ) -> None:
        self.report: TextIO = report if report is not None else io.StringIO()
        self.settings = settings or EngineSettings.from_settings()
        self.filename = filename
        # The variable table: every declared name lives here
        self._scope = build_restricted_globals(context)
        self._resolved: set[str] = set()

    @property
    def namespace_keyword(self) -> str:
        return self.settings.namespace_keyword

    @property
    def statement_terminator(self) -> str:
        return self.settings.statement_terminator

    @property
    def self_reference(self) -> str:
        return self.settings.self_reference

    @property
    def scope(self) -> dict[str, Any]:
        return self._scope

    def _report(self, severity: str, message: str) -> None:
        self.report.write(f"{self.filename}: {severity}: {message}\n")

    def _allowed_libraries(self) -> set[str]:
        refs = {r.split(".", 1)[0] for r in self.settings.library_references}
        return refs | set(self.settings.implicit_libraries)

    def _resolve_references(self) -> None:
        for name in self.settings.library_references:
            if name in self._resolved:
                continue
            try:
                importlib.import_module(name)
                top = name.split(".", 1)[0]
                self._scope[top] = importlib.import_module(top)
            except ImportError as e:
                _log.warning("library reference %s could not be resolved: %s", name, e)
                self._report("error", f"library reference '{name}' could not be resolved: {e}")
                continue
            self._resolved.add(name)
            _log.debug("resolved library reference %s", name)

    def _apply_directives(self, bodies: list[str]) -> None:
        allowed = self._allowed_libraries()
        for body in bodies:
            try:
                apply_directive(parse_directive(body), self._scope, allowed)
            except (ValueError, LookupError) as e:
                self._report("error", str(e))

    def run(self, initial_script: str) -> None:
        """Prime the scope with initial_script (may be empty)."""
        self.evaluate(initial_script)

    def evaluate(self, snippet: str) -> tuple[Any, bool]:
        """
        Compile and run snippet. Returns (value, produced).

        produced is True only when snippet is a single expression; statements,
        directives and snippets that fail to compile return (None, False).
        """
        self._resolve_references()

        bodies = split_directives(snippet, self.namespace_keyword, self.statement_terminator)
        if bodies is not None:
            self._apply_directives(bodies)
            return None, False

        expr = compile_expression(snippet, self.filename)
        if expr.code is not None:
            for w in expr.warnings:
                self._report("warning", w)
            return eval(expr.code, self._scope), True  # noqa: S307 - restricted environment

        stmts = compile_statements(snippet, self.filename)
        for w in stmts.warnings:
            self._report("warning", w)
        if stmts.code is None:
            for err in stmts.errors:
                self._report("error", err)
            return None, False
        exec(stmts.code, self._scope)  # noqa: S102 - restricted environment
        return None, False

    def declaration_for(self, type_name: str, name: str) -> str:
        return f"{name} = None  # type: {type_name}"

    def try_bind_raw_value(self, name: str, value: Any) -> bool:
        """
        Overwrite the slot for a declared name with value, skipping the sandbox's
        assignment guards. Raises KeyError if name was never declared.

        Snippets cannot create names starting with "_", so such slots belong to
        the sandbox (guards, __builtins__) and are never bindable.
        """
        if name.startswith("_") or name not in self._scope:
            raise KeyError(name)
        self._scope[name] = value
        return True
