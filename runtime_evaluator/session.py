"""
EvaluationSession: stateful facade over an embedded evaluation engine.

The session owns one engine and the diagnostic buffer the engine reports into.
It tracks the using directives and library references added so far, injects
host objects into the engine's scope, and turns each evaluation into text:
the produced value, the diagnostics, or the fault message.

A session is meant for one serial caller. Pass synchronized=True to serialize
every public operation behind one lock when a session must be shared.
Snippets run without a timeout; one that never returns blocks the caller.
"""

import contextlib
import functools
import io
import logging
import re
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TextIO

from runtime_evaluator.base import ExpressionEvaluator
from runtime_evaluator.core.config import Settings
from runtime_evaluator.core.config import settings as default_settings
from runtime_evaluator.engines.base import Engine, EngineSettings
from runtime_evaluator.engines.script import ScriptEngine
from runtime_evaluator.errors import ArgumentError, EvaluationError, InvalidStateError

_log = logging.getLogger(__name__)

_MULTI_SPACE_RE = re.compile(r"[ ]{2,}")

EngineFactory = Callable[[TextIO], Engine]


class ResultKind(str, Enum):
    VALUE = "value"
    DIAGNOSTIC = "diagnostic"
    FAULT = "fault"
    EMPTY = "empty"


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one evaluation. text is what evaluate() returns."""

    kind: ResultKind
    text: str
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.kind in (ResultKind.VALUE, ResultKind.EMPTY)


def normalize_directives(
    directives: Iterable[str] | None,
    keyword: str = "using",
    terminator: str = ";",
) -> list[str]:
    """
    Canonical directive strings for the given fragments, in order.

    Fragments are joined and split on the terminator; each piece is trimmed,
    terminated, prefixed with the keyword when missing, and has runs of spaces
    collapsed. Empty pieces are kept and come out as "using ;".
    """
    out: list[str] = []
    for fragment in "".join(directives or ()).split(terminator):
        directive = fragment.strip() + terminator
        if directive and not directive.startswith(keyword):
            directive = f"{keyword} {directive}"
        out.append(_MULTI_SPACE_RE.sub(" ", directive))
    return out


def qualified_type_name(instance: Any) -> str:
    cls = type(instance)
    return f"{cls.__module__}.{cls.__qualname__}"


def _operation(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Run fn under the session lock; fail fast once the session is closed."""

    @functools.wraps(fn)
    def wrapper(self: "EvaluationSession", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            if self._closed:
                raise InvalidStateError(f"{fn.__name__}() called on a closed session")
            return fn(self, *args, **kwargs)

    return wrapper


def _default_engine_factory(s: Settings) -> EngineFactory:
    def factory(report: TextIO) -> Engine:
        return ScriptEngine(report=report, settings=EngineSettings.from_settings(s))

    return factory


class EvaluationSession(ExpressionEvaluator):
    """
    An incrementally growing evaluation scope.

    engine_factory receives the session's diagnostic sink and returns the engine
    that reports into it; each session builds its own engine.
    """

    def __init__(
        self,
        engine_factory: EngineFactory | None = None,
        *,
        settings: Settings | None = None,
        synchronized: bool = False,
    ) -> None:
        s = settings or default_settings
        self._imported_namespaces: list[str] = []
        self._diagnostics = io.StringIO()
        self._closed = False
        self._lock: Any = threading.RLock() if synchronized else contextlib.nullcontext()

        factory = engine_factory or _default_engine_factory(s)
        self._engine = factory(self._diagnostics)
        # No statements to begin with beyond the configured initial script
        self._engine.run(s.INITIAL_SCRIPT)

    def __enter__(self) -> "EvaluationSession":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_operation_errors(self) -> str:
        if self._closed:
            raise InvalidStateError("last_operation_errors read on a closed session")
        return self._diagnostics.getvalue()

    @property
    def referenced_libraries(self) -> tuple[str, ...]:
        return tuple(self._engine.settings.library_references)

    @property
    def imported_namespaces(self) -> tuple[str, ...]:
        return tuple(self._imported_namespaces)

    def _clear_diagnostics(self) -> None:
        self._diagnostics.seek(0)
        self._diagnostics.truncate(0)

    @_operation
    def evaluate(self, expression: str) -> str:
        """Evaluate expression; return its value, the diagnostics, the fault message, or ""."""
        return self._evaluate(expression).text

    @_operation
    def evaluate_result(self, expression: str) -> EvaluationResult:
        """Like evaluate(), but keep the value and which channel the text came from."""
        return self._evaluate(expression)

    def _evaluate(self, expression: str) -> EvaluationResult:
        self._clear_diagnostics()
        try:
            value, produced = self._engine.evaluate(expression)
            if produced:
                return EvaluationResult(ResultKind.VALUE, str(value), value)
            diagnostics = self._diagnostics.getvalue()
            if diagnostics:
                return EvaluationResult(ResultKind.DIAGNOSTIC, diagnostics)
        except Exception as e:
            _log.debug("evaluation faulted: %s", e, exc_info=True)
            message = str(e) or type(e).__name__
            text = " ".join(p for p in (message, self._diagnostics.getvalue()) if p)
            return EvaluationResult(ResultKind.FAULT, text)
        finally:
            self._clear_diagnostics()
        return EvaluationResult(ResultKind.EMPTY, "")

    @_operation
    def import_namespaces(self, directives: Iterable[str] | None) -> None:
        """
        Import using directives. Already-imported directives are skipped without
        being evaluated again; new ones are evaluated, then recorded in order.
        """
        self._clear_diagnostics()
        for directive in normalize_directives(
            directives,
            self._engine.namespace_keyword,
            self._engine.statement_terminator,
        ):
            if directive in self._imported_namespaces:
                continue
            result = self._evaluate(directive)
            if not result.ok:
                _log.warning("directive %r: %s", directive, result.text.strip())
            else:
                _log.debug("imported %r", directive)
            self._imported_namespaces.append(directive)

    @_operation
    def add_injected_instance(self, instance: Any, name: str) -> None:
        """
        Make instance visible to snippets as name.

        The engine declares name typed as the instance's class, then the
        declared slot is overwritten with instance. Engines without
        try_bind_raw_value only get the declaration; a warning is logged.
        """
        name = name.strip()
        token = self._engine.self_reference
        if name == token:
            raise ArgumentError(
                f"The passed instance object cannot be aliased to '{token}'.", "name"
            )
        if any(c.isspace() for c in name):
            raise ArgumentError("Your instance name cannot contain whitespace.", "name")
        self._clear_diagnostics()

        try:
            self._engine.evaluate(
                self._engine.declaration_for(qualified_type_name(instance), name)
            )
            bind = getattr(self._engine, "try_bind_raw_value", None)
            if bind is None or not bind(name, instance):
                _log.warning(
                    "%s cannot bind raw values; %r declared without a value",
                    type(self._engine).__name__,
                    name,
                )
        except Exception as e:
            diagnostics = self._diagnostics.getvalue()
            raise EvaluationError(
                diagnostics, f"Failed to inject instance '{name}': {diagnostics or e}"
            ) from e

    @_operation
    def add_assembly_reference(self, name: str) -> None:
        """Reference a library by name. The engine resolves it on its next evaluation."""
        try:
            refs = self._engine.settings.library_references
            if name not in refs:
                refs.append(name)
        except Exception as e:
            diagnostics = self._diagnostics.getvalue()
            raise EvaluationError(
                diagnostics, f"Failed to add library reference '{name}': {e}"
            ) from e

    add_library_reference = add_assembly_reference

    def close(self) -> None:
        """Release the diagnostic sink. Safe to call more than once; never raises."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._diagnostics.close()
            except Exception as e:
                _log.warning("close: releasing diagnostic sink failed: %s", e)
