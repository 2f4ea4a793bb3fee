"""Unit tests for engines.script.engine."""

import io

import pytest

from runtime_evaluator.engines import EngineSettings, RawBindingEngine, ScriptEngine


def _engine(**kwargs) -> tuple[ScriptEngine, io.StringIO]:
    report = io.StringIO()
    settings = EngineSettings(implicit_libraries=frozenset({"math", "json"}), **kwargs)
    return ScriptEngine(report=report, settings=settings), report


class TestEvaluate:
    def test_expression_produces_value(self) -> None:
        engine, report = _engine()
        assert engine.evaluate("2 + 2") == (4, True)
        assert report.getvalue() == ""

    def test_statement_produces_no_value(self) -> None:
        engine, _ = _engine()
        assert engine.evaluate("x = 21") == (None, False)
        assert engine.evaluate("x * 2") == (42, True)

    def test_functions_persist(self) -> None:
        engine, _ = _engine()
        engine.evaluate("def double(n):\n    return n * 2\n")
        assert engine.evaluate("double(8)") == (16, True)

    def test_syntax_error_reported(self) -> None:
        engine, report = _engine()
        assert engine.evaluate("this is not valid syntax") == (None, False)
        assert "<input>: error:" in report.getvalue()

    def test_runtime_error_raised(self) -> None:
        engine, _ = _engine()
        with pytest.raises(ZeroDivisionError):
            engine.evaluate("1 / 0")

    def test_import_blocked(self) -> None:
        engine, _ = _engine()
        with pytest.raises(ImportError):
            engine.evaluate("import os")

    def test_empty_snippet(self) -> None:
        engine, report = _engine()
        engine.run("")
        assert report.getvalue() == ""


class TestUsingDirectives:
    def test_using_implicit_library(self) -> None:
        engine, report = _engine()
        assert engine.evaluate("using math;") == (None, False)
        assert report.getvalue() == ""
        assert engine.evaluate("floor(2.5)") == (2, True)

    def test_using_alias(self) -> None:
        engine, _ = _engine()
        engine.evaluate("using j = json;")
        assert engine.evaluate("j.dumps([1])") == ("[1]", True)

    def test_unknown_namespace_reported(self) -> None:
        engine, report = _engine()
        assert engine.evaluate("using System.Linq;") == (None, False)
        assert "could not be found" in report.getvalue()

    def test_empty_directive_reported(self) -> None:
        engine, report = _engine()
        engine.evaluate("using ;")
        assert "identifier expected" in report.getvalue()


class TestLibraryReferences:
    def test_reference_enables_using(self) -> None:
        engine, report = _engine()
        engine.evaluate("using statistics;")
        assert "missing a library reference" in report.getvalue()

        report.seek(0)
        report.truncate(0)
        engine.settings.library_references.append("statistics")
        engine.evaluate("using statistics;")
        assert report.getvalue() == ""
        assert engine.evaluate("mean([1, 2, 3])") == (2, True)

    def test_reference_bound_under_top_level_name(self) -> None:
        engine, _ = _engine(library_references=["fractions"])
        assert engine.evaluate("str(fractions.Fraction(1, 2))") == ("1/2", True)

    def test_unresolvable_reference_reported(self) -> None:
        engine, report = _engine(library_references=["no_such_library_xyz"])
        engine.evaluate("x = 1")
        assert "no_such_library_xyz" in report.getvalue()


class TestRawBinding:
    def test_declaration_and_bind(self) -> None:
        engine, _ = _engine()
        engine.evaluate(engine.declaration_for("builtins.dict", "cfg"))
        assert engine.scope["cfg"] is None
        assert engine.try_bind_raw_value("cfg", {"a": 1}) is True
        assert engine.evaluate("cfg['a']") == (1, True)

    def test_bind_undeclared_raises(self) -> None:
        engine, _ = _engine()
        with pytest.raises(KeyError):
            engine.try_bind_raw_value("missing", 1)

    @pytest.mark.parametrize("name", ["_getattr_", "__builtins__", "_write_"])
    def test_sandbox_slots_not_bindable(self, name: str) -> None:
        engine, _ = _engine()
        original = engine.scope[name]
        with pytest.raises(KeyError):
            engine.try_bind_raw_value(name, object())
        assert engine.scope[name] is original

    def test_is_raw_binding_engine(self) -> None:
        engine, _ = _engine()
        assert isinstance(engine, RawBindingEngine)
