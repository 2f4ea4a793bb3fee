"""
Engine contract: what EvaluationSession needs from an embedded evaluator.

An engine compiles and runs snippets against a persistent scope. Recoverable
compile problems go to the engine's report sink as text; unexpected faults are
raised. try_bind_raw_value is optional: engines that cannot overwrite a
declared slot with an existing object simply do not define it.
"""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from runtime_evaluator.core.config import Settings
from runtime_evaluator.core.config import settings as default_settings


class EngineSettings(BaseModel):
    """Mutable engine settings; library_references is the reference list the session manages."""

    library_references: list[str] = Field(default_factory=list)
    implicit_libraries: frozenset[str] = frozenset()
    namespace_keyword: str = "using"
    statement_terminator: str = ";"
    self_reference: str = "this"

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "EngineSettings":
        s = s or default_settings
        return cls(
            implicit_libraries=s.implicit_libraries,
            namespace_keyword=s.NAMESPACE_KEYWORD,
            statement_terminator=s.STATEMENT_TERMINATOR,
            self_reference=s.SELF_REFERENCE_TOKEN,
        )


@runtime_checkable
class Engine(Protocol):
    settings: EngineSettings
    namespace_keyword: str
    statement_terminator: str
    self_reference: str

    def run(self, initial_script: str) -> None: ...

    def evaluate(self, snippet: str) -> tuple[Any, bool]: ...

    def declaration_for(self, type_name: str, name: str) -> str: ...


@runtime_checkable
class RawBindingEngine(Engine, Protocol):
    """Engine that can overwrite a declared variable slot with an existing object."""

    def try_bind_raw_value(self, name: str, value: Any) -> bool: ...
