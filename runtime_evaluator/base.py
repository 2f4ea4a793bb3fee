"""
ExpressionEvaluator: the public call surface of an evaluation session.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any


class ExpressionEvaluator(ABC):
    """API into an incremental, stateful expression evaluator."""

    @property
    @abstractmethod
    def last_operation_errors(self) -> str:
        """Errors, if any, reported by the most recent operation."""

    @property
    @abstractmethod
    def referenced_libraries(self) -> tuple[str, ...]:
        """Libraries the evaluator currently references."""

    @property
    @abstractmethod
    def imported_namespaces(self) -> tuple[str, ...]:
        """Normalized using directives added so far, in insertion order."""

    @abstractmethod
    def import_namespaces(self, directives: Iterable[str] | None) -> None: ...

    @abstractmethod
    def add_injected_instance(self, instance: Any, name: str) -> None: ...

    @abstractmethod
    def add_assembly_reference(self, name: str) -> None: ...

    @abstractmethod
    def evaluate(self, expression: str) -> str: ...

    @abstractmethod
    def close(self) -> None: ...
