"""
Errors raised by EvaluationSession.

Recoverable compile problems are not errors: evaluate() returns them as text.
"""


class EvaluatorError(Exception):
    """Base class for all evaluator errors."""

    pass


class ArgumentError(EvaluatorError, ValueError):
    """Raised when the caller passes an invalid argument (e.g. a bad binding name)."""

    def __init__(self, message: str, param_name: str | None = None) -> None:
        super().__init__(message)
        self.param_name = param_name


class EvaluationError(EvaluatorError):
    """
    Raised when the engine faults while declaring, binding or registering a reference.

    `diagnostics` holds the engine's report text gathered up to the fault; the
    original exception is chained as __cause__.
    """

    def __init__(self, diagnostics: str, message: str | None = None) -> None:
        super().__init__(message or diagnostics)
        self.diagnostics = diagnostics


class InvalidStateError(EvaluatorError, RuntimeError):
    """Raised when an operation is attempted on a closed session."""

    pass
