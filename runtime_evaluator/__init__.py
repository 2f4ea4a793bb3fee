"""
runtime-evaluator: a stateful session facade over an embedded evaluator.
"""

from runtime_evaluator.base import ExpressionEvaluator
from runtime_evaluator.engines import Engine, EngineSettings, ScriptEngine
from runtime_evaluator.errors import (
    ArgumentError,
    EvaluationError,
    EvaluatorError,
    InvalidStateError,
)
from runtime_evaluator.session import EvaluationResult, EvaluationSession, ResultKind

__all__ = [
    "ArgumentError",
    "Engine",
    "EngineSettings",
    "EvaluationError",
    "EvaluationResult",
    "EvaluationSession",
    "EvaluatorError",
    "ExpressionEvaluator",
    "InvalidStateError",
    "ResultKind",
    "ScriptEngine",
]
