"""
Engines: the Engine contract and the RestrictedPython ScriptEngine.
"""

from runtime_evaluator.engines.base import Engine, EngineSettings, RawBindingEngine
from runtime_evaluator.engines.script import ScriptEngine

__all__ = [
    "Engine",
    "EngineSettings",
    "RawBindingEngine",
    "ScriptEngine",
]
