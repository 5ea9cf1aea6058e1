"""
Core module for fmsat.
Provides error handling, logging, configuration, cancellation and shared types.
"""
from fmsat.core.errors import (
    FmsatError, ValidationError, TranslationError, SolverError,
    SolverTimeout, SolverUnavailable, StackImbalance, EmptyStackError
)
from fmsat.core.logging import get_logger
from fmsat.core.monitor import Monitor
from fmsat.core.types import (
    Assignment, LiteralPair, SatOutcome, PushOutcome, OrderingPolicy, BuildType,
    MAX_SOLUTION_BUFFER
)
from fmsat.core.config import AnalysisConfig

__all__ = [
    "FmsatError", "ValidationError", "TranslationError", "SolverError",
    "SolverTimeout", "SolverUnavailable", "StackImbalance", "EmptyStackError",
    "get_logger", "Monitor",
    "Assignment", "LiteralPair", "SatOutcome", "PushOutcome", "OrderingPolicy", "BuildType",
    "MAX_SOLUTION_BUFFER",
    "AnalysisConfig"
]
