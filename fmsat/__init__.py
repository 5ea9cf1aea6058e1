"""
fmsat: satisfiability-based analysis and configuration building for feature models.
"""
import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fmsat.core.config import AnalysisConfig
    from fmsat.model.feature_model import Feature, FeatureModel, GroupType
    from fmsat.solver.incremental import IncrementalSolver
    from fmsat.analysis.implication import ImplicationChecker, find_false_optional_features
    from fmsat.generator.enumerator import ConfigurationEnumerator
    from fmsat.generator.builder import ConfigurationBuilder
    from fmsat.schedule.scheduler import BackpressuredScheduler

_EXPORTS = {
    "AnalysisConfig": "fmsat.core.config",
    "Feature": "fmsat.model.feature_model",
    "FeatureModel": "fmsat.model.feature_model",
    "GroupType": "fmsat.model.feature_model",
    "IncrementalSolver": "fmsat.solver.incremental",
    "ImplicationChecker": "fmsat.analysis.implication",
    "find_false_optional_features": "fmsat.analysis.implication",
    "ConfigurationEnumerator": "fmsat.generator.enumerator",
    "ConfigurationBuilder": "fmsat.generator.builder",
    "BackpressuredScheduler": "fmsat.schedule.scheduler",
}

# Lazy import: solver-backed modules need python-sat at import time
def __getattr__(name: str):
    module = _EXPORTS.get(name)
    if module is None:
        raise AttributeError(f"module {__name__} has no attribute {name}")
    try:
        return getattr(importlib.import_module(module), name)
    except ImportError as e:
        raise ImportError(f"Failed to import {name}. Ensure dependencies (e.g., python-sat) are installed: {e}")

__all__ = list(_EXPORTS)
