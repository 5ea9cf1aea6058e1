from fmsat.solver.backend import ProverSession, SolverBackend
from fmsat.solver.stack import StackEntry, ConstraintStack
from fmsat.solver.incremental import IncrementalSolver
from fmsat.solver.cache import BoundedModelCache

__all__ = [
    "ProverSession", "SolverBackend",
    "StackEntry", "ConstraintStack",
    "IncrementalSolver",
    "BoundedModelCache"
]
