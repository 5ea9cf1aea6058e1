from enum import Enum
from typing import NamedTuple, Tuple

# One signed literal per decided feature variable, positive = selected.
Assignment = Tuple[int, ...]

# Mirrors the solution buffer limit of the solver layer.
MAX_SOLUTION_BUFFER = 1000

class LiteralPair(NamedTuple):
    """Variable literals under test: does selecting `forcing` force `forced`?"""
    forcing: int
    forced: int

class SatOutcome(str, Enum):
    SAT = "SAT"
    UNSAT = "UNSAT"
    UNKNOWN = "UNKNOWN"

class PushOutcome(str, Enum):
    APPLIED = "APPLIED"
    IMMEDIATELY_CONTRADICTORY = "IMMEDIATELY_CONTRADICTORY"

class OrderingPolicy(str, Enum):
    INSERTION = "insertion"
    DIFFERENCE = "difference"
    INTERACTION = "interaction"

class BuildType(str, Enum):
    ALL_VALID = "all_valid"
    T_WISE = "t_wise"
