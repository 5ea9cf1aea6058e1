from fmsat.generator.types import ConfigurationCandidate, BuilderConfiguration
from fmsat.generator.enumerator import ConfigurationEnumerator
from fmsat.generator.sampling import CoveringArrayGenerator, configurations_from_solutions

__all__ = [
    "ConfigurationCandidate", "BuilderConfiguration",
    "ConfigurationEnumerator",
    "CoveringArrayGenerator", "configurations_from_solutions",
]
