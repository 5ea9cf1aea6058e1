from typing import NamedTuple, Tuple

from pydantic import BaseModel, ConfigDict, Field

from fmsat.model.feature_model import Feature

class ConfigurationCandidate(NamedTuple):
    """
    A partial configuration during enumeration: the concrete features chosen
    so far and the feature nodes still to be resolved. Branches derive new
    candidates, they never modify one.
    """
    selected: Tuple[str, ...]
    frontier: Tuple[Feature, ...]

class BuilderConfiguration(BaseModel):
    """A complete valid configuration handed to the build pipeline."""
    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1)
    # Concrete selected features in tree order
    features: Tuple[str, ...]
    assignment: Tuple[int, ...] = ()

    def __str__(self):
        return f"{self.number:05d}: {' '.join(self.features)}"
