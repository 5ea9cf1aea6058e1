from typing import Iterable, List, Optional, Protocol, Sequence

from fmsat.core.logging import get_logger
from fmsat.core.monitor import Monitor
from fmsat.generator.types import BuilderConfiguration
from fmsat.model.encoding import ModelEncoding

logger = get_logger(__name__)

class CoveringArrayGenerator(Protocol):
    """
    External t-wise sampler. Returns solutions as signed variable literals
    over the feature variables of the encoding.
    """
    def generate(self, encoding: ModelEncoding, t: int, monitor: Optional[Monitor] = None) -> Iterable[Sequence[int]]:
        ...

def configurations_from_solutions(
    solutions: Iterable[Sequence[int]],
    encoding: ModelEncoding,
    start: int = 1
) -> List[BuilderConfiguration]:
    """
    Keeps the positive literals of concrete features of every solution.
    Solutions that only differ in abstract features collapse into one
    configuration.
    """
    out: List[BuilderConfiguration] = []
    seen = set()
    skipped = 0
    for solution in solutions:
        names = tuple(encoding.selected_names(solution))
        if names in seen:
            skipped += 1
            continue
        seen.add(names)
        out.append(BuilderConfiguration(
            number=start + len(out),
            features=names,
            assignment=tuple(solution)
        ))
    if skipped:
        logger.info(f"{skipped} duplicate configurations removed from the sample")
    return out
