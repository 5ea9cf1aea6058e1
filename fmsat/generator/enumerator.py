from typing import Callable, FrozenSet, Iterator, List, Optional, Set, Tuple

from fmsat.core.errors import TranslationError
from fmsat.core.logging import get_logger
from fmsat.core.monitor import Monitor
from fmsat.core.types import PushOutcome, SatOutcome
from fmsat.generator.types import BuilderConfiguration, ConfigurationCandidate
from fmsat.ir.ir_types import lit
from fmsat.model.encoding import ModelEncoding
from fmsat.model.feature_model import Feature, GroupType
from fmsat.solver.backend import SolverBackend
from fmsat.solver.incremental import IncrementalSolver

logger = get_logger(__name__)

Sink = Callable[[BuilderConfiguration], bool]

class ConfigurationEnumerator:
    """
    Enumerates all valid configurations of a feature model by walking the
    feature tree depth-first.

    Each step resolves the first node of a candidate's frontier and branches
    over the choices its group allows:
    - AND: every subset of the optional children, mandatory children always
    - OR: every non-empty subset of the children
    - ALTERNATIVE: exactly one child
    Children that are abstract without any concrete descendant are dropped;
    if that happened, OR and ALTERNATIVE also get an empty branch since such
    a child can satisfy the group without contributing a feature.

    When the model has cross-tree constraints, partial selections are checked
    for satisfiability and infeasible branches are cut. Complete candidates
    are confirmed by the solver before they are emitted to `sink`; a sink
    returning False stops the enumeration.
    """
    def __init__(
        self,
        encoding: ModelEncoding,
        sink: Sink,
        solver: Optional[IncrementalSolver] = None,
        backend: Optional[SolverBackend] = None,
        target_count: int = 0,
        monitor: Optional[Monitor] = None
    ):
        self.encoding = encoding
        self.model = encoding.model
        self.solver = solver if solver else IncrementalSolver(encoding, backend)
        self.sink = sink
        self.target_count = target_count
        self.monitor = monitor

        self._check_partial = self.model.has_constraints()
        self._concrete = self.model.concrete_features()
        self._emitted: Set[FrozenSet[str]] = set()
        self._last_feasible: Optional[Tuple[str, ...]] = None
        self._count = 0
        self._stopped = False

    @property
    def emitted(self) -> int:
        return self._count

    def run(self) -> int:
        """Runs the enumeration and returns the number of emitted configurations."""
        start = ConfigurationCandidate(selected=(), frontier=(self.model.root,))
        pending: List[Iterator[ConfigurationCandidate]] = [iter([start])]
        while pending and not self._stopped:
            candidate = next(pending[-1], None)
            if candidate is None:
                pending.pop()
                continue
            if self._should_stop() or not self._feasible(candidate.selected):
                continue
            if not candidate.frontier:
                self._complete(candidate.selected)
            else:
                pending.append(self._branches(candidate))

        logger.info(f"Enumerated {self._count} configurations")
        return self._count

    def _should_stop(self) -> bool:
        if self.monitor is not None and self.monitor.cancelled:
            logger.info(f"Enumeration cancelled after {self._count} configurations")
            self._stopped = True
        elif self.target_count > 0 and self._count >= self.target_count:
            logger.debug(f"Target of {self.target_count} configurations reached")
            self._stopped = True
        return self._stopped

    def _feasible(self, selected: Tuple[str, ...]) -> bool:
        """False only if the partial selection is proven infeasible."""
        if not self._check_partial or selected == self._last_feasible:
            return True
        with self.solver.assume(*[lit(n) for n in selected]) as outcomes:
            if PushOutcome.IMMEDIATELY_CONTRADICTORY in outcomes:
                outcome = SatOutcome.UNSAT
            else:
                outcome = self.solver.is_satisfiable()
        if outcome == SatOutcome.UNSAT:
            logger.debug(f"Pruned partial selection {list(selected)}")
            return False
        if outcome == SatOutcome.SAT:
            self._last_feasible = selected
        return True

    @staticmethod
    def _relevant_children(feature: Feature) -> List[Feature]:
        return [c for c in feature.children if c.concrete or c.has_concrete_descendant()]

    def _branches(self, candidate: ConfigurationCandidate) -> Iterator[ConfigurationCandidate]:
        head, rest = candidate.frontier[0], candidate.frontier[1:]
        selected = candidate.selected + (head.name,) if head.concrete else candidate.selected
        children = self._relevant_children(head)
        pruned = len(children) < len(head.children)

        if not children:
            yield ConfigurationCandidate(selected, rest)
            return

        if head.group == GroupType.AND:
            mandatory = tuple(c for c in children if c.mandatory)
            optional = [c for c in children if not c.mandatory]
            tail = rest + mandatory
            for mask in range(1 << len(optional)):
                yield ConfigurationCandidate(selected, _subset(optional, mask) + tail)

        elif head.group == GroupType.OR:
            for mask in range(0 if pruned else 1, 1 << len(children)):
                yield ConfigurationCandidate(selected, _subset(children, mask) + rest)

        elif head.group == GroupType.ALTERNATIVE:
            for c in children:
                yield ConfigurationCandidate(selected, (c,) + rest)
            if pruned:
                yield ConfigurationCandidate(selected, rest)

    def _complete(self, selected: Tuple[str, ...]):
        chosen = frozenset(selected)
        if chosen in self._emitted:
            logger.debug(f"Skipping duplicate selection {sorted(chosen)}")
            return

        decisions = [lit(n, neg=n not in chosen) for n in self._concrete]
        try:
            with self.solver.assume(*decisions) as outcomes:
                if PushOutcome.IMMEDIATELY_CONTRADICTORY in outcomes:
                    logger.debug(f"Discarding contradictory selection {sorted(chosen)}")
                    return
                model = self.solver.find_model()
        except TranslationError as e:
            logger.warning(f"Discarding selection {sorted(chosen)}: {e}")
            return

        if model is None:
            logger.debug(f"Discarding unconfirmed selection {sorted(chosen)}")
            return
        names = self.encoding.selected_names(model)
        if frozenset(names) != chosen:
            logger.debug(f"Discarding selection {sorted(chosen)}: model selects {names}")
            return

        self._emitted.add(chosen)
        cfg = BuilderConfiguration(number=self._count + 1, features=tuple(names), assignment=model)
        if not self.sink(cfg):
            logger.info(f"Sink rejected configuration {cfg.number}, stopping")
            self._stopped = True
            return
        self._count += 1

def _subset(features: List[Feature], mask: int) -> Tuple[Feature, ...]:
    return tuple(f for i, f in enumerate(features) if mask >> i & 1)
