from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from fmsat.core.config import AnalysisConfig
from fmsat.core.errors import TranslationError
from fmsat.core.logging import get_logger
from fmsat.core.monitor import Monitor
from fmsat.core.types import MAX_SOLUTION_BUFFER, LiteralPair, PushOutcome, SatOutcome
from fmsat.model.encoding import ModelEncoding, encode_feature_model
from fmsat.model.feature_model import FeatureModel, GroupType
from fmsat.solver.backend import SolverBackend
from fmsat.solver.cache import BoundedModelCache
from fmsat.solver.incremental import IncrementalSolver

logger = get_logger(__name__)

class ImplicationChecker:
    """
    Decides for each pair (a, b) whether selecting `a` forces `b` under the
    base model. A pair is reported when base /\\ a /\\ ~b is unsatisfiable.

    Previously found models are kept in a bounded cache: a cached model that
    selects `a` and deselects `b` refutes the pair without a solver call.
    Pairs whose check is inconclusive (timeout, backend failure) are not
    reported, so the result is sound but may be incomplete.
    """
    def __init__(self, solver: IncrementalSolver, pairs: Sequence[Sequence[int]], max_buffer: int = MAX_SOLUTION_BUFFER):
        self.solver = solver
        self.pairs = [LiteralPair(*p) for p in pairs]
        self.cache = BoundedModelCache(max(1, min(len(self.pairs), max_buffer)))

    def analyze(self, monitor: Optional[Monitor] = None) -> List[LiteralPair]:
        found: List[LiteralPair] = []
        if not self.pairs:
            return found

        seed = self.solver.find_model()
        if seed is None:
            logger.info("Base model has no known solution; no implications reported")
            return found
        self.cache.add(seed)

        seen = set()
        cache_hits = 0
        for i, pair in enumerate(self.pairs):
            if monitor is not None and monitor.cancelled:
                logger.info(f"Implication analysis cancelled after {i} of {len(self.pairs)} pairs")
                break
            if pair in seen:
                continue
            seen.add(pair)

            if self.cache.refutes(pair.forcing, pair.forced):
                cache_hits += 1
                continue

            try:
                implied = self._check(pair)
            except TranslationError as e:
                logger.warning(f"Skipping pair {tuple(pair)}: {e}")
                continue
            if implied:
                found.append(pair)

        logger.debug(f"{len(found)} implications among {len(self.pairs)} pairs ({cache_hits} refuted from cache)")
        return found

    def _check(self, pair: LiteralPair) -> bool:
        forcing = self.solver.literal(pair.forcing)
        not_forced = self.solver.literal(-pair.forced)
        with self.solver.assume(forcing, not_forced) as outcomes:
            if PushOutcome.IMMEDIATELY_CONTRADICTORY in outcomes:
                logger.debug(f"Pair {tuple(pair)} implied by unit propagation")
                return True

            outcome = self.solver.is_satisfiable()
            if outcome == SatOutcome.UNSAT:
                logger.debug(f"Pair {tuple(pair)} implied")
                return True
            if outcome == SatOutcome.SAT:
                model = self.solver.find_model()
                if model is not None:
                    self.cache.add(model)
            else:
                logger.debug(f"Pair {tuple(pair)} undecided")
            return False

def optional_feature_pairs(encoding: ModelEncoding) -> List[LiteralPair]:
    """(parent, child) literal pairs for every optional child of an AND group."""
    pairs = []
    for f in encoding.model.root.iter_features():
        if f.group != GroupType.AND:
            continue
        for c in f.children:
            if not c.mandatory:
                pairs.append(LiteralPair(encoding.variable(f.name), encoding.variable(c.name)))
    return pairs

def check_implications_parallel(
    encoding: ModelEncoding,
    pairs: Sequence[Sequence[int]],
    workers: int = 1,
    backend: Optional[SolverBackend] = None,
    monitor: Optional[Monitor] = None,
    max_buffer: int = MAX_SOLUTION_BUFFER
) -> List[LiteralPair]:
    """
    Splits the pairs into contiguous chunks, one checker (with its own solver
    and stack) per chunk. Results keep the input order.
    """
    pairs = [LiteralPair(*p) for p in pairs]
    if backend is None:
        backend = SolverBackend()
    workers = max(1, min(workers, len(pairs)))
    if workers == 1:
        return ImplicationChecker(IncrementalSolver(encoding, backend), pairs, max_buffer).analyze(monitor)

    size = -(-len(pairs) // workers)
    chunks = [pairs[i:i + size] for i in range(0, len(pairs), size)]

    def run(chunk):
        return ImplicationChecker(IncrementalSolver(encoding, backend), chunk, max_buffer).analyze(monitor)

    with ThreadPoolExecutor(max_workers=len(chunks)) as executor:
        results = list(executor.map(run, chunks))

    found = []
    seen = set()
    for chunk_result in results:
        for pair in chunk_result:
            if pair not in seen:
                seen.add(pair)
                found.append(pair)
    return found

def find_false_optional_features(
    model: FeatureModel,
    config: Optional[AnalysisConfig] = None,
    monitor: Optional[Monitor] = None,
    workers: int = 1
) -> List[str]:
    """Names of optional features that are selected whenever their parent is."""
    config = config or AnalysisConfig()
    encoding = encode_feature_model(model)
    backend = SolverBackend.from_config(config)
    pairs = optional_feature_pairs(encoding)
    found = check_implications_parallel(
        encoding, pairs, workers=workers, backend=backend,
        monitor=monitor, max_buffer=config.max_solution_buffer
    )
    names = [encoding.name_of(p.forced) for p in found]
    logger.info(f"{len(names)} false-optional features among {len(pairs)} optional features")
    return names
