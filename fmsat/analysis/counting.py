from typing import Optional

from fmsat.core.errors import SolverError, SolverTimeout, SolverUnavailable
from fmsat.core.logging import get_logger
from fmsat.core.monitor import Monitor
from fmsat.model.encoding import ModelEncoding
from fmsat.solver.backend import SolverBackend
from fmsat.solver.incremental import IncrementalSolver

logger = get_logger(__name__)

def count_configurations(
    encoding: ModelEncoding,
    backend: Optional[SolverBackend] = None,
    limit: int = 1_000_000,
    monitor: Optional[Monitor] = None
) -> int:
    """
    Counts valid configurations, i.e. distinct selections of concrete features,
    by enumerating models and blocking each projection.
    The count is capped at `limit`; an inconclusive run also returns `limit`
    so the result is always usable as an upper bound.
    """
    concrete = encoding.concrete_variables()
    solver = IncrementalSolver(encoding, backend)
    count = 0
    try:
        with solver.open_session() as prover:
            while count < limit:
                if monitor is not None and monitor.cancelled:
                    logger.info(f"Counting cancelled after {count} configurations")
                    return limit
                if prover.is_unsat():
                    return count
                count += 1
                if not concrete:
                    # Only abstract features: every model is the same empty product
                    return count
                model = prover.get_model() or []
                prover.add_clause([-l for l in model if abs(l) in concrete])
    except SolverTimeout as e:
        logger.warning(f"Counting timed out after {count} configurations, using limit {limit}: {e}")
        return limit
    except SolverUnavailable:
        raise
    except SolverError as e:
        logger.warning(f"Counting failed after {count} configurations, using limit {limit}: {e}")
        return limit

    logger.warning(f"Reached the limit of {limit} configurations, count capped")
    return limit
