import threading
from typing import Iterable, List, Optional

from pysat.solvers import Solver

from fmsat.core.errors import SolverError, SolverTimeout, SolverUnavailable
from fmsat.core.logging import get_logger
from fmsat.ir.ir_compile import TranslatedFormula

logger = get_logger(__name__)

class ProverSession:
    """
    One scoped solver instance. Formulas are added as guarded clause groups and
    enabled by assuming their selectors; `extra_assumptions` lets callers
    re-check subsets of the added formulas without reloading them.
    Always use as a context manager: the pysat solver is deleted on exit.
    """
    def __init__(self, solver_name: str, timeout: Optional[float] = None, conflict_budget: Optional[int] = None):
        self.solver_name = solver_name
        self.timeout = timeout
        self.conflict_budget = conflict_budget
        self.selectors: List[int] = []
        try:
            self._solver = Solver(name=solver_name)
        except Exception as e:
            raise SolverUnavailable(f"Cannot create solver '{solver_name}': {e}") from e

    def add_constraint(self, formula: TranslatedFormula):
        for clause in formula.guarded_clauses():
            self._solver.add_clause(clause)
        self.selectors.append(formula.selector)

    def add_clause(self, clause: List[int]):
        """Unguarded clause, e.g. a blocking clause during model enumeration."""
        self._solver.add_clause(clause)

    def _solve(self, assumptions: List[int]) -> bool:
        if self.timeout is None and self.conflict_budget is None:
            try:
                return self._solver.solve(assumptions=assumptions)
            except Exception as e:
                raise SolverError(f"Solver '{self.solver_name}' failed: {e}") from e

        timer = None
        if self.timeout is not None:
            timer = threading.Timer(self.timeout, self._solver.interrupt)
            timer.daemon = True
        try:
            if self.conflict_budget is not None:
                self._solver.conf_budget(self.conflict_budget)
            if timer:
                timer.start()
            status = self._solver.solve_limited(assumptions=assumptions, expect_interrupt=timer is not None)
        except NotImplementedError as e:
            raise SolverError(f"Solver '{self.solver_name}' does not support limited solving: {e}") from e
        except Exception as e:
            raise SolverError(f"Solver '{self.solver_name}' failed: {e}") from e
        finally:
            if timer:
                timer.cancel()

        if timer:
            self._solver.clear_interrupt()
        if status is None:
            raise SolverTimeout(f"Solver '{self.solver_name}' gave up (timeout={self.timeout}s, budget={self.conflict_budget})")
        return status

    def is_unsat(self, selectors: Optional[Iterable[int]] = None) -> bool:
        """
        Checks the enabled formulas (all added ones by default).
        Raises SolverTimeout when the answer is unknown.
        """
        assumptions = list(self.selectors if selectors is None else selectors)
        return not self._solve(assumptions)

    def get_model(self) -> Optional[List[int]]:
        return self._solver.get_model()

    def get_unsat_core(self) -> List[int]:
        """Selectors responsible for the last UNSAT answer."""
        return list(self._solver.get_core() or [])

    def close(self):
        if self._solver is not None:
            self._solver.delete()
            self._solver = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

class SolverBackend:
    """
    Factory of prover sessions. Construction probes the solver once so that a
    misconfigured backend fails the whole analysis up front.
    """
    def __init__(self, solver_name: str = "g3", timeout: Optional[float] = None, conflict_budget: Optional[int] = None):
        self.solver_name = solver_name
        self.timeout = timeout
        self.conflict_budget = conflict_budget
        with self.session():
            pass
        logger.debug(f"Backend ready: solver={solver_name} timeout={timeout} budget={conflict_budget}")

    @classmethod
    def from_config(cls, config) -> 'SolverBackend':
        return cls(
            solver_name=config.solver_name,
            timeout=config.timeout_seconds,
            conflict_budget=config.conflict_budget
        )

    def session(self) -> ProverSession:
        return ProverSession(self.solver_name, timeout=self.timeout, conflict_budget=self.conflict_budget)
