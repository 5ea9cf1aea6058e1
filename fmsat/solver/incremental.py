import copy
from collections import Counter
from contextlib import contextmanager
from typing import Dict, FrozenSet, Iterator, List, Optional, Set

from fmsat.core.errors import SolverError, SolverTimeout, SolverUnavailable, StackImbalance, TranslationError
from fmsat.core.logging import get_logger
from fmsat.core.types import Assignment, PushOutcome, SatOutcome
from fmsat.ir.ir_compile import FormulaTranslator, TranslatedFormula
from fmsat.ir.ir_types import BoolExpr, Lit
from fmsat.model.encoding import ModelEncoding
from fmsat.solver.backend import ProverSession, SolverBackend
from fmsat.solver.stack import ConstraintStack

logger = get_logger(__name__)

class IncrementalSolver:
    """
    Satisfiability queries over the base model plus a stack of pushed
    constraints. Each query opens a fresh prover session with the base
    formulas and the current stack snapshot.

    Not thread-safe: concurrent analyses must each own an instance. Instances
    only share the read-only ModelEncoding; the variable manager is copied so
    auxiliary variables never collide across instances.
    """
    def __init__(self, encoding: ModelEncoding, backend: Optional[SolverBackend] = None):
        self.encoding = encoding
        self.backend = backend if backend else SolverBackend()
        self.var_manager = copy.deepcopy(encoding.var_manager)
        self.translator = FormulaTranslator(self.var_manager)
        self.stack = ConstraintStack(self.translator)
        self._num_features = encoding.num_features

        self._base: List[TranslatedFormula] = []
        self._base_sources: Dict[int, BoolExpr] = {}
        for c in encoding.constraints:
            formula = self.translator.translate(c)
            if formula.selector in self._base_sources:
                continue
            self._base.append(formula)
            self._base_sources[formula.selector] = c

        base_units = set()
        for f in self._base:
            base_units |= f.units
        self._base_units: FrozenSet[int] = frozenset(base_units)
        self._stack_units: Counter = Counter()
        self._pushed_units: List[FrozenSet[int]] = []

    # --- Stack ---

    @property
    def depth(self) -> int:
        return len(self.stack)

    def literal(self, value: int) -> Lit:
        if value == 0 or abs(value) > self._num_features:
            raise TranslationError(f"Literal {value} is not a feature variable")
        return self.encoding.literal(value)

    def push(self, constraint: BoolExpr) -> PushOutcome:
        """
        Pushes a constraint. The entry is recorded even when it contradicts the
        current state, so callers always pop what they pushed.
        Raises TranslationError (nothing is pushed in that case).
        """
        entry = self.stack.push(constraint)
        units = entry.formula.units
        contradictory = entry.formula.self_contradictory or any(
            -u in self._base_units or self._stack_units[-u] > 0 for u in units
        )
        self._stack_units.update(units)
        self._pushed_units.append(units)
        if contradictory:
            logger.debug(f"Push of {constraint} is immediately contradictory")
            return PushOutcome.IMMEDIATELY_CONTRADICTORY
        return PushOutcome.APPLIED

    def push_literal(self, value: int) -> PushOutcome:
        return self.push(self.literal(value))

    def pop(self) -> BoolExpr:
        source = self.stack.pop()
        self._stack_units.subtract(self._pushed_units.pop())
        return source

    def pop_many(self, count: int) -> List[BoolExpr]:
        return [self.pop() for _ in range(count)]

    @contextmanager
    def assume(self, *constraints: BoolExpr) -> Iterator[List[PushOutcome]]:
        """
        Pushes the constraints for the duration of the block and pops exactly
        as many on every exit path. If a push fails halfway, the ones already
        pushed are popped before the error propagates.
        """
        depth = self.depth
        try:
            outcomes = [self.push(c) for c in constraints]
            yield outcomes
        finally:
            if self.depth < depth:
                raise StackImbalance(f"Stack popped below scope depth {depth} (now {self.depth})")
            self.pop_many(self.depth - depth)

    # --- Queries ---

    def open_session(self) -> ProverSession:
        """Fresh prover session loaded with the base formulas and the current stack."""
        session = self.backend.session()
        try:
            for f in self._base:
                session.add_constraint(f)
            for f in self.stack.snapshot_formulas():
                session.add_constraint(f)
        except BaseException:
            session.close()
            raise
        return session

    def is_satisfiable(self) -> SatOutcome:
        try:
            with self.open_session() as prover:
                return SatOutcome.UNSAT if prover.is_unsat() else SatOutcome.SAT
        except SolverTimeout as e:
            logger.debug(f"Satisfiability unknown: {e}")
        except SolverUnavailable:
            raise
        except SolverError as e:
            logger.warning(f"Satisfiability query failed: {e}")
        return SatOutcome.UNKNOWN

    def find_model(self) -> Optional[Assignment]:
        """One satisfying assignment over the feature variables, or None."""
        try:
            with self.open_session() as prover:
                if prover.is_unsat():
                    return None
                model = prover.get_model() or []
        except SolverTimeout as e:
            logger.debug(f"No model, query timed out: {e}")
            return None
        except SolverUnavailable:
            raise
        except SolverError as e:
            logger.warning(f"Model query failed: {e}")
            return None
        return tuple(l for l in model if abs(l) <= self._num_features)

    def minimal_unsatisfiable_subset(self) -> Optional[Set[BoolExpr]]:
        """
        Minimal set of base and pushed constraints that is contradictory.
        None when satisfiable or when no explanation could be computed.
        """
        try:
            with self.open_session() as prover:
                if not prover.is_unsat():
                    return None
                core = self._shrink(prover, prover.get_unsat_core())
        except SolverTimeout as e:
            logger.debug(f"No explanation, query timed out: {e}")
            return None
        except SolverUnavailable:
            raise
        except SolverError as e:
            logger.warning(f"Explanation query failed: {e}")
            return None

        explanation = set()
        for sel in core:
            source = self._base_sources.get(sel)
            if source is None:
                source = self.stack.source_of(sel)
            if source is not None:
                explanation.add(source)
        return explanation

    @staticmethod
    def _shrink(prover: ProverSession, core: List[int]) -> List[int]:
        """Deletion-based minimization: drop every selector the conflict does not need."""
        needed = list(dict.fromkeys(core))
        i = 0
        while i < len(needed):
            trial = needed[:i] + needed[i + 1:]
            if trial and prover.is_unsat(trial):
                # The refined core may drop more than the one selector
                refined = set(prover.get_unsat_core())
                needed = [s for s in trial if s in refined]
            else:
                i += 1
        return needed
