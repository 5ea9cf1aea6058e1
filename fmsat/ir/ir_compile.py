from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Tuple

from fmsat.core.errors import TranslationError
from fmsat.ir.ir_normalize import normalize_ir
from fmsat.ir.ir_types import BoolExpr, Lit, And, Or
from fmsat.model.vars import VarManager

@dataclass(frozen=True, eq=False)
class TranslatedFormula:
    """
    Backend representation of one logical constraint.
    Every clause is guarded by the selector: (c1 \\/ ... \\/ ~sel). Asserting
    the selector enables the constraint; unsat cores report selectors, so the
    selector is the formula's identity inside the backend.
    """
    selector: int
    clauses: Tuple[Tuple[int, ...], ...]

    def guarded_clauses(self) -> List[List[int]]:
        return [list(c) + [-self.selector] for c in self.clauses]

    @property
    def units(self) -> FrozenSet[int]:
        return frozenset(c[0] for c in self.clauses if len(c) == 1)

    @property
    def self_contradictory(self) -> bool:
        """True if the formula alone is refuted without search."""
        if any(not c for c in self.clauses):
            return True
        units = self.units
        return any(-u in units for u in units)

class FormulaTranslator:
    """
    Translates logical constraints into guarded clause groups.
    Only variables already declared in the VarManager are accepted; Tseitin
    auxiliaries and selectors are allocated from the same manager.
    Translations are memoized per (structurally equal) constraint.
    """
    def __init__(self, var_manager: VarManager):
        self.var_manager = var_manager
        self._cache: Dict[BoolExpr, TranslatedFormula] = {}

    def translate(self, expr: BoolExpr) -> TranslatedFormula:
        cached = self._cache.get(expr)
        if cached is not None:
            return cached

        try:
            nnf = normalize_ir(expr)
        except (TypeError, ValueError) as e:
            raise TranslationError(f"Cannot normalize constraint {expr}: {e}") from e

        clauses: List[List[int]] = []
        self._clausify(nnf, clauses)
        selector = self.var_manager.fresh("sel", namespace="selector")
        formula = TranslatedFormula(selector=selector, clauses=tuple(tuple(c) for c in clauses))
        self._cache[expr] = formula
        return formula

    def _var(self, lit: Lit) -> int:
        try:
            vid = self.var_manager.lookup(lit.var.name)
        except KeyError:
            raise TranslationError(f"Unknown variable '{lit.var.name}'")
        return -vid if lit.neg else vid

    def _clausify(self, expr: BoolExpr, out: List[List[int]]):
        """Top-level CNF: conjunctions split into clauses, disjunctions become one clause."""
        if isinstance(expr, Lit):
            out.append([self._var(expr)])
        elif isinstance(expr, And):
            for t in expr.terms:
                self._clausify(t, out)
        elif isinstance(expr, Or):
            out.append([self._tseitin(t, out) for t in expr.terms])
        else:
            raise TranslationError(f"Unsupported expression after normalization: {type(expr).__name__}")

    def _tseitin(self, expr: BoolExpr, out: List[List[int]]) -> int:
        """Tseitin transformation: returns the literal representing the expression."""
        if isinstance(expr, Lit):
            return self._var(expr)

        if isinstance(expr, And):
            aux = self.var_manager.fresh("and", namespace="tseitin")
            inputs = [self._tseitin(t, out) for t in expr.terms]
            # aux <-> (i1 /\ i2 /\ ...)
            for i in inputs:
                out.append([-aux, i])
            out.append([-i for i in inputs] + [aux])
            return aux

        if isinstance(expr, Or):
            aux = self.var_manager.fresh("or", namespace="tseitin")
            inputs = [self._tseitin(t, out) for t in expr.terms]
            # aux <-> (i1 \/ i2 \/ ...)
            for i in inputs:
                out.append([-i, aux])
            out.append([-aux] + inputs)
            return aux

        raise TranslationError(f"Unsupported expression for Tseitin: {type(expr).__name__}")
