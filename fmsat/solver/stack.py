from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from fmsat.core.errors import EmptyStackError, StackImbalance
from fmsat.ir.ir_compile import FormulaTranslator, TranslatedFormula
from fmsat.ir.ir_types import BoolExpr

@dataclass(frozen=True)
class StackEntry:
    source: BoolExpr
    formula: TranslatedFormula

class ConstraintStack:
    """
    LIFO sequence of pushed constraints with a reverse lookup from the
    translated formula (its selector) back to the originating constraint.
    """
    def __init__(self, translator: FormulaTranslator):
        self.translator = translator
        self._entries: List[StackEntry] = []
        # selector -> sources of the live entries using it (translations are memoized)
        self._sources: Dict[int, List[BoolExpr]] = {}

    def push(self, constraint: BoolExpr) -> StackEntry:
        """Raises TranslationError if the constraint cannot be translated."""
        entry = StackEntry(source=constraint, formula=self.translator.translate(constraint))
        self._entries.append(entry)
        self._sources.setdefault(entry.formula.selector, []).append(constraint)
        return entry

    def pop(self) -> BoolExpr:
        if not self._entries:
            raise EmptyStackError("pop() on an empty constraint stack")
        entry = self._entries.pop()
        sources = self._sources[entry.formula.selector]
        sources.pop()
        if not sources:
            del self._sources[entry.formula.selector]
        return entry.source

    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def snapshot_formulas(self) -> Tuple[TranslatedFormula, ...]:
        """Current formulas in push order."""
        return tuple(e.formula for e in self._entries)

    def source_of(self, selector: int) -> Optional[BoolExpr]:
        sources = self._sources.get(selector)
        return sources[-1] if sources else None

    @contextmanager
    def scoped(self) -> Iterator["ConstraintStack"]:
        """Restores the entry depth on every exit path."""
        depth = len(self._entries)
        try:
            yield self
        finally:
            if len(self._entries) < depth:
                raise StackImbalance(f"Stack popped below scope depth {depth} (now {len(self._entries)})")
            while len(self._entries) > depth:
                self.pop()
