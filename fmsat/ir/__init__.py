from fmsat.ir.ir_types import (
    VarRef, BoolExpr, Lit, Not, And, Or, Imp, Iff, Xor, lit, variables_of
)
from fmsat.ir.ir_normalize import normalize_ir
from fmsat.ir.ir_compile import TranslatedFormula, FormulaTranslator

__all__ = [
    "VarRef", "BoolExpr", "Lit", "Not", "And", "Or", "Imp", "Iff", "Xor", "lit", "variables_of",
    "normalize_ir",
    "TranslatedFormula", "FormulaTranslator"
]
