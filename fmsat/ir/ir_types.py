import re
from typing import Annotated, Any, Literal, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- VarRef ---

class VarRef(BaseModel):
    """Reference to a named feature variable with strict validation."""
    model_config = ConfigDict(frozen=True)

    name: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Variable name cannot be empty")
        if not re.match(r"^[a-zA-Z0-9_.\-]+$", v):
            raise ValueError(f"Variable name '{v}' must be alphanumeric/underscore/dot/dash")
        return v

    def __hash__(self):
        return hash(self.name)

    def __eq__(self, other):
        if not isinstance(other, VarRef):
            return False
        return self.name == other.name

# --- BoolExpr ---

class BoolExprBase(BaseModel):
    model_config = ConfigDict(frozen=True)

class Lit(BoolExprBase):
    kind: Literal["lit"] = "lit"
    var: VarRef
    neg: bool = False

    def __str__(self):
        return f"{'-' if self.neg else ''}{self.var.name}"

class Not(BoolExprBase):
    kind: Literal["not"] = "not"
    term: "BoolExpr"

    def __str__(self):
        return f"-({self.term})"

class And(BoolExprBase):
    kind: Literal["and"] = "and"
    terms: Tuple["BoolExpr", ...]

    @field_validator('terms')
    @classmethod
    def validate_len(cls, v: Tuple[Any, ...]) -> Tuple[Any, ...]:
        if len(v) < 2:
            raise ValueError("And requires at least 2 terms")
        return v

    def __str__(self):
        return "(" + " & ".join(str(t) for t in self.terms) + ")"

class Or(BoolExprBase):
    kind: Literal["or"] = "or"
    terms: Tuple["BoolExpr", ...]

    @field_validator('terms')
    @classmethod
    def validate_len(cls, v: Tuple[Any, ...]) -> Tuple[Any, ...]:
        if len(v) < 2:
            raise ValueError("Or requires at least 2 terms")
        return v

    def __str__(self):
        return "(" + " | ".join(str(t) for t in self.terms) + ")"

class Imp(BoolExprBase):
    kind: Literal["imp"] = "imp"
    a: "BoolExpr"
    b: "BoolExpr"

    def __str__(self):
        return f"({self.a} => {self.b})"

class Iff(BoolExprBase):
    kind: Literal["iff"] = "iff"
    a: "BoolExpr"
    b: "BoolExpr"

    def __str__(self):
        return f"({self.a} <=> {self.b})"

class Xor(BoolExprBase):
    kind: Literal["xor"] = "xor"
    a: "BoolExpr"
    b: "BoolExpr"

    def __str__(self):
        return f"({self.a} ^ {self.b})"

BoolExpr = Annotated[
    Union[Lit, Not, And, Or, Imp, Iff, Xor],
    Field(discriminator="kind")
]

# Required for recursive models in Pydantic v2
Not.model_rebuild()
And.model_rebuild()
Or.model_rebuild()
Imp.model_rebuild()
Iff.model_rebuild()
Xor.model_rebuild()

# --- Builders ---

def lit(name: str, neg: bool = False) -> Lit:
    return Lit(var=VarRef(name=name), neg=neg)

def variables_of(expr: BoolExpr) -> set:
    """Names of all variables referenced by the expression."""
    if isinstance(expr, Lit):
        return {expr.var.name}
    if isinstance(expr, Not):
        return variables_of(expr.term)
    if isinstance(expr, (And, Or)):
        names = set()
        for t in expr.terms:
            names |= variables_of(t)
        return names
    if isinstance(expr, (Imp, Iff, Xor)):
        return variables_of(expr.a) | variables_of(expr.b)
    raise TypeError(f"Unsupported expression: {type(expr)}")
