from dataclasses import dataclass, field
from itertools import combinations
from typing import List, Set

from fmsat.ir.ir_types import BoolExpr, Lit, Not, And, Or, Imp, VarRef, lit
from fmsat.model.feature_model import Feature, FeatureModel, GroupType
from fmsat.model.vars import VarManager

@dataclass
class ModelEncoding:
    """
    Propositional view of a feature model.
    Feature variables are 1..num_features in preorder. `constraints` are the
    base constraints every query starts from: tree structure first, then the
    cross-tree constraints of the model. Read-only once built, so it can be
    shared between independent solvers.
    """
    model: FeatureModel
    var_manager: VarManager
    constraints: List[BoolExpr] = field(default_factory=list)

    @property
    def num_features(self) -> int:
        return len(self.model.features())

    def variable(self, name: str) -> int:
        return self.var_manager.lookup(name)

    def name_of(self, literal: int) -> str:
        return self.var_manager.name_of(literal)

    def literal(self, value: int) -> Lit:
        """Turns a signed variable index into a constraint literal."""
        return Lit(var=VarRef(name=self.name_of(value)), neg=value < 0)

    def concrete_variables(self) -> Set[int]:
        return {self.variable(n) for n in self.model.concrete_features()}

    def selected_names(self, assignment) -> List[str]:
        """Concrete features selected by an assignment, in preorder."""
        positive = {l for l in assignment if l > 0}
        return [n for n in self.model.concrete_features() if self.variable(n) in positive]

def _any_of(features: List[Feature]) -> BoolExpr:
    if len(features) == 1:
        return lit(features[0].name)
    return Or(terms=[lit(f.name) for f in features])

def tree_constraints(model: FeatureModel) -> List[BoolExpr]:
    """
    Structural constraints of the feature tree:
    - the root is selected
    - child -> parent
    - AND group: parent -> mandatory child
    - OR group: parent -> (c1 \\/ ... \\/ cn)
    - ALTERNATIVE group: parent -> (c1 \\/ ... \\/ cn) and pairwise exclusion
    """
    out: List[BoolExpr] = [lit(model.root.name)]
    for f in model.root.iter_features():
        if not f.children:
            continue
        parent = lit(f.name)
        for c in f.children:
            out.append(Imp(a=lit(c.name), b=parent))

        if f.group == GroupType.AND:
            for c in f.children:
                if c.mandatory:
                    out.append(Imp(a=parent, b=lit(c.name)))
        else:
            out.append(Imp(a=parent, b=_any_of(f.children)))
            if f.group == GroupType.ALTERNATIVE:
                for c1, c2 in combinations(f.children, 2):
                    out.append(Not(term=And(terms=[lit(c1.name), lit(c2.name)])))
    return out

def encode_feature_model(model: FeatureModel) -> ModelEncoding:
    vm = VarManager()
    for f in model.root.iter_features():
        vm.declare(f.name)
    constraints = tree_constraints(model) + list(model.constraints)
    return ModelEncoding(model=model, var_manager=vm, constraints=constraints)
