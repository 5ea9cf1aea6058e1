from enum import Enum
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from fmsat.ir.ir_types import BoolExpr, VarRef, variables_of

class GroupType(str, Enum):
    """How a feature groups its children."""
    AND = "and"
    OR = "or"
    ALTERNATIVE = "alternative"

class Feature(BaseModel):
    """
    A node of the feature tree.
    `mandatory` is only meaningful for children of an AND group.
    Abstract features structure the tree but never appear in products.
    """
    name: str
    group: GroupType = GroupType.AND
    mandatory: bool = False
    abstract: bool = False
    children: List["Feature"] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        # Same naming rules as constraint variables
        return VarRef(name=v).name

    @property
    def concrete(self) -> bool:
        return not self.abstract

    def iter_features(self) -> Iterator["Feature"]:
        """Preorder traversal of this subtree."""
        yield self
        for child in self.children:
            yield from child.iter_features()

    def has_concrete_descendant(self) -> bool:
        return any(c.concrete or c.has_concrete_descendant() for c in self.children)

    def __repr__(self):
        return f"Feature({self.name!r}, {self.group.value}, children={len(self.children)})"

Feature.model_rebuild()

class FeatureModel(BaseModel):
    """Feature tree plus cross-tree constraints over feature names."""
    root: Feature
    constraints: List[BoolExpr] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_names(self) -> 'FeatureModel':
        seen = set()
        for f in self.root.iter_features():
            if f.name in seen:
                raise ValueError(f"Duplicate feature name '{f.name}'")
            seen.add(f.name)
        for i, c in enumerate(self.constraints):
            unknown = variables_of(c) - seen
            if unknown:
                raise ValueError(f"Constraint {i} references unknown features: {sorted(unknown)}")
        return self

    def features(self) -> List[Feature]:
        return list(self.root.iter_features())

    def feature_map(self) -> Dict[str, Feature]:
        return {f.name: f for f in self.root.iter_features()}

    def concrete_features(self) -> List[str]:
        """Names of concrete features in preorder."""
        return [f.name for f in self.root.iter_features() if f.concrete]

    def parent_map(self) -> Dict[str, Optional[str]]:
        parents: Dict[str, Optional[str]] = {self.root.name: None}
        for f in self.root.iter_features():
            for c in f.children:
                parents[c.name] = f.name
        return parents

    def has_constraints(self) -> bool:
        return bool(self.constraints)
