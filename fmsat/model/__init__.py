from fmsat.model.vars import VarManager
from fmsat.model.feature_model import GroupType, Feature, FeatureModel
from fmsat.model.encoding import ModelEncoding, tree_constraints, encode_feature_model

__all__ = [
    "VarManager",
    "GroupType", "Feature", "FeatureModel",
    "ModelEncoding", "tree_constraints", "encode_feature_model"
]
