from fmsat.analysis.implication import (
    ImplicationChecker, optional_feature_pairs, check_implications_parallel,
    find_false_optional_features
)
from fmsat.analysis.counting import count_configurations

__all__ = [
    "ImplicationChecker", "optional_feature_pairs", "check_implications_parallel",
    "find_false_optional_features",
    "count_configurations"
]
