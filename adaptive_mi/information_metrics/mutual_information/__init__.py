"""Mutual Information estimators for continuous data.

This subpackage provides:
- The adaptive rank-space partition estimator (Darbellay-Vajda)
- A Parzen-window estimator and a k-nearest-neighbour baseline
- A permutation test for a single candidate
"""

from .adaptive import (
    AdaptivePartitionSettings,
    LeafCell,
    MutualInformationAdaptive,
    PartitionResult,
    adaptive_mutual_information,
)
from .chi_square import chi_criterion_from_alpha, chi_square_p_value
from .mi import MI_METHODS, estimate_mutual_information
from .mi_sklearn import mi_knn
from .parzen import ParzenMutualInformation, parzen_mutual_information
from .permutation import permutation_test_adaptive_mi

__all__ = [
    "AdaptivePartitionSettings",
    "LeafCell",
    "MutualInformationAdaptive",
    "PartitionResult",
    "adaptive_mutual_information",
    "chi_criterion_from_alpha",
    "chi_square_p_value",
    "MI_METHODS",
    "estimate_mutual_information",
    "mi_knn",
    "ParzenMutualInformation",
    "parzen_mutual_information",
    "permutation_test_adaptive_mi",
]
