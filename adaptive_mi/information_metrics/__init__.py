"""Information-theoretic metrics and utilities.

This package provides:
- Rank transforms with tie detection
- Mutual Information (MI) estimators for continuous paired samples
"""

import logging

from .mutual_information import (
    MutualInformationAdaptive,
    ParzenMutualInformation,
    estimate_mutual_information,
    permutation_test_adaptive_mi,
)
from .ranks import RankedVariable, rank_transform

# Library-friendly: leave handlers/levels to callers
logging.getLogger("adaptive_mi").addHandler(logging.NullHandler())

__all__ = [
    # MI estimators
    "MutualInformationAdaptive",
    "ParzenMutualInformation",
    "estimate_mutual_information",
    "permutation_test_adaptive_mi",
    # Ranks
    "RankedVariable",
    "rank_transform",
]
