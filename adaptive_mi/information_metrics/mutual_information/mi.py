"""Mutual Information (MI) estimation for continuous paired samples.

Dispatches between the adaptive rank-space partition (default), the
Parzen-window estimator and a scikit-learn k-nearest-neighbour baseline.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from adaptive_mi import config
from adaptive_mi.core_utils.exceptions import InvalidInputError

from .adaptive import MutualInformationAdaptive, adaptive_mutual_information
from .mi_sklearn import mi_knn
from .parzen import ParzenMutualInformation, parzen_mutual_information

MI_METHODS: tuple[str, ...] = ("adaptive", "parzen", "knn")


def estimate_mutual_information(
    dep_values: Sequence[float] | np.ndarray,
    x_values: Sequence[float] | np.ndarray,
    method: str = "adaptive",
    *,
    respect_ties: bool = False,
    chi_crit: float = config.CHI_CRITERION,
    bandwidth: float | str | None = config.PARZEN_BANDWIDTH,
    n_neighbors: int = config.KNN_NEIGHBORS,
    random_state: int | None = None,
) -> float:
    """
    Primary Mutual Information dispatcher exposed to callers.

    Parameters
    ----------
    dep_values : array-like
        Shape (n_samples,), the dependent variable.
    x_values : array-like
        Shape (n_samples,), the candidate variable.
    method : {"adaptive", "parzen", "knn"}
        Estimator to use.
    respect_ties, chi_crit
        Adaptive partition options.
    bandwidth
        Parzen window bandwidth rule.
    n_neighbors, random_state
        KNN baseline options.

    Returns
    -------
    float
        MI estimate in nats.
    """
    if method == "adaptive":
        return adaptive_mutual_information(
            dep_values, x_values, respect_ties=respect_ties, chi_crit=chi_crit
        )
    if method == "parzen":
        return parzen_mutual_information(dep_values, x_values, bandwidth=bandwidth)
    if method == "knn":
        return mi_knn(
            dep_values, x_values, n_neighbors=n_neighbors, random_state=random_state
        )
    raise InvalidInputError(
        f"Unknown MI method {method!r}; expected one of {', '.join(MI_METHODS)}."
    )


__all__ = [
    "MI_METHODS",
    "estimate_mutual_information",
    "MutualInformationAdaptive",
    "ParzenMutualInformation",
]
