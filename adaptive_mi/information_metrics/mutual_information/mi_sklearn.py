"""Scikit-learn based k-nearest-neighbour Mutual Information baseline."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from sklearn.feature_selection import mutual_info_regression

from adaptive_mi import config
from adaptive_mi.core_utils.data_utils import as_finite_vector, check_matching_length


def mi_knn(
    dep_values: Sequence[float] | np.ndarray,
    x_values: Sequence[float] | np.ndarray,
    n_neighbors: int = config.KNN_NEIGHBORS,
    random_state: Optional[int] = None,
) -> float:
    """
    Calculate Mutual Information using scikit-learn's mutual_info_regression.

    Parameters
    ----------
    dep_values : array-like
        Dependent variable of shape (n_samples,).
    x_values : array-like
        Candidate variable of shape (n_samples,).
    n_neighbors : int
        Neighbours of the Kraskov-style estimator.
    random_state : int, optional
        Seed for the small noise scikit-learn adds to break ties.

    Returns
    -------
    float
        MI in nats (clipped at 0 by scikit-learn).
    """
    dep = as_finite_vector(dep_values, "dep_values")
    x = as_finite_vector(x_values, "x_values")
    check_matching_length(x, dep.shape[0], "x_values")

    # mutual_info_regression expects X as (n_samples, n_features)
    mi = mutual_info_regression(
        x.reshape(-1, 1),
        dep,
        discrete_features=False,
        n_neighbors=n_neighbors,
        random_state=random_state,
    )
    return float(mi[0])


__all__ = ["mi_knn"]
