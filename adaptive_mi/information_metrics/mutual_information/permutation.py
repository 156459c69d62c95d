"""Permutation test of a single candidate's adaptive MI estimate.

Shuffling the candidate variable breaks any dependence on the dependent
variable while keeping both marginals, so the permuted estimates sample the
null distribution of the statistic.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from joblib import Parallel, delayed

from adaptive_mi import config
from adaptive_mi.core_utils.data_utils import as_finite_vector, check_matching_length

from .adaptive import MutualInformationAdaptive


def _null_mi_batch(
    estimator: MutualInformationAdaptive,
    x: np.ndarray,
    n_draws: int,
    rng: np.random.Generator,
    respect_ties: bool,
) -> np.ndarray:
    """MI of ``n_draws`` independent shuffles of ``x``, shape (n_draws,)."""
    null_values = np.zeros(max(n_draws, 0), dtype=float)
    for draw in range(null_values.shape[0]):
        null_values[draw] = estimator.mut_inf(rng.permutation(x), respect_ties)
    return null_values


def _process_batch(
    n_draws: int,
    seed: np.random.SeedSequence,
    estimator: MutualInformationAdaptive,
    x: np.ndarray,
    observed_mi: float,
    respect_ties: bool,
) -> int:
    """Count shuffled estimates at least as large as the observed one."""
    null_values = _null_mi_batch(
        estimator, x, n_draws, np.random.default_rng(seed), respect_ties
    )
    return int(np.count_nonzero(null_values >= observed_mi - 1e-12))


def permutation_test_adaptive_mi(
    estimator: MutualInformationAdaptive,
    x_values: Sequence[float] | np.ndarray,
    permutations: int = config.N_PERMUTATIONS,
    random_state: int | None = None,
    batch_size: int = 64,
    n_jobs: int | None = None,
    respect_ties: bool = False,
) -> tuple[float, float]:
    """
    Batched permutation test for I(dependent; candidate).

    Tests the null hypothesis H0: the candidate is independent of the
    dependent variable.

    Parameters
    ----------
    estimator : MutualInformationAdaptive
        Estimator built on the dependent variable.
    x_values : array-like
        Candidate values, shape (n,).
    permutations : int
        Number of permutations.
    random_state : int | None
        Random seed for reproducibility.
    batch_size : int
        Permutations per batch (one task per batch).
    n_jobs : int | None
        Number of parallel jobs over batches. None means 1.
    respect_ties : bool
        Tie handling for the candidate variable.

    Returns
    -------
    observed_mi : float
        MI estimate on the unshuffled data.
    p_value : float
        Permutation p-value, ``(1 + #{null >= observed}) / (permutations + 1)``.

    Notes
    -----
    Returns p=1.0 when ``permutations <= 0`` since there is then no evidence
    against independence.
    """
    x = as_finite_vector(x_values, "x_values")
    check_matching_length(x, estimator.n, "x_values")

    observed_mi = estimator.mut_inf(x, respect_ties)

    if permutations <= 0:
        return observed_mi, 1.0

    sizes = _split_into_batches(int(permutations), batch_size)
    children = np.random.SeedSequence(random_state).spawn(len(sizes))

    exceed_counts = Parallel(n_jobs=n_jobs)(
        delayed(_process_batch)(size, child, estimator, x, observed_mi, respect_ties)
        for size, child in zip(sizes, children)
    )

    p_value = (1.0 + sum(exceed_counts)) / (permutations + 1.0)
    return observed_mi, float(p_value)


def _split_into_batches(total: int, batch_size: int) -> list[int]:
    """Batch sizes summing to ``total``; only the last batch may be short."""
    step = max(1, int(batch_size))
    return [min(step, total - start) for start in range(0, total, step)]


__all__ = [
    "permutation_test_adaptive_mi",
]
