from __future__ import annotations

import math

import numpy as np
import pytest

from adaptive_mi.core_utils.exceptions import InvalidInputError
from adaptive_mi.information_metrics.mutual_information import (
    MutualInformationAdaptive,
    permutation_test_adaptive_mi,
)


def _correlated(n: int, rho: float, seed: int) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    x = rng.standard_normal(n)
    y = rho * x + math.sqrt(1.0 - rho**2) * rng.standard_normal(n)
    return x, y


def test_dependent_candidate_is_significant():
    x, y = _correlated(200, 0.7, seed=3)
    estimator = MutualInformationAdaptive(y)
    observed, p_value = permutation_test_adaptive_mi(
        estimator, x, permutations=50, random_state=0
    )
    assert observed == estimator.mut_inf(x)
    assert p_value == pytest.approx(1.0 / 51.0)


def test_independent_candidates_are_mostly_not_significant():
    p_values = []
    for seed in range(10):
        rng = np.random.default_rng(100 + seed)
        estimator = MutualInformationAdaptive(rng.standard_normal(100))
        _, p_value = permutation_test_adaptive_mi(
            estimator, rng.standard_normal(100), permutations=40, random_state=seed
        )
        p_values.append(p_value)
    assert np.median(p_values) > 0.05


def test_unsplittable_candidate_has_p_value_one():
    estimator = MutualInformationAdaptive(np.arange(40.0), respect_ties=True)
    observed, p_value = permutation_test_adaptive_mi(
        estimator, np.ones(40), permutations=20, random_state=1, respect_ties=True
    )
    assert observed == 0.0
    assert p_value == 1.0


def test_p_value_resolution_matches_permutation_count():
    x, y = _correlated(120, 0.2, seed=9)
    _, p_value = permutation_test_adaptive_mi(
        MutualInformationAdaptive(y), x, permutations=30, random_state=2
    )
    count = p_value * 31 - 1
    assert count == pytest.approx(round(count))
    assert 1.0 / 31.0 <= p_value <= 1.0


def test_same_seed_same_result():
    x, y = _correlated(150, 0.3, seed=4)
    estimator = MutualInformationAdaptive(y)
    first = permutation_test_adaptive_mi(estimator, x, permutations=25, random_state=7)
    second = permutation_test_adaptive_mi(estimator, x, permutations=25, random_state=7)
    assert first == second


def test_parallel_batches_match_serial():
    x, y = _correlated(150, 0.3, seed=4)
    estimator = MutualInformationAdaptive(y)
    serial = permutation_test_adaptive_mi(
        estimator, x, permutations=40, random_state=11, batch_size=16, n_jobs=1
    )
    parallel = permutation_test_adaptive_mi(
        estimator, x, permutations=40, random_state=11, batch_size=16, n_jobs=2
    )
    assert serial == parallel


def test_zero_permutations_skips_the_test():
    x, y = _correlated(60, 0.9, seed=6)
    estimator = MutualInformationAdaptive(y)
    observed, p_value = permutation_test_adaptive_mi(estimator, x, permutations=0)
    assert observed == estimator.mut_inf(x)
    assert p_value == 1.0


def test_candidate_length_is_checked():
    estimator = MutualInformationAdaptive(np.arange(30.0))
    with pytest.raises(InvalidInputError):
        permutation_test_adaptive_mi(estimator, np.arange(29.0), permutations=5)
