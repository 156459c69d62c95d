from __future__ import annotations

import math

import numpy as np
import pytest

from adaptive_mi.core_utils.exceptions import InvalidInputError
from adaptive_mi.information_metrics.mutual_information import (
    MI_METHODS,
    MutualInformationAdaptive,
    estimate_mutual_information,
)
from adaptive_mi.information_metrics.mutual_information.mi_sklearn import mi_knn


def _correlated(n: int, rho: float, seed: int) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    x = rng.standard_normal(n)
    y = rho * x + math.sqrt(1.0 - rho**2) * rng.standard_normal(n)
    return x, y


def test_default_method_is_adaptive():
    x, y = _correlated(300, 0.7, seed=0)
    expected = MutualInformationAdaptive(y).mut_inf(x)
    assert estimate_mutual_information(y, x) == expected
    assert estimate_mutual_information(y, x, method="adaptive") == expected


def test_adaptive_options_are_forwarded():
    x, y = _correlated(300, 0.7, seed=0)
    expected = MutualInformationAdaptive(y, respect_ties=True, chi_crit=10.0).mut_inf(
        x, respect_ties=True
    )
    got = estimate_mutual_information(
        y, x, method="adaptive", respect_ties=True, chi_crit=10.0
    )
    assert got == expected


def test_knn_baseline_detects_dependence():
    x, y = _correlated(500, 0.9, seed=5)
    estimate = estimate_mutual_information(y, x, method="knn", random_state=0)
    assert estimate > 0.5
    assert estimate == mi_knn(y, x, random_state=0)


def test_knn_rejects_length_mismatch():
    with pytest.raises(InvalidInputError):
        mi_knn(np.arange(10.0), np.arange(9.0))


def test_unknown_method_is_rejected():
    assert "histogram" not in MI_METHODS
    with pytest.raises(InvalidInputError, match="histogram"):
        estimate_mutual_information(np.arange(10.0), np.arange(10.0), method="histogram")
