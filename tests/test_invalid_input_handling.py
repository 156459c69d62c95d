from __future__ import annotations

import threading

import numpy as np
import pytest

from adaptive_mi.core_utils.exceptions import (
    AdaptiveMIError,
    EstimationCancelledError,
    InvalidInputError,
    PartitionCapacityError,
)
from adaptive_mi.information_metrics.mutual_information.adaptive import (
    AdaptivePartitionSettings,
    MutualInformationAdaptive,
)


def _sample(n: int = 64) -> np.ndarray:
    return np.arange(float(n))


class TestConstruction:
    def test_too_few_cases(self) -> None:
        with pytest.raises(InvalidInputError, match="at least"):
            MutualInformationAdaptive([1.0, 2.0, 3.0])

    @pytest.mark.parametrize("crit", [0.0, -1.0, float("nan"), float("inf")])
    def test_non_positive_or_non_finite_criterion(self, crit: float) -> None:
        with pytest.raises(InvalidInputError, match="chi_crit"):
            MutualInformationAdaptive(_sample(), chi_crit=crit)

    def test_non_finite_dependent_values(self) -> None:
        values = _sample()
        values[10] = np.nan
        with pytest.raises(InvalidInputError, match="non-finite"):
            MutualInformationAdaptive(values)

    def test_declared_n_must_match(self) -> None:
        with pytest.raises(InvalidInputError):
            MutualInformationAdaptive(_sample(8), n=10)
        assert MutualInformationAdaptive(_sample(8), n=8).n == 8

    def test_invalid_settings(self) -> None:
        with pytest.raises(InvalidInputError, match="refine_multiplier"):
            MutualInformationAdaptive(
                _sample(), settings=AdaptivePartitionSettings(refine_multiplier=0.0)
            )
        with pytest.raises(InvalidInputError, match="min_cases_to_recurse"):
            MutualInformationAdaptive(
                _sample(), settings=AdaptivePartitionSettings(min_cases_to_recurse=0)
            )
        with pytest.raises(InvalidInputError, match="max_pending"):
            MutualInformationAdaptive(
                _sample(), settings=AdaptivePartitionSettings(max_pending=0)
            )

    def test_chi_crit_argument_overrides_settings(self) -> None:
        estimator = MutualInformationAdaptive(
            _sample(), chi_crit=9.0, settings=AdaptivePartitionSettings(chi_crit=2.0)
        )
        assert estimator.chi_crit == 9.0


class TestEstimateInputs:
    def test_length_mismatch(self) -> None:
        estimator = MutualInformationAdaptive(_sample(64))
        with pytest.raises(InvalidInputError, match="64"):
            estimator.mut_inf(_sample(63))

    def test_non_finite_candidate(self) -> None:
        estimator = MutualInformationAdaptive(_sample())
        values = _sample()
        values[3] = -np.inf
        with pytest.raises(InvalidInputError, match="x_values"):
            estimator.mut_inf(values)

    def test_errors_are_value_errors_too(self) -> None:
        estimator = MutualInformationAdaptive(_sample())
        with pytest.raises(ValueError):
            estimator.mut_inf([1.0, 2.0])


class TestResourceAndCancellation:
    def test_capacity_overflow_is_reported(self) -> None:
        dep = _sample(64)
        settings = AdaptivePartitionSettings(max_pending=1)
        estimator = MutualInformationAdaptive(dep, settings=settings)

        # The root split wants to push two 32-case quadrants.
        with pytest.raises(PartitionCapacityError) as excinfo:
            estimator.mut_inf(-dep)
        assert isinstance(excinfo.value, AdaptiveMIError)
        assert excinfo.value.capacity == 1

    def test_estimator_recovers_after_capacity_error(self) -> None:
        dep = _sample(64)
        estimator = MutualInformationAdaptive(
            dep, settings=AdaptivePartitionSettings(max_pending=1)
        )
        with pytest.raises(PartitionCapacityError):
            estimator.mut_inf(-dep)
        # A constant candidate with ties respected is never split.
        assert estimator.mut_inf(np.zeros(64), respect_ties=True) == 0.0

    def test_cancellation_between_pops(self) -> None:
        estimator = MutualInformationAdaptive(_sample())
        event = threading.Event()
        event.set()
        with pytest.raises(EstimationCancelledError):
            estimator.mut_inf(_sample(), cancel_event=event)

    def test_unset_event_does_not_interfere(self) -> None:
        estimator = MutualInformationAdaptive(_sample())
        plain = estimator.mut_inf(-_sample())
        assert estimator.mut_inf(-_sample(), cancel_event=threading.Event()) == plain

    def test_default_capacity_follows_config(self, monkeypatch) -> None:
        from adaptive_mi import config

        monkeypatch.setattr(config, "STACK_CAPACITY_FACTOR", 0)
        dep = _sample(64)
        with pytest.raises(PartitionCapacityError) as excinfo:
            MutualInformationAdaptive(dep).mut_inf(-dep)
        assert excinfo.value.capacity == 1
