"""Parzen-window estimator of mutual information.

Both variables are mapped to normal scores, so each marginal density is the
standard normal density and only the joint density has to be estimated. The
joint density is a Gaussian Parzen window over the paired scores, and the
estimate is the double integral

    I = ∫∫ p(x,y) · log( p(x,y) / (p(x)·p(y)) ) dy dx

evaluated with nested adaptive quadrature. The densities reach the integrands
through an explicit :class:`ParzenIntegrandContext` passed as ``args``, so
concurrent estimates never share state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from scipy import integrate
from scipy.stats import gaussian_kde, norm

from adaptive_mi import config
from adaptive_mi.core_utils.data_utils import (
    as_finite_vector,
    check_matching_length,
    check_sample_size,
)
from adaptive_mi.information_metrics.ranks.rank_transform import rank_transform


def normal_scores(values: np.ndarray, name: str = "values") -> np.ndarray:
    """Map values to standard normal quantiles of their ranks, ``(r + 1) / (n + 1)``."""
    ranks = rank_transform(values, name=name).ranks
    n = ranks.shape[0]
    return norm.ppf((ranks + 1.0) / (n + 1.0))


@dataclass(frozen=True)
class ParzenIntegrandContext:
    """Everything the integrands need, bundled for ``quad(..., args=...)``.

    Attributes
    ----------
    joint : gaussian_kde
        Parzen window over the stacked scores ``(dependent, candidate)``.
    dep_low, dep_high : float
        Integration range of the dependent axis.
    accuracy : float
        Relative tolerance of the outer integral.
    floor : float
        Floor for the density product and ratio inside the logarithm.
    """

    joint: gaussian_kde
    dep_low: float
    dep_high: float
    accuracy: float
    floor: float = config.LOG_FLOOR

    def joint_density(self, dep_score: float, x_score: float) -> float:
        return float(self.joint(np.array([[dep_score], [x_score]]))[0])


def _inner_integrand(
    dep_score: float, ctx: ParzenIntegrandContext, x_score: float, px: float
) -> float:
    py = norm.pdf(dep_score)
    pxy = ctx.joint_density(dep_score, x_score)
    term = max(px * py, ctx.floor)
    term = max(pxy / term, ctx.floor)
    return pxy * math.log(term)


def _outer_integrand(x_score: float, ctx: ParzenIntegrandContext) -> float:
    px = norm.pdf(x_score)
    value, _ = integrate.quad(
        _inner_integrand,
        ctx.dep_low,
        ctx.dep_high,
        args=(ctx, x_score, px),
        epsabs=1e-7,
        epsrel=0.1 * ctx.accuracy,
    )
    return value


def _significant_range(scores: np.ndarray, bandwidth: float) -> tuple[float, float]:
    margin = config.PARZEN_RANGE_BANDWIDTHS * bandwidth
    return float(scores.min() - margin), float(scores.max() + margin)


class ParzenMutualInformation:
    """Parzen-window mutual information against a fixed dependent variable.

    Parameters
    ----------
    dep_values : array-like
        Shape (n,), finite values of the dependent variable.
    bandwidth : float, str or None
        ``bw_method`` of :class:`scipy.stats.gaussian_kde`.
    """

    def __init__(
        self,
        dep_values: Sequence[float] | np.ndarray,
        bandwidth: float | str | None = config.PARZEN_BANDWIDTH,
    ) -> None:
        dep = as_finite_vector(dep_values, "dep_values")
        self.n = check_sample_size(dep.shape[0], config.MIN_CASES, "dep_values")
        self.bandwidth = bandwidth
        self._dep_scores = normal_scores(dep, name="dep_values")

    def integration_context(
        self, x_values: Sequence[float] | np.ndarray
    ) -> tuple[ParzenIntegrandContext, float, float]:
        """Build the integrand context and the candidate-axis range."""
        x = as_finite_vector(x_values, "x_values")
        check_matching_length(x, self.n, "x_values")
        x_scores = normal_scores(x, name="x_values")

        joint = gaussian_kde(np.vstack([self._dep_scores, x_scores]), bw_method=self.bandwidth)
        dep_bw = math.sqrt(joint.covariance[0, 0])
        x_bw = math.sqrt(joint.covariance[1, 1])
        dep_low, dep_high = _significant_range(self._dep_scores, dep_bw)
        x_low, x_high = _significant_range(x_scores, x_bw)

        accuracy = (
            config.PARZEN_ACCURACY_LARGE_N
            if self.n > config.PARZEN_LARGE_N
            else config.PARZEN_ACCURACY_SMALL_N
        )
        ctx = ParzenIntegrandContext(
            joint=joint, dep_low=dep_low, dep_high=dep_high, accuracy=accuracy
        )
        return ctx, x_low, x_high

    def mut_inf(self, x_values: Sequence[float] | np.ndarray) -> float:
        """Estimate the mutual information (nats) with ``x_values``."""
        ctx, x_low, x_high = self.integration_context(x_values)
        value, _ = integrate.quad(
            _outer_integrand,
            x_low,
            x_high,
            args=(ctx,),
            epsabs=1e-6,
            epsrel=ctx.accuracy,
        )
        return float(value)


def parzen_mutual_information(
    dep_values: Sequence[float] | np.ndarray,
    x_values: Sequence[float] | np.ndarray,
    bandwidth: Optional[float | str] = config.PARZEN_BANDWIDTH,
) -> float:
    """One-shot convenience wrapper around :class:`ParzenMutualInformation`."""
    return ParzenMutualInformation(dep_values, bandwidth=bandwidth).mut_inf(x_values)


__all__ = [
    "normal_scores",
    "ParzenIntegrandContext",
    "ParzenMutualInformation",
    "parzen_mutual_information",
]
