"""Benjamini-Hochberg correction for screening many candidates at once.

References
----------
Benjamini, Y., and Hochberg, Y. (1995). Controlling the false discovery
rate: a practical and powerful approach to multiple testing. Journal of
the Royal Statistical Society Series B, 57, 289-300.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from statsmodels.stats.multitest import multipletests

from adaptive_mi import config


def benjamini_hochberg_correction(
    p_values: np.ndarray, alpha: float = config.SIGNIFICANCE_ALPHA
) -> Tuple[np.ndarray, np.ndarray]:
    """Apply Benjamini-Hochberg FDR correction to p-values.

    Parameters
    ----------
    p_values : np.ndarray
        Array of p-values to correct. NaN entries (untested candidates) are
        left out of the correction and come back as not rejected with an
        adjusted p-value of NaN.
    alpha : float
        Significance level for FDR control.

    Returns
    -------
    rejected_hypotheses : np.ndarray (bool)
        Boolean array indicating which null hypotheses are rejected
    adjusted_p_values : np.ndarray (float)
        FDR-adjusted p-values aligned to the input

    Examples
    --------
    >>> import numpy as np
    >>> p_values = np.array([0.001, 0.01, 0.03, 0.05, 0.1])
    >>> rejected, adjusted = benjamini_hochberg_correction(p_values)
    >>> rejected
    array([ True,  True,  True, False, False])
    """
    p_values_array = np.asarray(p_values, dtype=float)
    rejected_hypotheses = np.zeros(p_values_array.shape, dtype=bool)
    adjusted_p_values = np.full(p_values_array.shape, np.nan, dtype=float)

    tested = ~np.isnan(p_values_array)
    if not tested.any():
        return rejected_hypotheses, adjusted_p_values

    rejected, adjusted, _, _ = multipletests(
        p_values_array[tested],
        alpha=alpha,
        method="fdr_bh",
        is_sorted=False,
        returnsorted=False,
    )

    rejected_hypotheses[tested] = rejected.astype(bool)
    adjusted_p_values[tested] = adjusted.astype(float)
    return rejected_hypotheses, adjusted_p_values


__all__ = ["benjamini_hochberg_correction"]
