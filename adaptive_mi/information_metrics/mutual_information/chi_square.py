"""Chi-square tests for local independence inside a rank rectangle.

A rectangle of rank space is uniform under the null hypothesis: the expected
count of any sub-cell is the rectangle's case count times the product of the
sub-cell's marginal fractions. Observed counts are compared with Yates'
continuity correction,

    χ² = Σ (|actual − expected| − 0.5)² / expected,

first on a 2x2 split at the adjusted midpoints and, for large rectangles that
pass the coarse test, on a proportional 4x4 grid against a stricter criterion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy.stats import chi2


@dataclass(frozen=True)
class SplitTestResult:
    """Outcome of one uniformity test on a rectangle.

    Attributes
    ----------
    statistic : float
        Yates-corrected chi-square statistic (NaN when degenerate).
    criterion : float
        Threshold the statistic had to exceed.
    reject : bool
        True when the rectangle is not uniform and should be split.
    degenerate : bool
        True when some expected count was not positive; the test then never
        rejects.
    """

    statistic: float
    criterion: float
    reject: bool
    degenerate: bool = False


def yates_chi_square(actual: np.ndarray, expected: np.ndarray) -> float:
    """Yates-corrected chi-square statistic, summed cell by cell in order.

    Returns NaN if any expected count is not positive.
    """
    actual = np.asarray(actual, dtype=float).ravel()
    expected = np.asarray(expected, dtype=float).ravel()
    if np.any(expected <= 0.0):
        return float("nan")

    statistic = 0.0
    for observed, wanted in zip(actual.tolist(), expected.tolist()):
        diff = abs(observed - wanted) - 0.5
        statistic += diff * diff / wanted
    return statistic


def _decide(statistic: float, criterion: float) -> SplitTestResult:
    if np.isnan(statistic):
        return SplitTestResult(
            statistic=statistic, criterion=criterion, reject=False, degenerate=True
        )
    return SplitTestResult(
        statistic=statistic, criterion=criterion, reject=statistic > criterion
    )


def two_by_two_test(
    actual: np.ndarray,
    n_cases: int,
    x_extent: int,
    y_extent: int,
    x_low_extent: int,
    y_low_extent: int,
    criterion: float,
) -> SplitTestResult:
    """Test a 2x2 split of a rectangle for uniformity.

    Parameters
    ----------
    actual : np.ndarray
        Shape (4,) cell counts ordered (low x, low y), (low x, high y),
        (high x, low y), (high x, high y).
    n_cases : int
        Cases in the rectangle.
    x_extent, y_extent : int
        Number of ranks the rectangle spans on each axis.
    x_low_extent, y_low_extent : int
        Number of ranks on the low side of each cut.
    criterion : float
        Rejection threshold.
    """
    x_high_extent = x_extent - x_low_extent
    y_high_extent = y_extent - y_low_extent
    x_sizes = np.array(
        [x_low_extent, x_low_extent, x_high_extent, x_high_extent], dtype=float
    )
    y_sizes = np.array(
        [y_low_extent, y_high_extent, y_low_extent, y_high_extent], dtype=float
    )

    expected = float(n_cases) * x_sizes / float(x_extent) * y_sizes / float(y_extent)
    return _decide(yates_chi_square(actual, expected), criterion)


def grid_cuts(start: int, stop: int, n_cells: int = 4) -> Tuple[np.ndarray, np.ndarray]:
    """Proportional cut ranks and cell fractions for an ``n_cells`` grid axis.

    ``cuts[i]`` is the last rank of cell ``i``; ``fractions[i]`` is the share
    of the axis extent that cell ``i`` covers.
    """
    extent = stop - start + 1
    cuts = np.empty(n_cells, dtype=np.int64)
    fractions = np.empty(n_cells, dtype=float)
    previous = start - 1
    for i in range(n_cells):
        cuts[i] = extent * (i + 1) // n_cells + start - 1
        fractions[i] = (cuts[i] - previous) / float(extent)
        previous = cuts[i]
    return cuts, fractions


def grid_cell_index(ranks: np.ndarray, cuts: np.ndarray) -> np.ndarray:
    """Cell index per rank: the first cut at or above it, else the last cell."""
    return np.searchsorted(cuts[:-1], ranks, side="left")


def four_by_four_test(
    x_ranks: np.ndarray,
    y_ranks: np.ndarray,
    x_bounds: Tuple[int, int],
    y_bounds: Tuple[int, int],
    criterion: float,
) -> SplitTestResult:
    """Test a rectangle for uniformity on a proportional 4x4 grid.

    Parameters
    ----------
    x_ranks, y_ranks : np.ndarray
        Ranks of the cases inside the rectangle, shape (m,).
    x_bounds, y_bounds : tuple of int
        Inclusive rank bounds of the rectangle.
    criterion : float
        Rejection threshold (already scaled for the finer grid).
    """
    x_cuts, x_fractions = grid_cuts(*x_bounds)
    y_cuts, y_fractions = grid_cuts(*y_bounds)

    cells = grid_cell_index(x_ranks, x_cuts) * 4 + grid_cell_index(y_ranks, y_cuts)
    actual = np.bincount(cells, minlength=16)
    expected = np.outer(x_fractions, y_fractions).ravel() * float(x_ranks.shape[0])
    return _decide(yates_chi_square(actual, expected), criterion)


def chi_criterion_from_alpha(alpha: float, df: int = 1) -> float:
    """Chi-square threshold whose right-tail probability equals ``alpha``."""
    return float(chi2.isf(alpha, df=df))


def chi_square_p_value(statistic: float, df: int = 1) -> float:
    """Right-tail p-value of a chi-square statistic."""
    return float(chi2.sf(statistic, df=df))


__all__ = [
    "SplitTestResult",
    "yates_chi_square",
    "two_by_two_test",
    "grid_cuts",
    "grid_cell_index",
    "four_by_four_test",
    "chi_criterion_from_alpha",
    "chi_square_p_value",
]
