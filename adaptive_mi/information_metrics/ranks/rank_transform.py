"""Dense rank transform with optional tie flags.

Raw sample values are replaced by their 0-based position in ascending order.
Equal values are ordered by case index (stable sort), so ranks are always a
permutation of ``0..n-1``. In tie-respecting mode a boolean flag per rank marks
whether the value at that rank and the value at the next rank are equal within
a relative tolerance; the partition estimator never places a cut between two
tied ranks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import numpy.typing as npt

from adaptive_mi import config
from adaptive_mi.core_utils.data_utils import as_finite_vector


@dataclass(frozen=True)
class RankedVariable:
    """Ranks of one variable and, optionally, its tie flags.

    Attributes
    ----------
    ranks : NDArray[np.int64]
        ``ranks[case]`` is the rank of that case, shape (n,).
    tied : NDArray[np.bool_] or None
        ``tied[r]`` is True when ranks ``r`` and ``r + 1`` hold equal values.
        Indexed by rank, not by case. ``None`` when ties are not respected.
    """

    ranks: npt.NDArray[np.int64]
    tied: Optional[npt.NDArray[np.bool_]]

    @property
    def n_cases(self) -> int:
        return int(self.ranks.shape[0])

    @property
    def respects_ties(self) -> bool:
        return self.tied is not None


def stable_sort_with_index(
    values: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Sort ``values`` ascending, carrying the case indices along.

    Returns
    -------
    sorted_values : np.ndarray
        Values in ascending order.
    order : np.ndarray
        ``order[position]`` is the case index that landed at ``position``.
    """
    order = np.argsort(values, kind="stable")
    return values[order], order


def flag_ties(
    sorted_values: np.ndarray, tolerance: float = config.TIE_TOLERANCE
) -> npt.NDArray[np.bool_]:
    """Mark adjacent sorted values that are equal within ``tolerance``.

    ``tied[i]`` compares ``sorted_values[i]`` with ``sorted_values[i + 1]``
    using ``diff < tolerance * (1 + |a| + |b|)``. The last flag is always False.
    """
    tied = np.zeros(sorted_values.shape[0], dtype=bool)
    if sorted_values.shape[0] < 2:
        return tied
    lower = sorted_values[:-1]
    upper = sorted_values[1:]
    scale = tolerance * (1.0 + np.abs(lower) + np.abs(upper))
    tied[:-1] = (upper - lower) < scale
    return tied


def rank_transform(
    values: Sequence[float] | np.ndarray,
    respect_ties: bool = False,
    tolerance: float = config.TIE_TOLERANCE,
    name: str = "values",
) -> RankedVariable:
    """Convert raw values to dense ranks and (optionally) tie flags.

    Parameters
    ----------
    values : array-like
        Shape (n,), finite reals.
    respect_ties : bool, default=False
        Compute tie flags so that tied values are never separated.
    tolerance : float
        Relative tie tolerance.
    name : str
        Label for error messages.

    Returns
    -------
    RankedVariable

    Raises
    ------
    InvalidInputError
        If any value is NaN or infinite.
    """
    data = as_finite_vector(values, name)
    n = data.shape[0]

    sorted_values, order = stable_sort_with_index(data)
    ranks = np.empty(n, dtype=np.int64)
    ranks[order] = np.arange(n, dtype=np.int64)

    tied = flag_ties(sorted_values, tolerance) if respect_ties else None
    return RankedVariable(ranks=ranks, tied=tied)


def count_tie_groups(tied: Optional[np.ndarray]) -> int:
    """Number of maximal runs of tied ranks (groups of two or more values)."""
    if tied is None or tied.size == 0:
        return 0
    flags = np.asarray(tied, dtype=bool)
    # A group starts wherever a True flag follows a False one.
    starts = flags & ~np.concatenate(([False], flags[:-1]))
    return int(starts.sum())


__all__ = [
    "RankedVariable",
    "stable_sort_with_index",
    "flag_ties",
    "rank_transform",
    "count_tie_groups",
]
