"""Adaptive rank-space partitioning estimator of mutual information.

Implements the method of Darbellay and Vajda (IEEE Transactions on Information
Theory 45(4), 1999). Both variables are replaced by ranks, so the marginals are
uniform on ``0..n-1`` and the estimate depends only on how the cases are
arranged in the rank plane. Starting from the full plane, each rectangle is
tested for local independence with a Yates-corrected chi-square statistic on a
2x2 split (plus a stricter 4x4 check for large rectangles). Rectangles that
look uniform become leaves and contribute

    p(x,y) · log( p(x,y) / (p(x)·p(y)) )

to the estimate; the others are split into quadrants and processed in turn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np

from adaptive_mi import config
from adaptive_mi.core_utils.data_utils import (
    as_finite_vector,
    check_matching_length,
    check_positive,
    check_sample_size,
)
from adaptive_mi.core_utils.exceptions import (
    EstimationCancelledError,
    InvalidInputError,
)
from adaptive_mi.information_metrics.ranks.rank_transform import (
    RankedVariable,
    count_tie_groups,
    rank_transform,
)

from .chi_square import four_by_four_test, two_by_two_test
from .partition import (
    Rectangle,
    RectangleStack,
    cell_contribution,
    choose_split_point,
    default_stack_capacity,
    quadrant_codes,
    regroup_span,
)

logger = logging.getLogger(__name__)


class CancelSignal(Protocol):
    """Anything with an ``is_set()`` method, e.g. ``threading.Event``."""

    def is_set(self) -> bool: ...


@dataclass(frozen=True)
class AdaptivePartitionSettings:
    """Tuning constants of the partition.

    Attributes
    ----------
    chi_crit : float
        Rejection threshold of the 2x2 test.
    refine_multiplier : float
        The 4x4 test rejects when its statistic exceeds
        ``refine_multiplier * chi_crit``.
    refine_min_extent : int
        The 4x4 test runs only when both rank extents (stop - start) exceed
        this value.
    min_cases_to_recurse : int
        Quadrants with fewer cases contribute immediately instead of being
        tested again.
    max_pending : int or None
        Capacity of the pending-rectangle stack; None uses
        ``STACK_CAPACITY_FACTOR * n + 1``.
    log_floor : float
        Floor for probability products and ratios inside the logarithm.
    """

    chi_crit: float = config.CHI_CRITERION
    refine_multiplier: float = config.REFINED_CHI_MULTIPLIER
    refine_min_extent: int = config.REFINE_MIN_EXTENT
    min_cases_to_recurse: int = config.MIN_CASES_TO_RECURSE
    max_pending: Optional[int] = None
    log_floor: float = config.LOG_FLOOR

    def validated(self) -> "AdaptivePartitionSettings":
        """Return self after checking every field, raising InvalidInputError."""
        check_positive(self.chi_crit, "chi_crit")
        check_positive(self.refine_multiplier, "refine_multiplier")
        check_positive(self.log_floor, "log_floor")
        if int(self.refine_min_extent) < 0:
            raise InvalidInputError(
                f"refine_min_extent must be non-negative; got {self.refine_min_extent}."
            )
        if int(self.min_cases_to_recurse) < 1:
            raise InvalidInputError(
                f"min_cases_to_recurse must be at least 1; got {self.min_cases_to_recurse}."
            )
        if self.max_pending is not None and int(self.max_pending) < 1:
            raise InvalidInputError(
                f"max_pending must be at least 1; got {self.max_pending}."
            )
        return self


@dataclass(frozen=True)
class LeafCell:
    """A rectangle accepted as locally uniform, and its contribution."""

    x_start: int
    x_stop: int
    y_start: int
    y_stop: int
    n_cases: int
    contribution: float


@dataclass(frozen=True)
class PartitionResult:
    """Full outcome of one partition of the rank plane.

    Attributes
    ----------
    mutual_information : float
        Sum of leaf contributions in nats.
    leaves : tuple of LeafCell
        Leaves in the order they were added to the sum.
    split_points : tuple of (int, int)
        ``(x_cut, y_cut)`` of every split, in processing order.
    n_splits : int
        Number of rectangles that were split.
    n_refined_splits : int
        Splits decided by the 4x4 check after the 2x2 test passed.
    max_pending : int
        Peak size of the pending-rectangle stack.
    """

    mutual_information: float
    leaves: Tuple[LeafCell, ...]
    split_points: Tuple[Tuple[int, int], ...]
    n_splits: int
    n_refined_splits: int
    max_pending: int

    @property
    def n_leaves(self) -> int:
        return len(self.leaves)


class MutualInformationAdaptive:
    """Mutual information between a fixed 'dependent' variable and candidates.

    The dependent variable is ranked once at construction; every call to
    :meth:`mut_inf` ranks a new 'independent' variable and partitions the rank
    plane. Per-call state (ranks of the candidate, permutation array, stack,
    accumulator) lives inside the call, so one instance can serve concurrent
    calls.

    Parameters
    ----------
    dep_values : array-like
        Shape (n,), finite values of the dependent variable.
    respect_ties : bool, default=False
        Never cut between tied dependent values.
    chi_crit : float, default=config.CHI_CRITERION
        Chi-square rejection threshold of the 2x2 split test.
    n : int, optional
        Expected number of cases; must match ``len(dep_values)`` when given.
    settings : AdaptivePartitionSettings, optional
        Remaining tuning constants. ``chi_crit`` overrides the value inside.

    Raises
    ------
    InvalidInputError
        Too few cases, mismatched ``n``, non-finite values or a non-positive
        criterion.
    """

    def __init__(
        self,
        dep_values: Sequence[float] | np.ndarray,
        respect_ties: bool = False,
        chi_crit: float = config.CHI_CRITERION,
        *,
        n: Optional[int] = None,
        settings: Optional[AdaptivePartitionSettings] = None,
    ) -> None:
        dep = as_finite_vector(dep_values, "dep_values")
        if n is not None:
            check_matching_length(dep, int(n), "dep_values")
        self.n = check_sample_size(dep.shape[0], config.MIN_CASES, "dep_values")

        base = settings if settings is not None else AdaptivePartitionSettings()
        self.settings = replace(base, chi_crit=check_positive(chi_crit, "chi_crit")).validated()

        self.respect_ties = bool(respect_ties)
        self._dep: RankedVariable = rank_transform(
            dep, respect_ties=self.respect_ties, name="dep_values"
        )

    @property
    def chi_crit(self) -> float:
        return self.settings.chi_crit

    @property
    def dependent(self) -> RankedVariable:
        """Ranks and tie flags of the dependent variable (read-only)."""
        return self._dep

    def mut_inf(
        self,
        x_values: Sequence[float] | np.ndarray,
        respect_ties: bool = False,
        *,
        cancel_event: Optional[CancelSignal] = None,
    ) -> float:
        """Estimate the mutual information (nats) between ``x_values`` and the
        dependent variable.

        Small negative values can occur near independence because of
        floating-point rounding; they are not errors.
        """
        return self.partition(
            x_values, respect_ties, cancel_event=cancel_event
        ).mutual_information

    def partition(
        self,
        x_values: Sequence[float] | np.ndarray,
        respect_ties: bool = False,
        *,
        cancel_event: Optional[CancelSignal] = None,
    ) -> PartitionResult:
        """Partition the rank plane and return the estimate with diagnostics.

        Raises
        ------
        InvalidInputError
            Wrong length or non-finite values in ``x_values``.
        PartitionCapacityError
            The pending stack outgrew ``settings.max_pending``.
        EstimationCancelledError
            ``cancel_event`` was set between two stack pops.
        """
        x_data = as_finite_vector(x_values, "x_values")
        check_matching_length(x_data, self.n, "x_values")
        x_ranked = rank_transform(x_data, respect_ties=respect_ties, name="x_values")
        return self._run(x_ranked, cancel_event)

    def _run(
        self, x_ranked: RankedVariable, cancel_event: Optional[CancelSignal]
    ) -> PartitionResult:
        settings = self.settings
        n = self.n
        x = x_ranked.ranks
        x_tied = x_ranked.tied
        y = self._dep.ranks
        y_tied = self._dep.tied

        capacity = (
            int(settings.max_pending)
            if settings.max_pending is not None
            else default_stack_capacity(n)
        )
        refine_criterion = settings.refine_multiplier * settings.chi_crit

        indices = np.arange(n, dtype=np.int64)
        stack = RectangleStack(capacity)
        stack.push(Rectangle(0, n - 1, 0, n - 1, 0, n - 1))

        mutual_information = 0.0
        leaves: List[LeafCell] = []
        split_points: List[Tuple[int, int]] = []
        n_refined = 0

        def add_leaf(x_start: int, x_stop: int, y_start: int, y_stop: int, count: int) -> None:
            nonlocal mutual_information
            term = cell_contribution(
                count,
                x_stop - x_start + 1,
                y_stop - y_start + 1,
                n,
                floor=settings.log_floor,
            )
            mutual_information += term
            leaves.append(LeafCell(x_start, x_stop, y_start, y_stop, count, term))

        while stack:
            if cancel_event is not None and cancel_event.is_set():
                raise EstimationCancelledError(
                    "Mutual information estimate cancelled by caller."
                )

            rect = stack.pop()
            x_cut = choose_split_point(rect.x_start, rect.x_stop, x_tied)
            y_cut = choose_split_point(rect.y_start, rect.y_stop, y_tied)

            if x_cut is None or y_cut is None:
                add_leaf(rect.x_start, rect.x_stop, rect.y_start, rect.y_stop, rect.n_cases)
                continue

            span = indices[rect.data_start : rect.data_stop + 1]
            span_x = x[span]
            span_y = y[span]
            codes = quadrant_codes(span_x, span_y, x_cut, y_cut)
            actual = np.bincount(codes, minlength=4)

            coarse = two_by_two_test(
                actual,
                rect.n_cases,
                rect.x_extent,
                rect.y_extent,
                x_cut - rect.x_start + 1,
                y_cut - rect.y_start + 1,
                settings.chi_crit,
            )
            splittable = coarse.reject

            # The four quadrants can match their expected counts by accident
            # even when the rectangle is not uniform; large rectangles get a
            # second look on a finer grid.
            if (
                not splittable
                and rect.x_stop - rect.x_start > settings.refine_min_extent
                and rect.y_stop - rect.y_start > settings.refine_min_extent
            ):
                fine = four_by_four_test(
                    span_x,
                    span_y,
                    (rect.x_start, rect.x_stop),
                    (rect.y_start, rect.y_stop),
                    refine_criterion,
                )
                if fine.reject:
                    splittable = True
                    n_refined += 1

            if not splittable:
                add_leaf(rect.x_start, rect.x_stop, rect.y_start, rect.y_stop, rect.n_cases)
                continue

            split_points.append((x_cut, y_cut))
            counts = regroup_span(indices, rect.data_start, rect.data_stop, codes)
            position = rect.data_start
            for quadrant, bounds in enumerate(rect.quadrant_bounds(x_cut, y_cut)):
                count = int(counts[quadrant])
                if count >= settings.min_cases_to_recurse:
                    stack.push(Rectangle(*bounds, position, position + count - 1))
                elif count > 0:
                    add_leaf(*bounds, count)
                position += count

        logger.debug(
            "Adaptive MI over %d cases: %.6g nats, %d leaves, %d splits "
            "(%d from 4x4 check), peak stack %d, tie groups x=%d y=%d.",
            n,
            mutual_information,
            len(leaves),
            len(split_points),
            n_refined,
            stack.peak,
            count_tie_groups(x_tied),
            count_tie_groups(y_tied),
        )
        return PartitionResult(
            mutual_information=mutual_information,
            leaves=tuple(leaves),
            split_points=tuple(split_points),
            n_splits=len(split_points),
            n_refined_splits=n_refined,
            max_pending=stack.peak,
        )


def adaptive_mutual_information(
    dep_values: Sequence[float] | np.ndarray,
    x_values: Sequence[float] | np.ndarray,
    respect_ties: bool = False,
    chi_crit: float = config.CHI_CRITERION,
) -> float:
    """One-shot convenience wrapper around :class:`MutualInformationAdaptive`."""
    estimator = MutualInformationAdaptive(dep_values, respect_ties, chi_crit)
    return estimator.mut_inf(x_values, respect_ties)


__all__ = [
    "AdaptivePartitionSettings",
    "LeafCell",
    "PartitionResult",
    "MutualInformationAdaptive",
    "adaptive_mutual_information",
]
