"""Building blocks of the rank-plane partition.

The cases of every live rectangle occupy one contiguous span of a permutation
array of case indices. Splitting a rectangle only rearranges its own span, so
rectangles nest as nested sub-spans and no searching is ever needed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from adaptive_mi import config
from adaptive_mi.core_utils.exceptions import PartitionCapacityError

# Quadrant order used for counts, regrouping and pushes:
# 0 = (low x, low y), 1 = (low x, high y), 2 = (high x, low y), 3 = (high x, high y)
N_QUADRANTS: int = 4


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned region of rank space and the span of cases inside it.

    All bounds are inclusive. ``data_start..data_stop`` indexes the
    permutation array, not the cases themselves.
    """

    x_start: int
    x_stop: int
    y_start: int
    y_stop: int
    data_start: int
    data_stop: int

    @property
    def x_extent(self) -> int:
        return self.x_stop - self.x_start + 1

    @property
    def y_extent(self) -> int:
        return self.y_stop - self.y_start + 1

    @property
    def n_cases(self) -> int:
        return self.data_stop - self.data_start + 1

    def quadrant_bounds(self, x_cut: int, y_cut: int) -> List[tuple[int, int, int, int]]:
        """Rank bounds ``(x_start, x_stop, y_start, y_stop)`` of the four quadrants."""
        low_x = (self.x_start, x_cut)
        high_x = (x_cut + 1, self.x_stop)
        low_y = (self.y_start, y_cut)
        high_y = (y_cut + 1, self.y_stop)
        return [
            (*low_x, *low_y),
            (*low_x, *high_y),
            (*high_x, *low_y),
            (*high_x, *high_y),
        ]


class RectangleStack:
    """LIFO of rectangles awaiting the split/accept decision.

    Backed by a growable list; ``capacity`` turns unexpected growth into a
    :class:`PartitionCapacityError` instead of unbounded memory use.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Stack capacity must be at least 1; got {capacity}.")
        self.capacity = int(capacity)
        self._items: List[Rectangle] = []
        self.peak = 0

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def push(self, rectangle: Rectangle) -> None:
        if len(self._items) >= self.capacity:
            raise PartitionCapacityError(self.capacity, len(self._items) + 1)
        self._items.append(rectangle)
        self.peak = max(self.peak, len(self._items))

    def pop(self) -> Rectangle:
        return self._items.pop()


def default_stack_capacity(n_cases: int) -> int:
    """Capacity that a partition of ``n_cases`` can never exceed."""
    return config.STACK_CAPACITY_FACTOR * int(n_cases) + 1


def choose_split_point(
    start: int, stop: int, tied: Optional[np.ndarray]
) -> Optional[int]:
    """Last rank of the low side of a cut through ``[start, stop]``.

    The cut starts at the midpoint rank. If the midpoint is tied to its upper
    neighbour, the nearest untied rank in ``[start, stop - 1]`` is used instead,
    looking below before above at each distance. Returns None when every rank
    in that range is tied (the axis cannot be split).
    """
    center = (start + stop) // 2
    if tied is None or not tied[center]:
        return center

    offset = 1
    while center - offset >= start:
        if not tied[center - offset]:
            return center - offset
        if center + offset >= stop:
            break
        if not tied[center + offset]:
            return center + offset
        offset += 1
    return None


def quadrant_codes(
    x_ranks: np.ndarray, y_ranks: np.ndarray, x_cut: int, y_cut: int
) -> np.ndarray:
    """Quadrant index (0-3) for each case given its ranks and the cuts."""
    return (x_ranks > x_cut).astype(np.int64) * 2 + (y_ranks > y_cut).astype(np.int64)


def regroup_span(
    indices: np.ndarray, data_start: int, data_stop: int, codes: np.ndarray
) -> np.ndarray:
    """Reorder ``indices[data_start:data_stop + 1]`` into four quadrant runs.

    Cases keep their relative order inside each run. Works on a single scratch
    copy of the span and writes the result back in place.

    Returns
    -------
    np.ndarray
        Shape (4,), number of cases per quadrant.
    """
    scratch = indices[data_start : data_stop + 1].copy()
    counts = np.bincount(codes, minlength=N_QUADRANTS)
    position = data_start
    for quadrant in range(N_QUADRANTS):
        members = scratch[codes == quadrant]
        indices[position : position + members.shape[0]] = members
        position += members.shape[0]
    return counts


def cell_contribution(
    n_cases: int,
    x_extent: int,
    y_extent: int,
    n_total: int,
    floor: float = config.LOG_FLOOR,
) -> float:
    """Mutual-information term of a cell assumed locally uniform.

    Computes ``pxy * log(pxy / (px * py))`` with ``px``, ``py`` the rank-extent
    fractions and ``pxy`` the case fraction. Both the denominator and the ratio
    are floored at ``floor``. Empty cells contribute 0.
    """
    if n_cases <= 0:
        return 0.0
    px = x_extent / float(n_total)
    py = y_extent / float(n_total)
    pxy = n_cases / float(n_total)

    denominator = max(px * py, floor)
    ratio = max(pxy / denominator, floor)
    return pxy * math.log(ratio)


__all__ = [
    "N_QUADRANTS",
    "Rectangle",
    "RectangleStack",
    "default_stack_capacity",
    "choose_split_point",
    "quadrant_codes",
    "regroup_span",
    "cell_contribution",
]
