"""Rank transform and tie detection."""

from .rank_transform import (
    RankedVariable,
    count_tie_groups,
    flag_ties,
    rank_transform,
    stable_sort_with_index,
)

__all__ = [
    "RankedVariable",
    "count_tie_groups",
    "flag_ties",
    "rank_transform",
    "stable_sort_with_index",
]
