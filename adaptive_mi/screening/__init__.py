"""Candidate screening by mutual information with FDR control."""

from .candidate_screening import screen_candidates
from .multiple_testing import benjamini_hochberg_correction

__all__ = [
    "screen_candidates",
    "benjamini_hochberg_correction",
]
