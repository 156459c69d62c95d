"""Tests for the Yates-corrected uniformity tests on rank rectangles."""

from __future__ import annotations

import numpy as np
import pytest

from adaptive_mi.information_metrics.mutual_information.chi_square import (
    chi_criterion_from_alpha,
    chi_square_p_value,
    four_by_four_test,
    grid_cell_index,
    grid_cuts,
    two_by_two_test,
    yates_chi_square,
)


class TestYatesStatistic:
    def test_known_value(self):
        assert yates_chi_square([4, 0, 0, 4], [2, 2, 2, 2]) == pytest.approx(4.5)

    def test_exact_match_still_pays_continuity_penalty(self):
        # (|a - e| - 0.5)^2 is 0.25 even when a == e.
        assert yates_chi_square([5, 5], [5.0, 5.0]) == pytest.approx(0.1)

    def test_non_positive_expected_is_nan(self):
        assert np.isnan(yates_chi_square([1, 2], [0.0, 3.0]))


class TestTwoByTwo:
    def test_reversed_eight_points_is_not_split(self):
        # Anti-diagonal of 8 cases: 4 + 4 in the off-diagonal quadrants.
        result = two_by_two_test(
            np.array([0, 4, 4, 0]), 8, 8, 8, 4, 4, criterion=6.0
        )
        assert result.statistic == pytest.approx(4.5)
        assert not result.reject
        assert not result.degenerate

    def test_sixteen_point_diagonal_is_split(self):
        result = two_by_two_test(
            np.array([8, 0, 0, 8]), 16, 16, 16, 8, 8, criterion=6.0
        )
        assert result.statistic == pytest.approx(12.25)
        assert result.reject

    def test_uneven_cut_uses_extent_fractions(self):
        # 3 of 10 ranks low on x, 5 of 10 low on y, 20 cases.
        actual = np.array([3, 3, 7, 7])
        result = two_by_two_test(actual, 20, 10, 10, 3, 5, criterion=6.0)
        expected = np.array([3.0, 3.0, 7.0, 7.0])
        assert result.statistic == pytest.approx(yates_chi_square(actual, expected))

    def test_zero_extent_side_is_degenerate_not_error(self):
        result = two_by_two_test(np.array([3, 0, 0, 0]), 3, 1, 3, 1, 1, criterion=6.0)
        assert result.degenerate
        assert not result.reject
        assert np.isnan(result.statistic)


class TestGrid:
    def test_even_extent_cuts(self):
        cuts, fractions = grid_cuts(0, 31)
        np.testing.assert_array_equal(cuts, [7, 15, 23, 31])
        np.testing.assert_allclose(fractions, [0.25, 0.25, 0.25, 0.25])

    def test_uneven_extent_cuts(self):
        cuts, fractions = grid_cuts(10, 42)
        np.testing.assert_array_equal(cuts, [17, 25, 33, 42])
        np.testing.assert_allclose(fractions, np.array([8, 8, 8, 9]) / 33.0)
        assert fractions.sum() == pytest.approx(1.0)

    def test_cell_index_uses_first_cut_at_or_above(self):
        cuts, _ = grid_cuts(0, 31)
        ranks = np.array([0, 7, 8, 15, 16, 24, 31])
        np.testing.assert_array_equal(grid_cell_index(ranks, cuts), [0, 0, 1, 1, 2, 3, 3])

    def test_diagonal_rectangle_rejected(self):
        ranks = np.arange(32)
        result = four_by_four_test(ranks, ranks, (0, 31), (0, 31), criterion=18.0)
        # Four cells of 8 against 2 expected, twelve empty cells.
        assert result.statistic == pytest.approx(4 * 5.5**2 / 2 + 12 * 1.5**2 / 2)
        assert result.reject

    def test_balanced_rectangle_not_rejected(self):
        # Two cases per 4x4 cell.
        cells = [(ix, iy, k) for ix in range(4) for iy in range(4) for k in range(2)]
        x = np.array([8 * ix + 2 * iy + k for ix, iy, k in cells])
        y = np.array([8 * iy + 2 * ix + k for ix, iy, k in cells])
        result = four_by_four_test(x, y, (0, 31), (0, 31), criterion=18.0)
        assert result.statistic == pytest.approx(16 * 0.25 / 2)
        assert not result.reject


def test_criterion_and_p_value_are_inverse():
    crit = chi_criterion_from_alpha(0.05)
    assert crit == pytest.approx(3.841458820694124)
    assert chi_square_p_value(crit) == pytest.approx(0.05)
    # The default criterion sits between the 1% and 2% levels.
    assert 0.01 < chi_square_p_value(6.0) < 0.02
