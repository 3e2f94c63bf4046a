"""
Tests for the grid, sub-range and stencil assembly.

Validates:
    - Grid and SubRange validation at construction
    - Fixed row width and in-range column indices
    - Slot layout of boundary rows (zero-weight self references, wrap)
    - Centre perturbation and symmetry of the operator
"""

import numpy as np
import pytest

from stencil_cg.exceptions import ValidationError
from stencil_cg.grid import Grid
from stencil_cg.stencil import CENTER_SLOT, OFF_DIAGONAL, ROWSIZE, assemble


# ═══════════════════════════════════════════════════════════════════════
# Grid / SubRange
# ═══════════════════════════════════════════════════════════════════════


class TestGrid:

    def test_vec_size(self):
        assert Grid(16).vec_size == 256

    def test_linear_index_is_row_major(self):
        grid = Grid(8)
        assert grid.index(3, 2) == 3 + 2 * 8

    def test_center(self):
        assert Grid(16).center == 8 + 8 * 16

    @pytest.mark.parametrize("n", [0, -4])
    def test_non_positive_size_rejected(self, n):
        with pytest.raises(ValidationError):
            Grid(n)

    def test_non_integer_size_rejected(self):
        with pytest.raises(ValidationError):
            Grid(2.5)

    def test_numpy_integer_accepted(self):
        assert Grid(np.int64(4)).n == 4

    def test_index_overflow_rejected(self):
        with pytest.raises(ValidationError):
            Grid(20000)


class TestSubRange:

    def test_full_range(self):
        rng = Grid(4).full_range()
        assert (rng.offset, rng.length, rng.stop) == (0, 16, 16)

    def test_default_length_runs_to_the_end(self):
        rng = Grid(4).subrange(5)
        assert rng.length == 11

    def test_slots(self):
        rng = Grid(4).subrange(2, 3)
        assert rng.slots() == (2 * ROWSIZE, 3 * ROWSIZE)

    @pytest.mark.parametrize("offset,length", [(-1, 4), (0, 0), (10, 7), (16, 1)])
    def test_invalid_ranges_rejected(self, offset, length):
        with pytest.raises(ValidationError):
            Grid(4).subrange(offset, length)


# ═══════════════════════════════════════════════════════════════════════
# Assembly
# ═══════════════════════════════════════════════════════════════════════


class TestAssemble:

    @pytest.mark.parametrize("n", [4, 5, 16, 33])
    def test_every_row_has_rowsize_slots(self, n):
        matrix = assemble(n)
        assert matrix.values.shape == (n * n * ROWSIZE,)
        assert matrix.columns.shape == (n * n * ROWSIZE,)

    @pytest.mark.parametrize("n", [4, 5, 16, 33])
    def test_columns_in_range(self, n):
        matrix = assemble(n)
        assert matrix.columns.min() >= 0
        assert matrix.columns.max() < n * n

    def test_dtypes(self, matrix16):
        assert matrix16.values.dtype == np.float64
        assert matrix16.columns.dtype == np.int32

    def test_first_row_layout(self, matrix16):
        n = 16
        cols = matrix16.columns[:ROWSIZE]
        vals = matrix16.values[:ROWSIZE]
        # up, up, left, left fall outside: zero-weight self references
        np.testing.assert_array_equal(cols, [0, 0, 0, 0, 0, 1, 2, n, 2 * n])
        np.testing.assert_array_equal(vals[:4], 0.0)
        assert vals[CENTER_SLOT] == 0.95
        np.testing.assert_array_equal(vals[5:], OFF_DIAGONAL)

    def test_off_diagonal_weight(self):
        assert OFF_DIAGONAL == pytest.approx(-0.95 / 8)

    def test_horizontal_neighbours_wrap_to_adjacent_row(self, matrix16):
        n = 16
        row = n  # cell (0, 1)
        cols = matrix16.columns[row * ROWSIZE:(row + 1) * ROWSIZE]
        vals = matrix16.values[row * ROWSIZE:(row + 1) * ROWSIZE]
        assert cols[2] == n - 2
        assert cols[3] == n - 1
        assert vals[2] == OFF_DIAGONAL

    def test_last_row_layout(self, matrix16):
        last = 16 * 16 - 1
        cols = matrix16.columns[last * ROWSIZE:]
        vals = matrix16.values[last * ROWSIZE:]
        np.testing.assert_array_equal(cols[5:], last)
        np.testing.assert_array_equal(vals[5:], 0.0)

    def test_center_diagonal_perturbed(self, matrix16):
        diagonal = matrix16.diagonal()
        center = matrix16.grid.center
        assert diagonal[center] == pytest.approx(0.95 * 1.001)
        others = np.delete(diagonal, center)
        np.testing.assert_array_equal(others, 0.95)

    def test_operator_is_symmetric(self, matrix16):
        dense = matrix16.to_dense()
        np.testing.assert_allclose(dense, dense.T)

    def test_operator_is_positive_definite(self, matrix16):
        eigenvalues = np.linalg.eigvalsh(matrix16.to_dense())
        assert eigenvalues.min() > 0.0

    def test_matrix_is_read_only(self, matrix16):
        with pytest.raises(ValueError):
            matrix16.values[0] = 1.0

    def test_accepts_grid(self):
        matrix = assemble(Grid(4))
        assert matrix.n == 4

    def test_column_span(self, matrix16):
        grid = matrix16.grid
        assert matrix16.column_span(grid.full_range()) == (0, 256)
        assert matrix16.column_span(grid.subrange(100, 20)) == (68, 84)
        assert matrix16.column_span(grid.subrange(240, 16)) == (208, 48)

    def test_column_span_covers_referenced_columns(self, matrix16):
        rng = matrix16.grid.subrange(70, 50)
        start, length = matrix16.column_span(rng)
        cols = matrix16.columns[rng.offset * ROWSIZE:rng.stop * ROWSIZE]
        assert cols.min() >= start
        assert cols.max() < start + length
