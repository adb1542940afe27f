"""Tests for SparsityPattern data structure."""

import jax.numpy as jnp
import numpy as np
import pytest
import scipy.sparse as ssparse
from jax.experimental.sparse import BCOO

from adbackends import ShapeError, SparsityPattern, as_pattern


class TestValidation:
    """Test input validation."""

    @pytest.mark.pattern
    def test_mismatched_rows_cols_raises(self):
        """rows and cols with different lengths raise ValueError."""
        with pytest.raises(ValueError, match="same length"):
            SparsityPattern.from_coordinates([0, 1], [0], (2, 2))

    @pytest.mark.pattern
    @pytest.mark.parametrize(
        ("rows", "cols"), [([2], [0]), ([0], [3]), ([-1], [0])]
    )
    def test_out_of_bounds_raises(self, rows, cols):
        """Coordinates outside the shape raise ShapeError."""
        with pytest.raises(ShapeError, match="out of bounds"):
            SparsityPattern.from_coordinates(rows, cols, (2, 3))

    @pytest.mark.pattern
    def test_non_2d_dense_raises(self):
        with pytest.raises(ShapeError, match="2D"):
            SparsityPattern.from_dense(np.ones(3))


class TestConstruction:
    """Test SparsityPattern construction methods."""

    @pytest.mark.pattern
    def test_from_coordinates(self):
        """Basic construction from row/col arrays."""
        pattern = SparsityPattern.from_coordinates([0, 0, 1, 2], [0, 1, 1, 2], (3, 3))

        assert pattern.shape == (3, 3)
        assert pattern.nnz == 4
        assert pattern.m == 3
        assert pattern.n == 3
        np.testing.assert_array_equal(pattern.rows, [0, 0, 1, 2])
        np.testing.assert_array_equal(pattern.cols, [0, 1, 1, 2])

    @pytest.mark.pattern
    def test_coordinates_are_sorted_and_deduplicated(self):
        pattern = SparsityPattern.from_coordinates([2, 0, 2, 0], [1, 1, 1, 0], (3, 3))

        assert pattern.nnz == 3
        np.testing.assert_array_equal(pattern.rows, [0, 0, 2])
        np.testing.assert_array_equal(pattern.cols, [0, 1, 1])

    @pytest.mark.pattern
    def test_coordinates_are_copied(self):
        """The pattern does not alias or freeze the caller's arrays."""
        rows = np.array([0, 1], dtype=np.int32)
        pattern = SparsityPattern.from_coordinates(rows, [0, 1], (2, 2))

        rows[0] = 1
        assert rows.flags.writeable
        assert pattern.rows[0] == 0
        assert not pattern.rows.flags.writeable

    @pytest.mark.pattern
    def test_from_coordinates_empty(self):
        """Construction with no nonzeros."""
        pattern = SparsityPattern.from_coordinates([], [], (3, 4))

        assert pattern.shape == (3, 4)
        assert pattern.nnz == 0

    @pytest.mark.pattern
    def test_from_dense(self):
        dense = np.array([[1, 0, 1], [0, 1, 0], [1, 1, 0]])
        pattern = SparsityPattern.from_dense(dense)

        assert pattern.shape == (3, 3)
        assert pattern.nnz == 5
        np.testing.assert_array_equal(pattern.todense(), dense != 0)

    @pytest.mark.pattern
    def test_from_bcoo(self):
        data = jnp.array([1, 1, 1])
        indices = jnp.array([[0, 0], [1, 1], [2, 2]])
        bcoo = BCOO((data, indices), shape=(3, 3))

        pattern = SparsityPattern.from_bcoo(bcoo)

        assert pattern.shape == (3, 3)
        np.testing.assert_array_equal(pattern.todense(), np.eye(3, dtype=bool))

    @pytest.mark.pattern
    def test_from_bcoo_empty(self):
        bcoo = BCOO((jnp.array([]), jnp.zeros((0, 2), dtype=jnp.int32)), shape=(3, 4))

        pattern = SparsityPattern.from_bcoo(bcoo)

        assert pattern.shape == (3, 4)
        assert pattern.nnz == 0

    @pytest.mark.pattern
    def test_from_scipy_keeps_explicit_zeros(self):
        """A stored zero still marks a structural entry."""
        matrix = ssparse.coo_matrix(([1.0, 0.0, 2.0], ([0, 1, 2], [0, 1, 2])), shape=(3, 3))

        pattern = SparsityPattern.from_scipy(matrix)

        np.testing.assert_array_equal(pattern.rows, [0, 1, 2])
        np.testing.assert_array_equal(pattern.cols, [0, 1, 2])

    @pytest.mark.pattern
    def test_as_pattern_scipy_keeps_explicit_zeros(self):
        matrix = ssparse.csr_matrix(
            (np.array([0.0, 3.0]), np.array([1, 0]), np.array([0, 1, 2])), shape=(2, 2)
        )

        assert as_pattern(matrix) == SparsityPattern.from_coordinates([0, 1], [1, 0], (2, 2))

    @pytest.mark.pattern
    def test_full(self):
        pattern = SparsityPattern.full((2, 3))

        assert pattern.nnz == 6
        assert pattern.todense().all()

    @pytest.mark.pattern
    @pytest.mark.parametrize("shape", [(0, 3), (3, 0), (0, 0)])
    def test_full_empty(self, shape):
        pattern = SparsityPattern.full(shape)

        assert pattern.shape == shape
        assert pattern.nnz == 0


class TestConversion:
    """Test conversion methods."""

    @pytest.mark.pattern
    def test_todense(self):
        pattern = SparsityPattern.from_coordinates([0, 1, 2], [0, 1, 2], (3, 3))
        dense = pattern.todense()

        assert dense.dtype == np.bool_
        np.testing.assert_array_equal(dense, np.eye(3, dtype=bool))

    @pytest.mark.pattern
    def test_to_bcoo(self):
        pattern = SparsityPattern.from_coordinates([0, 1], [1, 0], (2, 3))
        bcoo = pattern.to_bcoo()

        assert bcoo.shape == (2, 3)
        assert bcoo.dtype == jnp.int8
        np.testing.assert_array_equal(bcoo.todense(), pattern.todense().astype(np.int8))

    @pytest.mark.pattern
    def test_full_to_bcoo_todense(self):
        """The BCOO matrix can be densified and round-trips through from_bcoo."""
        pattern = SparsityPattern.full((2, 2))
        bcoo = pattern.to_bcoo()

        np.testing.assert_array_equal(bcoo.todense(), np.ones((2, 2), dtype=np.int8))
        assert SparsityPattern.from_bcoo(bcoo) == pattern

    @pytest.mark.pattern
    def test_to_bcoo_empty(self):
        pattern = SparsityPattern.from_coordinates([], [], (3, 4))
        bcoo = pattern.to_bcoo()

        assert bcoo.shape == (3, 4)
        np.testing.assert_array_equal(bcoo.todense(), np.zeros((3, 4), dtype=bool))

    @pytest.mark.pattern
    def test_to_scipy(self):
        pattern = SparsityPattern.from_coordinates([0, 1], [1, 0], (2, 3))

        np.testing.assert_array_equal(pattern.to_scipy().toarray(), pattern.todense())

    @pytest.mark.pattern
    def test_transpose(self):
        pattern = SparsityPattern.from_coordinates([0, 0, 1], [0, 2, 1], (2, 3))

        assert pattern.T.shape == (3, 2)
        np.testing.assert_array_equal(pattern.T.todense(), pattern.todense().T)
        assert pattern.T.T == pattern


class TestProperties:
    """Test computed properties."""

    @pytest.mark.pattern
    def test_density(self):
        pattern = SparsityPattern.from_coordinates([0, 1], [0, 1], (3, 4))
        assert pattern.density == pytest.approx(2 / 12)

    @pytest.mark.pattern
    def test_density_zero_size(self):
        pattern = SparsityPattern.from_coordinates([], [], (0, 4))
        assert pattern.density == 0.0

    @pytest.mark.pattern
    def test_col_to_rows(self):
        pattern = SparsityPattern.from_coordinates([0, 0, 1, 2], [0, 1, 1, 2], (3, 3))

        assert pattern.col_to_rows == {0: [0], 1: [0, 1], 2: [2]}
        assert pattern.col_to_rows is pattern.col_to_rows

    @pytest.mark.pattern
    def test_row_to_cols(self):
        pattern = SparsityPattern.from_coordinates([0, 0, 1, 2], [0, 1, 1, 2], (3, 3))

        assert pattern.row_to_cols == {0: [0, 1], 1: [1], 2: [2]}

    @pytest.mark.pattern
    def test_is_symmetric(self):
        symmetric = SparsityPattern.from_dense([[1, 1, 0], [1, 1, 1], [0, 1, 1]])
        upper = SparsityPattern.from_dense([[1, 1], [0, 1]])
        rectangular = SparsityPattern.full((2, 3))

        assert symmetric.is_symmetric()
        assert not upper.is_symmetric()
        assert not rectangular.is_symmetric()

    @pytest.mark.pattern
    def test_equality_and_hash(self):
        a = SparsityPattern.from_coordinates([1, 0], [1, 0], (2, 2))
        b = SparsityPattern.from_dense(np.eye(2))
        c = SparsityPattern.from_dense(np.eye(2)[:, ::-1])

        assert a == b
        assert hash(a) == hash(b)
        assert a != c
        assert a != SparsityPattern.from_coordinates([0, 1], [0, 1], (2, 3))


class TestAsPattern:
    """Test coercion of matrix-like inputs."""

    @pytest.mark.pattern
    def test_pattern_passes_through(self):
        pattern = SparsityPattern.full((2, 2))
        assert as_pattern(pattern) is pattern

    @pytest.mark.pattern
    @pytest.mark.parametrize(
        "matrix",
        [
            [[1, 0], [0, 2]],
            np.eye(2),
            jnp.eye(2),
            ssparse.eye(2, format="csr"),
            BCOO.fromdense(jnp.eye(2)),
        ],
    )
    def test_matrix_like(self, matrix):
        pattern = as_pattern(matrix)
        np.testing.assert_array_equal(pattern.todense(), np.eye(2, dtype=bool))

    @pytest.mark.pattern
    def test_non_2d_raises(self):
        with pytest.raises(ShapeError):
            as_pattern(np.zeros((2, 2, 2)))


class TestVisualization:
    """Test visualization (dots for small, braille for large)."""

    @pytest.mark.pattern
    def test_small_matrix_uses_dots(self):
        pattern = SparsityPattern.from_coordinates([0, 1, 2], [0, 1, 2], (3, 3))
        s = str(pattern)

        assert "SparsityPattern" in s
        assert "3×3" in s
        assert "nnz=3" in s
        assert "●" in s
        assert "⋅" in s

    @pytest.mark.pattern
    def test_large_matrix_uses_braille(self):
        pattern = SparsityPattern.from_coordinates(
            list(range(20)), list(range(20)), (20, 50)
        )
        s = str(pattern)

        assert any(0x2800 <= ord(c) < 0x2900 for c in s)
        assert "⎡" in s
        assert "⎦" in s

    @pytest.mark.pattern
    def test_repr_compact(self):
        pattern = SparsityPattern.from_coordinates([0, 1], [0, 1], (10, 20))
        r = repr(pattern)

        assert r == "SparsityPattern(shape=(10, 20), nnz=2)"

    @pytest.mark.pattern
    def test_large_zero_dim_matrix_str(self):
        """n=50 forces the braille path, m=0 makes it empty."""
        pattern = SparsityPattern.from_coordinates([], [], (0, 50))
        s = str(pattern)

        assert "nnz=0" in s
        assert "(empty)" in s

    @pytest.mark.pattern
    def test_single_braille_line_uses_square_brackets(self):
        pattern = SparsityPattern.from_coordinates([0, 1], [0, 49], (2, 50))
        body = str(pattern).split("\n")[1:]

        assert len(body) == 1
        assert body[0].startswith("[")
        assert body[0].endswith("]")
        assert chr(0x2801) in body[0]
