"""Boolean sparsity patterns shared by detectors and coloring algorithms."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from functools import cached_property
from typing import Any

import jax.numpy as jnp
import numpy as np
import scipy.sparse as ssparse
from jax.experimental.sparse import BCOO
from numpy.typing import NDArray

from adbackends._display import sparsity_repr, sparsity_str
from adbackends.errors import ShapeError


@dataclass(frozen=True, eq=False)
class SparsityPattern:
    """Boolean matrix storing only structural information (no values).

    Entry ``(i, j)`` is present when the corresponding derivative entry
    may be nonzero.
    Patterns are conservative: extra entries are allowed,
    missing ones are not.

    Coordinates are stored in row-major order without duplicates.

    Attributes:
        rows: Row indices of structural nonzeros, shape ``(nnz,)``
        cols: Column indices of structural nonzeros, shape ``(nnz,)``
        shape: Matrix dimensions ``(m, n)``
    """

    rows: NDArray[np.int32]
    cols: NDArray[np.int32]
    shape: tuple[int, int]

    def __post_init__(self) -> None:
        """Validate coordinates and normalize their order."""
        rows = np.array(self.rows, dtype=np.int32).ravel()
        cols = np.array(self.cols, dtype=np.int32).ravel()
        if len(rows) != len(cols):
            msg = f"rows and cols must have same length, got {len(rows)} and {len(cols)}"
            raise ValueError(msg)
        if len(self.shape) != 2 or min(self.shape) < 0:
            msg = f"Expected a 2D shape, got {self.shape}"
            raise ShapeError(msg)
        m, n = int(self.shape[0]), int(self.shape[1])
        if len(rows) > 0:
            if rows.min() < 0 or rows.max() >= m or cols.min() < 0 or cols.max() >= n:
                msg = f"Coordinates out of bounds for shape {(m, n)}"
                raise ShapeError(msg)
            flat = np.unique(rows.astype(np.int64) * n + cols)
            rows = (flat // n).astype(np.int32)
            cols = (flat % n).astype(np.int32)
        rows.setflags(write=False)
        cols.setflags(write=False)
        object.__setattr__(self, "rows", rows)
        object.__setattr__(self, "cols", cols)
        object.__setattr__(self, "shape", (m, n))

    # Properties

    @property
    def nnz(self) -> int:
        """Number of structural nonzeros."""
        return len(self.rows)

    @property
    def m(self) -> int:
        """Number of rows."""
        return self.shape[0]

    @property
    def n(self) -> int:
        """Number of columns."""
        return self.shape[1]

    @property
    def density(self) -> float:
        """Fraction of structural nonzeros."""
        total = self.m * self.n
        return self.nnz / total if total > 0 else 0.0

    @property
    def is_square(self) -> bool:
        return self.m == self.n

    @property
    def T(self) -> SparsityPattern:
        return self.transpose()

    @cached_property
    def col_to_rows(self) -> dict[int, list[int]]:
        """Mapping from column index to the row indices with nonzeros.

        Used to build the row conflict graph.
        """
        result: dict[int, list[int]] = defaultdict(list)
        for row, col in zip(self.rows, self.cols, strict=True):
            result[int(col)].append(int(row))
        return dict(result)

    @cached_property
    def row_to_cols(self) -> dict[int, list[int]]:
        """Mapping from row index to the column indices with nonzeros.

        Used to build the column conflict graph.
        """
        result: dict[int, list[int]] = defaultdict(list)
        for row, col in zip(self.rows, self.cols, strict=True):
            result[int(row)].append(int(col))
        return dict(result)

    def is_symmetric(self) -> bool:
        """Whether the pattern is square and structurally symmetric."""
        return self.is_square and self == self.transpose()

    # Constructors

    @classmethod
    def from_coordinates(
        cls,
        rows: NDArray[np.int32] | list[int],
        cols: NDArray[np.int32] | list[int],
        shape: tuple[int, int],
    ) -> SparsityPattern:
        """Create pattern from row and column index arrays."""
        return cls(rows=np.asarray(rows), cols=np.asarray(cols), shape=shape)

    @classmethod
    def from_dense(cls, dense: Any) -> SparsityPattern:
        """Create pattern from a dense boolean/numeric matrix.

        Nonzero entries indicate pattern positions.
        """
        dense = np.asarray(dense)
        if dense.ndim != 2:
            msg = f"Expected a 2D matrix, got shape {dense.shape}"
            raise ShapeError(msg)
        rows, cols = np.nonzero(dense)
        return cls(rows=rows, cols=cols, shape=(dense.shape[0], dense.shape[1]))

    @classmethod
    def from_bcoo(cls, bcoo: BCOO) -> SparsityPattern:
        """Create pattern from a JAX BCOO sparse matrix."""
        if bcoo.ndim != 2:
            msg = f"Expected a 2D matrix, got shape {bcoo.shape}"
            raise ShapeError(msg)
        indices = np.asarray(bcoo.indices).reshape(-1, 2)
        return cls(rows=indices[:, 0], cols=indices[:, 1], shape=bcoo.shape)

    @classmethod
    def from_scipy(cls, matrix: ssparse.sparray | ssparse.spmatrix) -> SparsityPattern:
        """Create pattern from a SciPy sparse matrix.

        Every stored entry is structural, including explicitly stored zeros.
        """
        coo = ssparse.coo_matrix(matrix)
        return cls(rows=coo.row, cols=coo.col, shape=coo.shape)

    @classmethod
    def full(cls, shape: tuple[int, int]) -> SparsityPattern:
        """All-true pattern, the safe default when nothing is known."""
        m, n = shape
        rows, cols = np.divmod(np.arange(m * n, dtype=np.int64), max(n, 1))
        return cls(rows=rows, cols=cols, shape=(m, n))

    # Conversion methods

    def transpose(self) -> SparsityPattern:
        return type(self)(rows=self.cols, cols=self.rows, shape=(self.n, self.m))

    def todense(self) -> NDArray[np.bool_]:
        """Convert to a dense boolean numpy array."""
        result = np.zeros(self.shape, dtype=np.bool_)
        if self.nnz > 0:
            result[self.rows, self.cols] = True
        return result

    def to_bcoo(self) -> BCOO:
        """Convert to a JAX BCOO sparse matrix with int8 ones as data."""
        if self.nnz == 0:
            indices = jnp.zeros((0, 2), dtype=jnp.int32)
        else:
            indices = jnp.stack([jnp.asarray(self.rows), jnp.asarray(self.cols)], axis=1)
        data = jnp.ones(self.nnz, dtype=jnp.int8)
        return BCOO((data, indices), shape=self.shape)

    def to_scipy(self) -> ssparse.coo_matrix:
        """Convert to a boolean SciPy COO matrix."""
        data = np.ones(self.nnz, dtype=np.bool_)
        return ssparse.coo_matrix((data, (self.rows, self.cols)), shape=self.shape)

    # Comparison

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SparsityPattern):
            return NotImplemented
        return (
            self.shape == other.shape
            and np.array_equal(self.rows, other.rows)
            and np.array_equal(self.cols, other.cols)
        )

    def __hash__(self) -> int:
        return hash((self.shape, self.rows.tobytes(), self.cols.tobytes()))

    # Display

    def __str__(self) -> str:
        """Render sparsity pattern with header and dot/braille grid."""
        return sparsity_str(self)

    def __repr__(self) -> str:
        """Return compact single-line representation."""
        return sparsity_repr(self)


def as_pattern(matrix: Any) -> SparsityPattern:
    """Coerce a matrix into a [`SparsityPattern`][adbackends.SparsityPattern].

    Accepts a pattern, a JAX BCOO matrix, a SciPy sparse matrix,
    or any 2D array-like whose nonzero entries mark the structure.

    Raises:
        ShapeError: If the input is not two-dimensional.
    """
    if isinstance(matrix, SparsityPattern):
        return matrix
    if isinstance(matrix, BCOO):
        return SparsityPattern.from_bcoo(matrix)
    if ssparse.issparse(matrix):
        return SparsityPattern.from_scipy(matrix)
    return SparsityPattern.from_dense(matrix)
