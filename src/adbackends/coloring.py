"""Coloring algorithms for compressed Jacobian and Hessian evaluation.

A coloring partitions the columns (or rows) of a sparsity pattern
into structurally orthogonal groups.
Same-colored columns can be seeded together in a single JVP,
same-colored rows in a single VJP,
and a symmetric coloring lets one HVP recover several Hessian columns.

Colors are positive integers starting at 1.
Only validity is required; using few colors is a matter of quality.

Greedy algorithms adapted from SparseMatrixColorings.jl (MIT license)
Copyright (c) 2024 Guillaume Dalle, Alexis Montoison, and contributors
https://github.com/gdalle/SparseMatrixColorings.jl
See also: Gebremedhin, Manne & Pothen (2005),
"What Color Is Your Jacobian? Graph Coloring for Computing Derivatives",
https://epubs.siam.org/doi/10.1137/S0036144504444711
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import Any, Literal

import numpy as np
from numpy.typing import NDArray

from adbackends.errors import ShapeError, UnsupportedCapability
from adbackends.pattern import SparsityPattern, as_pattern

logger = getLogger(__name__)

_ORDERS = ("natural", "largest_first")


class ColoringAlgorithm:
    """Supertype for Jacobian and Hessian coloring algorithms.

    Subclasses override some or all of
    `column_coloring`, `row_coloring` and `symmetric_coloring`.
    Operations left alone raise
    [`UnsupportedCapability`][adbackends.UnsupportedCapability].

    Every method accepts a [`SparsityPattern`][adbackends.SparsityPattern],
    a JAX BCOO matrix, a SciPy sparse matrix, or a dense 2D array.
    """

    def column_coloring(self, M: Any) -> NDArray[np.int64]:
        """Structurally orthogonal partition of the columns of ``M``.

        Returns a vector ``c`` of length ``M.shape[1]`` such that
        for every nonzero ``M[i, j]``,
        column ``j`` is the only column of color ``c[j]`` with a nonzero in row ``i``.
        """
        raise UnsupportedCapability(self, "column_coloring")

    def row_coloring(self, M: Any) -> NDArray[np.int64]:
        """Structurally orthogonal partition of the rows of ``M``.

        Returns a vector ``c`` of length ``M.shape[0]`` such that
        for every nonzero ``M[i, j]``,
        row ``i`` is the only row of color ``c[i]`` with a nonzero in column ``j``.
        """
        raise UnsupportedCapability(self, "row_coloring")

    def symmetric_coloring(self, M: Any) -> NDArray[np.int64]:
        """Symmetrically structurally orthogonal partition of a symmetric ``M``.

        Returns a vector ``c`` of length ``M.shape[0] == M.shape[1]`` such that
        for every nonzero ``M[i, j]``, at least one of the following holds:

        - column ``j`` is the only column of color ``c[j]`` with a nonzero in row ``i``;
        - column ``i`` is the only column of color ``c[i]`` with a nonzero in row ``j``.

        Raises:
            ShapeError: If ``M`` is not square.
        """
        raise UnsupportedCapability(self, "symmetric_coloring")


@dataclass(frozen=True)
class NoColoringAlgorithm(ColoringAlgorithm):
    """Trivial coloring giving every column (or row) its own color.

    Always valid, never compresses.
    """

    def column_coloring(self, M: Any) -> NDArray[np.int64]:
        return np.arange(1, as_pattern(M).n + 1)

    def row_coloring(self, M: Any) -> NDArray[np.int64]:
        return np.arange(1, as_pattern(M).m + 1)

    def symmetric_coloring(self, M: Any) -> NDArray[np.int64]:
        sparsity = as_pattern(M)
        _check_square(sparsity)
        return np.arange(1, sparsity.n + 1)


@dataclass(frozen=True)
class GreedyColoringAlgorithm(ColoringAlgorithm):
    """Greedy distance-1 coloring, and greedy star coloring for symmetric matrices.

    Each vertex in turn gets the smallest color not used by its conflicts.
    Symmetric coloring additionally forbids two-colored paths on four vertices,
    which makes every Hessian entry recoverable from the compressed product.

    Attributes:
        order: Vertex order of the greedy loop.
            ``"natural"`` visits vertices by index,
            ``"largest_first"`` by decreasing number of conflicts (ties by index),
            which usually needs fewer colors.
    """

    order: Literal["natural", "largest_first"] = "largest_first"

    def __post_init__(self) -> None:
        if self.order not in _ORDERS:
            msg = f"order must be one of {_ORDERS}, got {self.order!r}"
            raise ValueError(msg)

    def column_coloring(self, M: Any) -> NDArray[np.int64]:
        sparsity = as_pattern(M)
        conflicts = _build_col_conflict_sets(sparsity)
        colors = _greedy_color(sparsity.n, conflicts, self.order)
        _log_coloring("column", sparsity, colors)
        return colors

    def row_coloring(self, M: Any) -> NDArray[np.int64]:
        sparsity = as_pattern(M)
        conflicts = _build_row_conflict_sets(sparsity)
        colors = _greedy_color(sparsity.m, conflicts, self.order)
        _log_coloring("row", sparsity, colors)
        return colors

    def symmetric_coloring(self, M: Any) -> NDArray[np.int64]:
        """Greedy star coloring.

        A distance-1 coloring of the adjacency graph of ``M``
        in which every path on four vertices uses at least three colors.

        Raises:
            ShapeError: If ``M`` is not square or not structurally symmetric.
        """
        sparsity = as_pattern(M)
        _check_square(sparsity)
        if not sparsity.is_symmetric():
            msg = "Symmetric coloring requires a structurally symmetric pattern"
            raise ShapeError(msg)
        colors = _star_color(sparsity, self.order)
        _log_coloring("symmetric", sparsity, colors)
        return colors


# =========================================================================
# Functional API
# =========================================================================


def column_coloring(
    M: Any, algorithm: ColoringAlgorithm | None = None
) -> NDArray[np.int64]:
    """Color the columns of ``M``.

    Defaults to [`NoColoringAlgorithm`][adbackends.NoColoringAlgorithm].
    """
    return _resolve(algorithm).column_coloring(M)


def row_coloring(M: Any, algorithm: ColoringAlgorithm | None = None) -> NDArray[np.int64]:
    """Color the rows of ``M``.

    Defaults to [`NoColoringAlgorithm`][adbackends.NoColoringAlgorithm].
    """
    return _resolve(algorithm).row_coloring(M)


def symmetric_coloring(
    M: Any, algorithm: ColoringAlgorithm | None = None
) -> NDArray[np.int64]:
    """Color the columns of the symmetric matrix ``M``.

    Defaults to [`NoColoringAlgorithm`][adbackends.NoColoringAlgorithm].
    """
    return _resolve(algorithm).symmetric_coloring(M)


# =========================================================================
# Private helpers
# =========================================================================


def _resolve(algorithm: ColoringAlgorithm | None) -> ColoringAlgorithm:
    if algorithm is None:
        return NoColoringAlgorithm()
    if not isinstance(algorithm, ColoringAlgorithm):
        msg = f"Expected a ColoringAlgorithm, got {type(algorithm).__name__}"
        raise TypeError(msg)
    return algorithm


def _check_square(sparsity: SparsityPattern) -> None:
    if not sparsity.is_square:
        msg = (
            f"Symmetric coloring requires a square pattern, got shape {sparsity.shape}"
        )
        raise ShapeError(msg)


def _log_coloring(kind: str, sparsity: SparsityPattern, colors: NDArray) -> None:
    logger.debug(
        "%s coloring of %d×%d pattern: %d colors for %d vertices",
        kind,
        sparsity.m,
        sparsity.n,
        int(colors.max()) if len(colors) else 0,
        len(colors),
    )


def _vertex_order(
    degrees: list[int], order: Literal["natural", "largest_first"]
) -> list[int]:
    if order == "natural":
        return list(range(len(degrees)))
    # sorted is stable, so ties keep index order
    return sorted(range(len(degrees)), key=lambda v: degrees[v], reverse=True)


def _greedy_color(
    num_vertices: int,
    conflicts: list[set[int]],
    order: Literal["natural", "largest_first"],
) -> NDArray[np.int64]:
    """Greedy graph coloring.

    For each vertex in order,
    assign the smallest color not used by any conflicting vertex.

    Args:
        num_vertices: Number of vertices to color
        conflicts: List of sets where conflicts[v] contains
            all vertices that conflict with vertex v
        order: Vertex ordering strategy

    Returns:
        Array of shape (num_vertices,) with colors starting at 1
    """
    colors = np.zeros(num_vertices, dtype=np.int64)

    for v in _vertex_order([len(c) for c in conflicts], order):
        used_colors = {colors[w] for w in conflicts[v] if colors[w] > 0}

        color = 1
        while color in used_colors:
            color += 1
        colors[v] = color

    return colors


def _star_color(
    sparsity: SparsityPattern, order: Literal["natural", "largest_first"]
) -> NDArray[np.int64]:
    """Greedy star coloring (Gebremedhin et al., 2005).

    Returns:
        Array of shape (n,) with colors starting at 1
    """
    n = sparsity.n

    # Adjacency graph, undirected, diagonal excluded
    adj: list[set[int]] = [set() for _ in range(n)]
    for i, j in zip(sparsity.rows, sparsity.cols, strict=True):
        i, j = int(i), int(j)
        if i != j:
            adj[i].add(j)
            adj[j].add(i)

    colors = np.zeros(n, dtype=np.int64)

    for v in _vertex_order([len(a) for a in adj], order):
        # Distance-1 constraint
        forbidden = {colors[w] for w in adj[v] if colors[w] > 0}

        # Star constraint: giving v the color of u, a colored neighbor of the
        # colored neighbor w, must not create a two-colored path on 4 vertices.
        # Either v ends the path (v-w-u-x with x colored like w)
        # or v is inside it (a-v-w-u with a colored like w).
        for w in adj[v]:
            if colors[w] == 0:
                continue
            v_has_twin = any(
                a != w and colors[a] == colors[w] for a in adj[v]
            )
            for u in adj[w]:
                if u == v or colors[u] == 0 or colors[u] in forbidden:
                    continue
                if v_has_twin or any(
                    x not in (w, v) and colors[x] == colors[w] for x in adj[u]
                ):
                    forbidden.add(colors[u])

        color = 1
        while color in forbidden:
            color += 1
        colors[v] = color

    return colors


def _build_row_conflict_sets(sparsity: SparsityPattern) -> list[set[int]]:
    """Rows conflict if they share a nonzero column."""
    conflicts: list[set[int]] = [set() for _ in range(sparsity.m)]

    for rows_in_col in sparsity.col_to_rows.values():
        for i, row_i in enumerate(rows_in_col):
            for row_j in rows_in_col[i + 1 :]:
                conflicts[row_i].add(row_j)
                conflicts[row_j].add(row_i)

    return conflicts


def _build_col_conflict_sets(sparsity: SparsityPattern) -> list[set[int]]:
    """Columns conflict if they share a nonzero row."""
    conflicts: list[set[int]] = [set() for _ in range(sparsity.n)]

    for cols_in_row in sparsity.row_to_cols.values():
        for i, col_i in enumerate(cols_in_row):
            for col_j in cols_in_row[i + 1 :]:
                conflicts[col_i].add(col_j)
                conflicts[col_j].add(col_i)

    return conflicts
