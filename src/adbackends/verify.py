"""Validity checks for colorings produced by any coloring algorithm."""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from adbackends.pattern import as_pattern


class VerificationError(AssertionError):
    """Raised when a coloring is not a structurally orthogonal partition.

    A coloring algorithm returning such a coloring is broken:
    compressed evaluation with it would mix up derivative entries.
    """


def check_column_coloring(M: Any, colors: ArrayLike) -> None:
    """Check that no row of ``M`` has two nonzero columns of the same color.

    Raises:
        VerificationError: If ``colors`` is not a valid column coloring of ``M``.
    """
    sparsity = as_pattern(M)
    colors = _check_colors(colors, sparsity.n, "column")
    for i, cols_in_row in sparsity.row_to_cols.items():
        _check_distinct(colors[cols_in_row], f"row {i}", "columns")


def check_row_coloring(M: Any, colors: ArrayLike) -> None:
    """Check that no column of ``M`` has two nonzero rows of the same color.

    Raises:
        VerificationError: If ``colors`` is not a valid row coloring of ``M``.
    """
    sparsity = as_pattern(M)
    colors = _check_colors(colors, sparsity.m, "row")
    for j, rows_in_col in sparsity.col_to_rows.items():
        _check_distinct(colors[rows_in_col], f"column {j}", "rows")


def check_symmetric_coloring(M: Any, colors: ArrayLike) -> None:
    """Check that every nonzero of the square ``M`` can be recovered.

    For every nonzero ``M[i, j]``, either column ``j`` is the only column of its color
    in row ``i``, or column ``i`` is the only column of its color in row ``j``.

    Raises:
        VerificationError: If ``M`` is not square
            or ``colors`` is not a valid symmetric coloring of ``M``.
    """
    sparsity = as_pattern(M)
    if not sparsity.is_square:
        msg = (
            f"Symmetric coloring requires a square matrix, got shape {sparsity.shape}"
        )
        raise VerificationError(msg)
    colors = _check_colors(colors, sparsity.n, "symmetric")
    row_to_cols = sparsity.row_to_cols
    for i, j in zip(sparsity.rows, sparsity.cols, strict=True):
        i, j = int(i), int(j)
        if _unique_in_row(row_to_cols, colors, row=i, col=j):
            continue
        if _unique_in_row(row_to_cols, colors, row=j, col=i):
            continue
        msg = (
            f"Entry ({i}, {j}) cannot be recovered: "
            f"color {colors[j]} is shared in row {i} "
            f"and color {colors[i]} is shared in row {j}"
        )
        raise VerificationError(msg)


def is_valid_column_coloring(M: Any, colors: ArrayLike) -> bool:
    """Whether ``colors`` is a valid column coloring of ``M``."""
    return _passes(check_column_coloring, M, colors)


def is_valid_row_coloring(M: Any, colors: ArrayLike) -> bool:
    """Whether ``colors`` is a valid row coloring of ``M``."""
    return _passes(check_row_coloring, M, colors)


def is_valid_symmetric_coloring(M: Any, colors: ArrayLike) -> bool:
    """Whether ``colors`` is a valid symmetric coloring of ``M``."""
    return _passes(check_symmetric_coloring, M, colors)


def _passes(check, M: Any, colors: ArrayLike) -> bool:
    try:
        check(M, colors)
    except VerificationError:
        return False
    return True


def _check_colors(colors: ArrayLike, expected_length: int, kind: str) -> np.ndarray:
    colors = np.asarray(colors)
    if colors.ndim != 1 or len(colors) != expected_length:
        msg = (
            f"{kind} coloring must have length {expected_length}, got shape {colors.shape}"
        )
        raise VerificationError(msg)
    if len(colors) > 0:
        if not np.issubdtype(colors.dtype, np.integer):
            msg = f"Colors must be integers, got dtype {colors.dtype}"
            raise VerificationError(msg)
        if colors.min() < 1:
            msg = "Colors must be positive integers"
            raise VerificationError(msg)
    return colors


def _check_distinct(colors_in_line: np.ndarray, where: str, what: str) -> None:
    if len(colors_in_line) != len(set(colors_in_line.tolist())):
        msg = f"Two {what} with nonzeros in {where} share a color"
        raise VerificationError(msg)


def _unique_in_row(
    row_to_cols: dict[int, list[int]], colors: np.ndarray, *, row: int, col: int
) -> bool:
    """Whether ``col`` is the only column of its color with a nonzero in ``row``."""
    return all(
        other == col or colors[other] != colors[col] for other in row_to_cols.get(row, [])
    )

