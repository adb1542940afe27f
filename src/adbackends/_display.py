"""Pretty-printing for backend descriptors and sparsity patterns.

Pattern rendering adapted from SparseArrays.jl (MIT license)
Copyright (c) 2018-2024 SparseArrays.jl contributors:
https://github.com/JuliaSparse/SparseArrays.jl/contributors
https://github.com/JuliaSparse/SparseArrays.jl/
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from adbackends.pattern import SparsityPattern

# Thresholds for switching from dot display to braille (Julia-style heuristics)
_SMALL_ROWS = 16
_SMALL_COLS = 40


# Backend descriptor display


def backend_repr(ad: object, *, implied: dict[str, str] | None = None) -> str:
    """Constructor-style representation listing only non-default fields.

    Args:
        ad: A dataclass instance.
        implied: Maps a field name to the name of the field it follows by default.
            Such a field is omitted when it equals the field it follows.
    """
    implied = implied or {}
    parts = []
    for field in dataclasses.fields(ad):
        if not field.repr:
            continue
        value = getattr(ad, field.name)
        if field.name in implied:
            if value == getattr(ad, implied[field.name]):
                continue
        elif field.default is not dataclasses.MISSING and value == field.default:
            continue
        parts.append(f"{field.name}={value!r}")
    return f"{type(ad).__name__}({', '.join(parts)})"


# SparsityPattern display

# Bit of each dot inside a braille cell, indexed by [row % 4, col % 2]
_BRAILLE_DOTS = ((0x01, 0x08), (0x02, 0x10), (0x04, 0x20), (0x40, 0x80))
_BRAILLE_BLANK = 0x2800
_EMPTY = "(empty)"


def sparsity_str(pattern: SparsityPattern) -> str:
    """Header line followed by a picture of the pattern."""
    header = (
        f"SparsityPattern({pattern.m}×{pattern.n}, "
        f"nnz={pattern.nnz}, sparsity={1 - pattern.density:.1%})"
    )
    if pattern.m == 0 or pattern.n == 0:
        body = _EMPTY
    elif pattern.m <= _SMALL_ROWS and pattern.n <= _SMALL_COLS:
        body = _render_dots(pattern)
    else:
        body = _bracket(_render_braille(pattern))
    return f"{header}\n{body}"


def sparsity_repr(pattern: SparsityPattern) -> str:
    """Compact single-line representation."""
    return f"SparsityPattern(shape={pattern.shape}, nnz={pattern.nnz})"


def _render_dots(pattern: SparsityPattern) -> str:
    """One character per entry: ● for structural nonzeros, ⋅ otherwise."""
    symbols = np.where(pattern.todense(), "●", "⋅")
    return "\n".join(" ".join(row) for row in symbols)


def _render_braille(
    pattern: SparsityPattern, max_height: int = 20, max_width: int = 40
) -> list[str]:
    """Downsample the pattern onto braille cells of 4×2 dots.

    Patterns taller than ``4 * max_height`` or wider than ``2 * max_width``
    are scaled linearly onto the available dots.
    """
    dot_rows = min(pattern.m, 4 * max_height)
    dot_cols = min(pattern.n, 2 * max_width)
    si = np.rint(pattern.rows * (dot_rows - 1) / max(pattern.m - 1, 1)).astype(int)
    sj = np.rint(pattern.cols * (dot_cols - 1) / max(pattern.n - 1, 1)).astype(int)

    cells = np.zeros(((dot_rows + 3) // 4, (dot_cols + 1) // 2), dtype=np.int64)
    bits = np.asarray(_BRAILLE_DOTS)[si % 4, sj % 2]
    np.bitwise_or.at(cells, (si // 4, sj // 2), bits)

    return ["".join(chr(_BRAILLE_BLANK + int(c)) for c in row) for row in cells]


def _bracket(lines: list[str]) -> str:
    if len(lines) == 1:
        return f"[{lines[0]}]"
    left = ["⎡"] + ["⎢"] * (len(lines) - 2) + ["⎣"]
    right = ["⎤"] + ["⎥"] * (len(lines) - 2) + ["⎦"]
    return "\n".join(f"{a}{line}{b}" for a, line, b in zip(left, lines, right))
