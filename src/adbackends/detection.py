"""Sparsity detectors for Jacobians and Hessians.

A detector returns a boolean pattern that over-approximates
the nonzeros of a Jacobian or Hessian at a given point.
Detectors may be imprecise, but never miss a nonzero.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import Any

import jax
import jax.numpy as jnp
import numpy as np

from adbackends.errors import DetectionFailure, ShapeError, UnsupportedCapability
from adbackends.pattern import SparsityPattern, as_pattern

logger = getLogger(__name__)


class SparsityDetector:
    """Supertype for sparsity pattern detectors.

    Subclasses override some or all of
    `_jacobian_sparsity`, `_jacobian_sparsity_inplace` and `hessian_sparsity`.
    Operations left alone raise
    [`UnsupportedCapability`][adbackends.UnsupportedCapability].
    """

    def jacobian_sparsity(self, f: Callable, *args: Any) -> SparsityPattern:
        """Pattern of the Jacobian of ``f``.

        Called as ``jacobian_sparsity(f, x)`` for ``y = f(x)``,
        or ``jacobian_sparsity(f, y, x)`` for in-place functions ``f(y, x)``
        that write their output into ``y``.

        Returns:
            Pattern of shape ``(y.size, x.size)``.
        """
        if len(args) == 1:
            return self._jacobian_sparsity(f, args[0])
        if len(args) == 2:
            return self._jacobian_sparsity_inplace(f, args[0], args[1])
        msg = (
            "jacobian_sparsity expects (f, x) or (f, y, x), "
            f"got {len(args) + 1} positional arguments"
        )
        raise TypeError(msg)

    def hessian_sparsity(self, f: Callable, x: Any) -> SparsityPattern:
        """Pattern of the Hessian of the scalar function ``f``, shape ``(x.size, x.size)``."""
        raise UnsupportedCapability(self, "hessian_sparsity")

    def _jacobian_sparsity(self, f: Callable, x: Any) -> SparsityPattern:
        raise UnsupportedCapability(self, "jacobian_sparsity(f, x)")

    def _jacobian_sparsity_inplace(self, f: Callable, y: Any, x: Any) -> SparsityPattern:
        raise UnsupportedCapability(self, "jacobian_sparsity(f, y, x)")


@dataclass(frozen=True)
class NoSparsityDetector(SparsityDetector):
    """Trivial detector returning a full pattern (only ones, no zeros).

    Always a valid over-approximation.
    Only the sizes of ``f(x)``, ``y`` and ``x`` are used.
    Pytrees of arrays count all of their leaves.
    """

    def _jacobian_sparsity(self, f: Callable, x: Any) -> SparsityPattern:
        m = _num_entries(_evaluate(f, x), "output")
        n = _num_entries(x, "input")
        logger.debug("Assuming full Jacobian pattern of shape (%d, %d)", m, n)
        return SparsityPattern.full((m, n))

    def _jacobian_sparsity_inplace(self, f: Callable, y: Any, x: Any) -> SparsityPattern:
        m = _num_entries(y, "output buffer")
        n = _num_entries(x, "input")
        logger.debug("Assuming full Jacobian pattern of shape (%d, %d)", m, n)
        return SparsityPattern.full((m, n))

    def hessian_sparsity(self, f: Callable, x: Any) -> SparsityPattern:
        n = _num_entries(x, "input")
        logger.debug("Assuming full Hessian pattern of shape (%d, %d)", n, n)
        return SparsityPattern.full((n, n))


@dataclass(frozen=True)
class KnownSparsityDetector(SparsityDetector):
    """Detector returning patterns known ahead of time.

    Useful when the structure follows from the problem,
    e.g. a discretization stencil.
    The patterns are checked against the sizes of ``f(x)``, ``y`` and ``x``
    but never against ``f`` itself.

    Attributes:
        jacobian_pattern: Jacobian pattern, or ``None`` if unknown.
        hessian_pattern: Square Hessian pattern, or ``None`` if unknown.
    """

    jacobian_pattern: SparsityPattern | None = None
    hessian_pattern: SparsityPattern | None = None

    def __post_init__(self) -> None:
        """Coerce patterns and check the Hessian pattern is square."""
        jac = self.jacobian_pattern
        hess = self.hessian_pattern
        if jac is not None:
            jac = as_pattern(jac)
        if hess is not None:
            hess = as_pattern(hess)
            if not hess.is_square:
                msg = f"Hessian pattern must be square, got shape {hess.shape}"
                raise ShapeError(msg)
        object.__setattr__(self, "jacobian_pattern", jac)
        object.__setattr__(self, "hessian_pattern", hess)

    def _jacobian_sparsity(self, f: Callable, x: Any) -> SparsityPattern:
        pattern = self._require(self.jacobian_pattern, "jacobian_sparsity(f, x)")
        expected = (_num_entries(_evaluate(f, x), "output"), _num_entries(x, "input"))
        return _check_shape(pattern, expected, "Jacobian")

    def _jacobian_sparsity_inplace(self, f: Callable, y: Any, x: Any) -> SparsityPattern:
        pattern = self._require(self.jacobian_pattern, "jacobian_sparsity(f, y, x)")
        expected = (_num_entries(y, "output buffer"), _num_entries(x, "input"))
        return _check_shape(pattern, expected, "Jacobian")

    def hessian_sparsity(self, f: Callable, x: Any) -> SparsityPattern:
        pattern = self._require(self.hessian_pattern, "hessian_sparsity")
        n = _num_entries(x, "input")
        return _check_shape(pattern, (n, n), "Hessian")

    def _require(
        self, pattern: SparsityPattern | None, operation: str
    ) -> SparsityPattern:
        if pattern is None:
            raise UnsupportedCapability(self, operation)
        return pattern


# =========================================================================
# Functional API
# =========================================================================


def jacobian_sparsity(
    f: Callable, *args: Any, detector: SparsityDetector | None = None
) -> SparsityPattern:
    """Detect the Jacobian pattern of ``f`` at ``x``.

    Called as ``jacobian_sparsity(f, x)`` or, for in-place functions,
    ``jacobian_sparsity(f, y, x)``.

    Args:
        f: Function ``x -> y``, or in-place function ``(y, x) -> None``.
        *args: ``(x,)`` or ``(y, x)``.
        detector: Detector to use.
            Defaults to [`NoSparsityDetector`][adbackends.NoSparsityDetector].

    Returns:
        Boolean pattern of shape ``(y.size, x.size)``.
    """
    return _resolve(detector).jacobian_sparsity(f, *args)


def hessian_sparsity(
    f: Callable, x: Any, *, detector: SparsityDetector | None = None
) -> SparsityPattern:
    """Detect the Hessian pattern of the scalar function ``f`` at ``x``.

    Args:
        f: Scalar-valued function.
        x: Input point.
        detector: Detector to use.
            Defaults to [`NoSparsityDetector`][adbackends.NoSparsityDetector].

    Returns:
        Boolean pattern of shape ``(x.size, x.size)``.
    """
    return _resolve(detector).hessian_sparsity(f, x)


# =========================================================================
# Private helpers
# =========================================================================


def _resolve(detector: SparsityDetector | None) -> SparsityDetector:
    if detector is None:
        return NoSparsityDetector()
    if not isinstance(detector, SparsityDetector):
        msg = f"Expected a SparsityDetector, got {type(detector).__name__}"
        raise TypeError(msg)
    return detector


def _evaluate(f: Callable, x: Any) -> Any:
    """Evaluate ``f(x)``, reporting any error as a detection failure."""
    try:
        return f(x)
    except Exception as e:
        msg = (
            f"Could not evaluate {getattr(f, '__name__', f)!r} at the given point: {e}"
        )
        raise DetectionFailure(msg) from e


def _num_entries(tree: Any, what: str) -> int:
    """Total number of scalar entries in an array or a pytree of arrays."""
    if tree is None:
        msg = f"Expected an array or a pytree of arrays as {what}, got None"
        raise DetectionFailure(msg)
    total = 0
    for leaf in jax.tree_util.tree_leaves(tree):
        dtype = leaf.dtype if hasattr(leaf, "dtype") else np.asarray(leaf).dtype
        if not (jnp.issubdtype(dtype, jnp.number) or jnp.issubdtype(dtype, jnp.bool_)):
            msg = (
                f"Expected numeric arrays as {what}, "
                f"got a leaf of type {type(leaf).__name__}"
            )
            raise DetectionFailure(msg)
        total += int(np.size(leaf))
    return total


def _check_shape(
    pattern: SparsityPattern, expected: tuple[int, int], name: str
) -> SparsityPattern:
    if pattern.shape != expected:
        msg = (
            f"Known {name} pattern has shape {pattern.shape}, "
            f"but the function and point require {expected}"
        )
        raise ShapeError(msg)
    return pattern
