"""Sparse AD: a dense backend combined with sparsity detection and coloring."""

from __future__ import annotations

from dataclasses import dataclass, field

from adbackends.coloring import ColoringAlgorithm, NoColoringAlgorithm
from adbackends.detection import NoSparsityDetector, SparsityDetector
from adbackends.modes import ADType, Mode


@dataclass(frozen=True)
class AutoSparse(ADType):
    """Wrap a dense backend to compute sparse Jacobians and Hessians.

    Downstream code detects the pattern with ``sparsity_detector``,
    colors it with ``coloring_algorithm``,
    and evaluates the compressed derivative with ``dense_ad``.
    The defaults never fail and amount to dense differentiation:
    a full pattern with one color per column.

    Attributes:
        dense_ad: The underlying dense backend.
        sparsity_detector: The sparsity pattern detector.
        coloring_algorithm: The coloring algorithm.

    Example:
        >>> from adbackends import AutoJacRev, AutoSparse, GreedyColoringAlgorithm
        >>> ad = AutoSparse(AutoJacRev(), coloring_algorithm=GreedyColoringAlgorithm())
        >>> ad.mode()
        <Mode.REVERSE: 'reverse'>
    """

    dense_ad: ADType
    sparsity_detector: SparsityDetector = field(default_factory=NoSparsityDetector)
    coloring_algorithm: ColoringAlgorithm = field(default_factory=NoColoringAlgorithm)

    def __post_init__(self) -> None:
        """Check the type of each component."""
        if not isinstance(self.dense_ad, ADType):
            msg = f"dense_ad must be an ADType, got {type(self.dense_ad).__name__}"
            raise TypeError(msg)
        if not isinstance(self.sparsity_detector, SparsityDetector):
            msg = (
                "sparsity_detector must be a SparsityDetector, "
                f"got {type(self.sparsity_detector).__name__}"
            )
            raise TypeError(msg)
        if not isinstance(self.coloring_algorithm, ColoringAlgorithm):
            msg = (
                "coloring_algorithm must be a ColoringAlgorithm, "
                f"got {type(self.coloring_algorithm).__name__}"
            )
            raise TypeError(msg)

    def mode(self) -> Mode:
        """Mode of the wrapped dense backend."""
        return self.dense_ad.mode()

    def _default_mode(self) -> Mode:
        return self.dense_ad.mode()


def dense_ad(ad: AutoSparse) -> ADType:
    """Return the underlying dense backend of a sparse AD choice."""
    return _check_sparse(ad).dense_ad


dense_backend = dense_ad


def sparsity_detector(ad: AutoSparse) -> SparsityDetector:
    """Return the sparsity pattern detector of a sparse AD choice."""
    return _check_sparse(ad).sparsity_detector


def coloring_algorithm(ad: AutoSparse) -> ColoringAlgorithm:
    """Return the coloring algorithm of a sparse AD choice."""
    return _check_sparse(ad).coloring_algorithm


def _check_sparse(ad: object) -> AutoSparse:
    if not isinstance(ad, AutoSparse):
        msg = f"Expected an AutoSparse, got {type(ad).__name__}"
        raise TypeError(msg)
    return ad
