"""adbackends - Selecting automatic differentiation backends, including sparse ones.

Backend descriptors name a differentiation engine and report its mode.
[`AutoSparse`][adbackends.AutoSparse] combines a dense backend
with a sparsity detector and a coloring algorithm.
Nothing here computes derivatives.
"""

from adbackends.coloring import (
    ColoringAlgorithm,
    GreedyColoringAlgorithm,
    NoColoringAlgorithm,
    column_coloring,
    row_coloring,
    symmetric_coloring,
)
from adbackends.dense import (
    AutoAutograd,
    AutoCasADi,
    AutoFiniteDiff,
    AutoFiniteDifferences,
    AutoJacFwd,
    AutoJacRev,
    AutoJax,
    AutoSymPy,
    AutoTorch,
)
from adbackends.detection import (
    KnownSparsityDetector,
    NoSparsityDetector,
    SparsityDetector,
    hessian_sparsity,
    jacobian_sparsity,
)
from adbackends.errors import (
    ADBackendsError,
    DetectionFailure,
    ShapeError,
    UnsupportedCapability,
)
from adbackends.modes import (
    ADType,
    Mode,
    mode,
    register_mode,
    registered_mode_overrides,
    unregister_mode,
)
from adbackends.pattern import SparsityPattern, as_pattern
from adbackends.sparse import (
    AutoSparse,
    coloring_algorithm,
    dense_ad,
    dense_backend,
    sparsity_detector,
)
from adbackends.verify import (
    VerificationError,
    check_column_coloring,
    check_row_coloring,
    check_symmetric_coloring,
    is_valid_column_coloring,
    is_valid_row_coloring,
    is_valid_symmetric_coloring,
)

__all__ = [
    "ADBackendsError",
    "ADType",
    "AutoAutograd",
    "AutoCasADi",
    "AutoFiniteDiff",
    "AutoFiniteDifferences",
    "AutoJacFwd",
    "AutoJacRev",
    "AutoJax",
    "AutoSparse",
    "AutoSymPy",
    "AutoTorch",
    "ColoringAlgorithm",
    "DetectionFailure",
    "GreedyColoringAlgorithm",
    "KnownSparsityDetector",
    "Mode",
    "NoColoringAlgorithm",
    "NoSparsityDetector",
    "ShapeError",
    "SparsityDetector",
    "SparsityPattern",
    "UnsupportedCapability",
    "VerificationError",
    "as_pattern",
    "check_column_coloring",
    "check_row_coloring",
    "check_symmetric_coloring",
    "coloring_algorithm",
    "column_coloring",
    "dense_ad",
    "dense_backend",
    "hessian_sparsity",
    "is_valid_column_coloring",
    "is_valid_row_coloring",
    "is_valid_symmetric_coloring",
    "jacobian_sparsity",
    "mode",
    "register_mode",
    "registered_mode_overrides",
    "row_coloring",
    "sparsity_detector",
    "symmetric_coloring",
    "unregister_mode",
]
