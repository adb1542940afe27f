"""Exceptions raised by sparsity detectors, coloring algorithms and patterns."""


class ADBackendsError(Exception):
    """Base class for all adbackends errors."""


class ShapeError(ADBackendsError, ValueError):
    """A matrix or point has dimensions that violate a precondition.

    For example, ``symmetric_coloring`` received a non-square matrix,
    or a known sparsity pattern does not match the size of ``f(x)``.
    """


class DetectionFailure(ADBackendsError, RuntimeError):
    """The function could not be evaluated or analyzed at the given point."""


class UnsupportedCapability(ADBackendsError, NotImplementedError):
    """A detector or coloring algorithm does not implement the requested operation."""

    def __init__(self, obj: object, operation: str) -> None:
        self.obj = obj
        self.operation = operation
        super().__init__(f"{type(obj).__name__} does not support `{operation}`")
