"""Descriptors selecting a dense automatic differentiation engine.

Each descriptor is a plain immutable record naming an external engine
and its configuration.
Nothing here imports or runs the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from adbackends._display import backend_repr
from adbackends.modes import ADType, Mode

_FD_TYPES = ("forward", "central", "complex")
_FD_HESSIAN_TYPES = ("hcentral",)
_TORCH_STRATEGIES = (None, "forward-mode", "reverse-mode")


@dataclass(frozen=True, repr=False)
class AutoJax(ADType):
    """Select [JAX](https://github.com/jax-ml/jax) transformations.

    Attributes:
        transform: Which JAX transformation to use, e.g. ``"forward"``, ``"reverse"``,
            or a JAX function such as ``jax.jacfwd``.
            ``None`` lets downstream code choose.

    The mode is reported as ``FORWARD_OR_REVERSE`` unless
    ``adbackends.extensions.jax`` has been imported.
    """

    transform: Any = None

    def _default_mode(self) -> Mode:
        return Mode.FORWARD_OR_REVERSE

    def __repr__(self) -> str:
        return backend_repr(self)


@dataclass(frozen=True, repr=False)
class AutoJacFwd(ADType):
    """Select ``jax.jacfwd``.

    Attributes:
        chunksize: Preferred number of tangents pushed forward at once.
            ``None`` pushes all of them together.
    """

    chunksize: int | None = None

    def __post_init__(self) -> None:
        _check_chunksize(self.chunksize)

    def _default_mode(self) -> Mode:
        return Mode.FORWARD

    def __repr__(self) -> str:
        return backend_repr(self)


@dataclass(frozen=True, repr=False)
class AutoJacRev(ADType):
    """Select ``jax.jacrev``.

    Attributes:
        compile: Whether to ``jax.jit`` the reverse pass before differentiation.
    """

    compile: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.compile, bool):
            msg = f"compile must be a bool, got {type(self.compile).__name__}"
            raise TypeError(msg)

    def _default_mode(self) -> Mode:
        return Mode.REVERSE

    def __repr__(self) -> str:
        return backend_repr(self)


@dataclass(frozen=True, repr=False)
class AutoTorch(ADType):
    """Select ``torch.autograd.functional``.

    Attributes:
        strategy: ``"forward-mode"``, ``"reverse-mode"``,
            or ``None`` to use PyTorch's default.
    """

    strategy: Literal["forward-mode", "reverse-mode"] | None = None

    def __post_init__(self) -> None:
        if self.strategy not in _TORCH_STRATEGIES:
            msg = (
                f"strategy must be one of {_TORCH_STRATEGIES}, got {self.strategy!r}"
            )
            raise ValueError(msg)

    def _default_mode(self) -> Mode:
        return Mode.FORWARD_OR_REVERSE

    def __repr__(self) -> str:
        return backend_repr(self)


@dataclass(frozen=True, repr=False)
class AutoAutograd(ADType):
    """Select [autograd](https://github.com/HIPS/autograd)."""

    def _default_mode(self) -> Mode:
        return Mode.REVERSE

    def __repr__(self) -> str:
        return backend_repr(self)


@dataclass(frozen=True, repr=False)
class AutoFiniteDiff(ADType):
    """Select finite differences with a fixed stencil.

    Attributes:
        fdtype: Finite difference type for gradients and derivatives.
        fdjtype: Finite difference type for Jacobians.
            Follows ``fdtype`` when left as ``None``.
        fdhtype: Finite difference type for Hessians.
    """

    fdtype: Literal["forward", "central", "complex"] = "forward"
    fdjtype: Literal["forward", "central", "complex"] | None = None
    fdhtype: Literal["hcentral"] = "hcentral"

    def __post_init__(self) -> None:
        if self.fdjtype is None:
            object.__setattr__(self, "fdjtype", self.fdtype)
        for name in ("fdtype", "fdjtype"):
            value = getattr(self, name)
            if value not in _FD_TYPES:
                msg = f"{name} must be one of {_FD_TYPES}, got {value!r}"
                raise ValueError(msg)
        if self.fdhtype not in _FD_HESSIAN_TYPES:
            msg = (
                f"fdhtype must be one of {_FD_HESSIAN_TYPES}, got {self.fdhtype!r}"
            )
            raise ValueError(msg)

    def _default_mode(self) -> Mode:
        return Mode.FORWARD

    def __repr__(self) -> str:
        return backend_repr(self, implied={"fdjtype": "fdtype"})


@dataclass(frozen=True, repr=False)
class AutoFiniteDifferences(ADType):
    """Select finite differences driven by a user-supplied method object.

    Attributes:
        method: The finite difference method, e.g. a ``numdifftools`` step generator.
    """

    method: Any

    def _default_mode(self) -> Mode:
        return Mode.FORWARD

    def __repr__(self) -> str:
        return backend_repr(self)


@dataclass(frozen=True, repr=False)
class AutoSymPy(ADType):
    """Select [SymPy](https://www.sympy.org) symbolic differentiation."""

    def _default_mode(self) -> Mode:
        return Mode.SYMBOLIC

    def __repr__(self) -> str:
        return backend_repr(self)


@dataclass(frozen=True, repr=False)
class AutoCasADi(ADType):
    """Select [CasADi](https://web.casadi.org) expression graphs."""

    def _default_mode(self) -> Mode:
        return Mode.SYMBOLIC

    def __repr__(self) -> str:
        return backend_repr(self)


def _check_chunksize(chunksize: int | None) -> None:
    if chunksize is None:
        return
    if isinstance(chunksize, bool) or not isinstance(chunksize, int) or chunksize < 1:
        msg = f"chunksize must be a positive int or None, got {chunksize!r}"
        raise ValueError(msg)
