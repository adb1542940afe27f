"""Differentiation modes and mode resolution for AD backends.

Every backend descriptor reports one of four modes.
Generic code branches on the mode to decide between JVP-based
and VJP-based algorithms without knowing the engine behind it.

Some engines can run either way depending on state this package cannot see
(e.g. a mode object owned by an optional dependency).
Those report ``FORWARD_OR_REVERSE`` by default,
and an extension module may register a more precise resolver
with [`register_mode`][adbackends.register_mode].
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from logging import getLogger

logger = getLogger(__name__)


class Mode(Enum):
    """Closed classification of differentiation paradigms."""

    FORWARD = "forward"
    REVERSE = "reverse"
    FORWARD_OR_REVERSE = "forward_or_reverse"
    SYMBOLIC = "symbolic"

    @property
    def supports_forward(self) -> bool:
        """Whether JVPs are available."""
        return self in (Mode.FORWARD, Mode.FORWARD_OR_REVERSE)

    @property
    def supports_reverse(self) -> bool:
        """Whether VJPs are available."""
        return self in (Mode.REVERSE, Mode.FORWARD_OR_REVERSE)


ModeResolver = Callable[["ADType"], Mode]

_MODE_OVERRIDES: dict[type, ModeResolver] = {}


class ADType(ABC):
    """Abstract supertype of all automatic differentiation strategies.

    Subclasses implement `_default_mode`.
    Callers should use `mode`, which honors registered overrides.
    """

    @abstractmethod
    def _default_mode(self) -> Mode:
        """Mode reported when no override is registered for this type."""

    def mode(self) -> Mode:
        """Return the differentiation mode of this strategy."""
        for cls in type(self).__mro__:
            resolver = _MODE_OVERRIDES.get(cls)
            if resolver is not None:
                result = resolver(self)
                if not isinstance(result, Mode):
                    msg = (
                        f"Mode resolver for {cls.__name__} returned "
                        f"{result!r}, expected a Mode"
                    )
                    raise TypeError(msg)
                return result
        return self._default_mode()


def mode(ad: ADType) -> Mode:
    """Return the differentiation mode of ``ad``.

    Raises:
        TypeError: If ``ad`` is not an [`ADType`][adbackends.ADType].
    """
    if not isinstance(ad, ADType):
        msg = f"Expected an ADType, got {type(ad).__name__}"
        raise TypeError(msg)
    return ad.mode()


def register_mode(cls: type, resolver: ModeResolver) -> None:
    """Override mode resolution for instances of ``cls`` (and its subclasses).

    Registering again for the same class replaces the previous resolver.

    Args:
        cls: A subclass of [`ADType`][adbackends.ADType].
        resolver: Callable taking a backend instance and returning a `Mode`.

    Raises:
        TypeError: If ``cls`` is not an `ADType` subclass,
            if ``cls`` is `AutoSparse` (its mode always comes from the dense backend),
            or if ``resolver`` is not callable.
    """
    from adbackends.sparse import AutoSparse

    if not (isinstance(cls, type) and issubclass(cls, ADType)):
        msg = f"Expected an ADType subclass, got {cls!r}"
        raise TypeError(msg)
    if issubclass(cls, AutoSparse):
        msg = "AutoSparse always takes its mode from the wrapped dense backend"
        raise TypeError(msg)
    if not callable(resolver):
        msg = f"Mode resolver must be callable, got {type(resolver).__name__}"
        raise TypeError(msg)
    if cls in _MODE_OVERRIDES:
        logger.debug("Replacing mode resolver for %s", cls.__name__)
    else:
        logger.debug("Registering mode resolver for %s", cls.__name__)
    _MODE_OVERRIDES[cls] = resolver


def unregister_mode(cls: type) -> None:
    """Remove the mode override for ``cls``, if any."""
    if _MODE_OVERRIDES.pop(cls, None) is not None:
        logger.debug("Removed mode resolver for %s", cls.__name__)


def registered_mode_overrides() -> dict[type, ModeResolver]:
    """Return a snapshot of the registered mode overrides."""
    return dict(_MODE_OVERRIDES)
