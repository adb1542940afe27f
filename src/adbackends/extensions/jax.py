"""Precise mode resolution for [`AutoJax`][adbackends.AutoJax].

Importing this module maps the ``transform`` of an ``AutoJax`` descriptor
to a forward or reverse mode.
Without it, ``AutoJax`` reports ``FORWARD_OR_REVERSE``.
"""

from logging import getLogger

import jax

from adbackends.dense import AutoJax
from adbackends.modes import Mode, register_mode

logger = getLogger(__name__)

_FORWARD_TRANSFORMS = ("forward", jax.jvp, jax.jacfwd, jax.linearize)
_REVERSE_TRANSFORMS = ("reverse", jax.vjp, jax.jacrev, jax.grad)


def jax_mode(ad: AutoJax) -> Mode:
    """Resolve the mode of an ``AutoJax`` descriptor from its ``transform``.

    Transforms that are neither forward nor reverse
    keep the conservative ``FORWARD_OR_REVERSE``.
    """
    transform = ad.transform
    if transform is None:
        return Mode.FORWARD_OR_REVERSE
    if transform in _FORWARD_TRANSFORMS:
        return Mode.FORWARD
    if transform in _REVERSE_TRANSFORMS:
        return Mode.REVERSE
    logger.debug("Unknown JAX transform %r, keeping FORWARD_OR_REVERSE", transform)
    return Mode.FORWARD_OR_REVERSE


register_mode(AutoJax, jax_mode)
