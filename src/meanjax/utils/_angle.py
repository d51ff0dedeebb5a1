"""Angle helpers.

Public functions take a ``use_degrees`` flag; these helpers apply it
with ``jnp.where`` so the flag may also be a traced boolean.  The
wrapping helper keeps differences of mean angles on the short arc.
"""

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

_TWO_PI = 2.0 * jnp.pi


def to_radians(angle: ArrayLike, use_degrees: bool) -> Array:
    """Return *angle* in radians, converting from degrees when ``use_degrees``."""
    return jnp.where(use_degrees, jnp.deg2rad(angle), angle)


def from_radians(angle: ArrayLike, use_degrees: bool) -> Array:
    """Return the radian *angle* in degrees when ``use_degrees``, else unchanged."""
    return jnp.where(use_degrees, jnp.rad2deg(angle), angle)


def normalize_angle(angle: ArrayLike, center: ArrayLike = 0.0) -> Array:
    """Wrap *angle* into ``[center - pi, center + pi)``.

    ``center=0`` gives ``[-pi, pi)`` and ``center=pi`` gives
    ``[0, 2*pi)``.  Only whole turns are removed, so the derivative with
    respect to *angle* is one.

    Args:
        angle (ArrayLike): Angle in radians.
        center (ArrayLike): Centre of the output interval in radians.

    Returns:
        Wrapped angle in radians.
    """
    return angle - _TWO_PI * jnp.floor((angle - center + jnp.pi) / _TWO_PI)
