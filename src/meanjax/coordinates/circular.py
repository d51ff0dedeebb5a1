"""Circular orbital element conversions.

Circular elements ``[a, ex, ey, i, RAAN, alphaM]`` keep the node explicit
but replace the perigee by the eccentricity vector measured from the
ascending node, ``ex = e cos ω`` and ``ey = e sin ω``, and the mean
anomaly by the mean argument of latitude ``alphaM = ω + M``.  They are
the native parameterization of the Eckstein-Hechler theory and remain
well defined for near-circular orbits, but not for equatorial ones.

Conversions to and from Cartesian states go through the equinoctial
elements, which differ only by a rotation of the eccentricity vector by
the node.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.constants import GM_EARTH
from meanjax.coordinates.equinoctial import state_eci_to_eqn, state_eqn_to_eci
from meanjax.utils import normalize_angle


def state_cir_to_eqn(x_cir: ArrayLike) -> Array:
    """Convert circular elements ``[a, ex, ey, i, RAAN, alphaM]`` to
    equinoctial elements ``[a, ex, ey, hx, hy, lM]``.
    """
    x_cir = jnp.asarray(x_cir, dtype=get_dtype())
    a, ex, ey, i, raan, alpha_m = (x_cir[k] for k in range(6))
    cos_r = jnp.cos(raan)
    sin_r = jnp.sin(raan)
    tan_half_i = jnp.tan(0.5 * i)
    return jnp.array([
        a,
        ex * cos_r - ey * sin_r,
        ex * sin_r + ey * cos_r,
        tan_half_i * cos_r,
        tan_half_i * sin_r,
        normalize_angle(alpha_m + raan, 0.0),
    ])


def state_eqn_to_cir(x_eq: ArrayLike) -> Array:
    """Convert equinoctial elements ``[a, ex, ey, hx, hy, lM]`` to
    circular elements ``[a, ex, ey, i, RAAN, alphaM]``.

    The node is undefined for equatorial orbits and returned as zero.
    """
    x_eq = jnp.asarray(x_eq, dtype=get_dtype())
    a, ex, ey, hx, hy, lM = (x_eq[k] for k in range(6))
    raan = jnp.arctan2(hy, hx)
    cos_r = jnp.cos(raan)
    sin_r = jnp.sin(raan)
    return jnp.array([
        a,
        ex * cos_r + ey * sin_r,
        ey * cos_r - ex * sin_r,
        2.0 * jnp.arctan(jnp.sqrt(hx * hx + hy * hy)),
        normalize_angle(raan, jnp.pi),
        normalize_angle(lM - raan, 0.0),
    ])


def state_cir_to_eci(x_cir: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Convert circular elements to an inertial Cartesian state.

    Args:
        x_cir: Circular elements ``[a, ex, ey, i, RAAN, alphaM]``.
        gm: Central attraction coefficient. Units: *m^3/s^2*

    Returns:
        Cartesian state ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.
    """
    return state_eqn_to_eci(state_cir_to_eqn(x_cir), gm)


def state_eci_to_cir(x_cart: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Convert an inertial Cartesian state to circular elements.

    Args:
        x_cart: Cartesian state ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.
        gm: Central attraction coefficient. Units: *m^3/s^2*

    Returns:
        Circular elements ``[a, ex, ey, i, RAAN, alphaM]``.
    """
    return state_eqn_to_cir(state_eci_to_eqn(x_cart, gm))
