"""Keplerian elements and inertial Cartesian states.

Elements are ordered ``[a, e, i, RAAN, omega, M]`` (metres and radians);
states are ``[x, y, z, vx, vy, vz]`` (metres and metres per second).  Both
directions take the central attraction coefficient ``gm`` explicitly so
the same code serves the WGS72 constant of the TLE theory.

The Keplerian set is singular at ``e = 0`` and ``i = 0``: the inverse map
stays finite there but its derivatives do not, so the converters work in
:mod:`meanjax.coordinates.equinoctial` instead.

References:
    1. D. A. Vallado, *Fundamentals of Astrodynamics and Applications*,
       4th ed., 2013, Algorithms 9 and 10.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.constants import GM_EARTH
from meanjax.orbits.keplerian import anomaly_eccentric_to_mean, anomaly_mean_to_eccentric
from meanjax.utils import from_radians, normalize_angle, to_radians


def _rot_z(angle: Array) -> Array:
    c, s = jnp.cos(angle), jnp.sin(angle)
    return jnp.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def _rot_x(angle: Array) -> Array:
    c, s = jnp.cos(angle), jnp.sin(angle)
    return jnp.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def _perifocal_to_inertial(inc: ArrayLike, raan: ArrayLike, argp: ArrayLike) -> Array:
    """Rotation matrix taking perifocal (PQW) vectors to the inertial frame.

    The 3-1-3 sequence ``Rz(RAAN) Rx(i) Rz(omega)``; its columns are the
    perigee direction, the in-plane normal to it, and the orbit normal.
    """
    return _rot_z(raan) @ _rot_x(inc) @ _rot_z(argp)


def state_koe_to_eci(
    x_oe: ArrayLike,
    gm: float = GM_EARTH,
    use_degrees: bool = False,
) -> Array:
    """Convert Keplerian orbital elements to an inertial Cartesian state.

    Args:
        x_oe: Orbital elements ``[a, e, i, RAAN, omega, M]``.
            Semi-major axis in *m*, angles in *rad* (or *deg* if
            ``use_degrees=True``).
        gm: Central attraction coefficient. Units: *m^3/s^2*
        use_degrees: If ``True``, interpret angular elements as degrees.

    Returns:
        Cartesian state ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax.constants import R_EARTH
        from meanjax.coordinates import state_koe_to_eci
        oe = jnp.array([R_EARTH + 500e3, 0.01, 0.9, 0.0, 0.0, 0.0])
        state = state_koe_to_eci(oe)
        ```
    """
    x_oe = jnp.asarray(x_oe, dtype=get_dtype())
    a, e = x_oe[0], x_oe[1]
    inc, raan, argp, m = to_radians(x_oe[2:], use_degrees)

    ecc_anom = anomaly_mean_to_eccentric(m, e)
    ce, se = jnp.cos(ecc_anom), jnp.sin(ecc_anom)
    eta = jnp.sqrt(1.0 - e * e)

    # In-plane state, perigee along the first axis
    r_pf = a * jnp.array([ce - e, eta * se, 0.0])
    edot = jnp.sqrt(gm / a) / (1.0 - e * ce)
    v_pf = edot * jnp.array([-se, eta * ce, 0.0])

    rot = _perifocal_to_inertial(inc, raan, argp)
    return jnp.concatenate([rot @ r_pf, rot @ v_pf])


def state_eci_to_koe(
    x_cart: ArrayLike,
    gm: float = GM_EARTH,
    use_degrees: bool = False,
) -> Array:
    """Convert an inertial Cartesian state to Keplerian orbital elements.

    RAAN, argument of perigee and mean anomaly are returned in
    ``[0, 2*pi)``.

    Args:
        x_cart: Cartesian state ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.
        gm: Central attraction coefficient. Units: *m^3/s^2*
        use_degrees: If ``True``, return angular elements in degrees.

    Returns:
        Orbital elements ``[a, e, i, RAAN, omega, M]``.
    """
    x_cart = jnp.asarray(x_cart, dtype=get_dtype())
    r, v = x_cart[:3], x_cart[3:6]
    rn = jnp.linalg.norm(r)

    # Orbit plane from the angular momentum direction
    w = jnp.cross(r, v)
    w = w / jnp.linalg.norm(w)
    inc = jnp.arctan2(jnp.hypot(w[0], w[1]), w[2])
    raan = jnp.arctan2(w[0], -w[1])

    a = 1.0 / (2.0 / rn - jnp.dot(v, v) / gm)

    # e cos E and e sin E straight from the state
    ecos = 1.0 - rn / a
    esin = jnp.dot(r, v) / jnp.sqrt(gm * a)
    e = jnp.hypot(ecos, esin)
    ecc_anom = jnp.arctan2(esin, ecos)
    nu = jnp.arctan2(jnp.sqrt(1.0 - e * e) * jnp.sin(ecc_anom), jnp.cos(ecc_anom) - e)

    # Argument of latitude, measured from the ascending node in the orbit plane
    cr, sr = jnp.cos(raan), jnp.sin(raan)
    x_node = r[0] * cr + r[1] * sr
    y_node = (r[1] * cr - r[0] * sr) * jnp.cos(inc) + r[2] * jnp.sin(inc)
    u = jnp.arctan2(y_node, x_node)

    angles = jnp.array([
        inc,
        normalize_angle(raan, jnp.pi),
        normalize_angle(u - nu, jnp.pi),
        normalize_angle(anomaly_eccentric_to_mean(ecc_anom, e), jnp.pi),
    ])
    return jnp.concatenate([jnp.array([a, e]), from_radians(angles, use_degrees)])
