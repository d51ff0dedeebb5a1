"""Equinoctial orbital element conversions.

Equinoctial elements ``[a, ex, ey, hx, hy, lM]`` are non-singular for
circular and equatorial orbits (only retrograde equatorial orbits are
excluded), which makes them the working parameterization of the mean
element converters and of covariance propagation:

| Index | Element                                  | Units         |
|-------|------------------------------------------|---------------|
| 0     | *a* — semi-major axis                    | m             |
| 1     | *ex* — ``e cos(ω + Ω)``                  | dimensionless |
| 2     | *ey* — ``e sin(ω + Ω)``                  | dimensionless |
| 3     | *hx* — ``tan(i/2) cos Ω``                | dimensionless |
| 4     | *hy* — ``tan(i/2) sin Ω``                | dimensionless |
| 5     | *lM* — mean longitude ``M + ω + Ω``      | rad           |

All conversions are pure ``jax.numpy`` and differentiable with
``jax.jacfwd`` everywhere on elliptic, non-retrograde-equatorial orbits.

References:
    1. R. A. Broucke and P. J. Cefola, *On the equinoctial orbit elements*,
       Celestial Mechanics 5, 1972.
    2. D. A. Danielson et al., *Semianalytic Satellite Theory*, NPS, 1995,
       Sec. 2.1.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.constants import GM_EARTH
from meanjax.orbits.keplerian import KEPLER_ITERATIONS
from meanjax.utils import normalize_angle

# ──────────────────────────────────────────────
# Longitude conversions
# ──────────────────────────────────────────────


def longitude_eccentric_to_mean(lE: ArrayLike, ex: ArrayLike, ey: ArrayLike) -> Array:
    """Mean longitude from eccentric longitude, ``lM = lE - ex sin lE + ey cos lE``."""
    return lE - ex * jnp.sin(lE) + ey * jnp.cos(lE)


def longitude_mean_to_eccentric(lM: ArrayLike, ex: ArrayLike, ey: ArrayLike) -> Array:
    """Solve the equinoctial Kepler equation for the eccentric longitude.

    Newton-Raphson on ``f(lE) = lE - ex sin lE + ey cos lE - lM``,
    started from the first-order solution.

    Args:
        lM: Mean longitude. Units: *rad*
        ex: Eccentricity vector x component.
        ey: Eccentricity vector y component.

    Returns:
        Eccentric longitude. Units: *rad*
    """
    lE0 = lM + ex * jnp.sin(lM) - ey * jnp.cos(lM)

    def newton_step(_, lE):
        f = longitude_eccentric_to_mean(lE, ex, ey) - lM
        fd = 1.0 - ex * jnp.cos(lE) - ey * jnp.sin(lE)
        return lE - f / fd

    return jax.lax.fori_loop(0, KEPLER_ITERATIONS, newton_step, lE0)


def longitude_true_to_eccentric(lv: ArrayLike, ex: ArrayLike, ey: ArrayLike) -> Array:
    """Eccentric longitude from true longitude."""
    epsilon = jnp.sqrt(1.0 - ex * ex - ey * ey)
    cos_lv = jnp.cos(lv)
    sin_lv = jnp.sin(lv)
    num = ey * cos_lv - ex * sin_lv
    den = 1.0 + epsilon + ex * cos_lv + ey * sin_lv
    return lv + 2.0 * jnp.arctan(num / den)


def longitude_eccentric_to_true(lE: ArrayLike, ex: ArrayLike, ey: ArrayLike) -> Array:
    """True longitude from eccentric longitude."""
    epsilon = jnp.sqrt(1.0 - ex * ex - ey * ey)
    cos_lE = jnp.cos(lE)
    sin_lE = jnp.sin(lE)
    num = ex * sin_lE - ey * cos_lE
    den = epsilon + 1.0 - ex * cos_lE - ey * sin_lE
    return lE + 2.0 * jnp.arctan(num / den)


# ──────────────────────────────────────────────
# Cartesian conversions
# ──────────────────────────────────────────────


def state_eqn_to_eci(x_eq: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Convert equinoctial elements to an inertial Cartesian state.

    Args:
        x_eq: Equinoctial elements ``[a, ex, ey, hx, hy, lM]``.
        gm: Central attraction coefficient. Units: *m^3/s^2*

    Returns:
        Cartesian state ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax.coordinates import state_eqn_to_eci
        x = state_eqn_to_eci(jnp.array([7.0e6, 1e-3, 0.0, 0.3, 0.1, 1.0]))
        ```
    """
    x_eq = jnp.asarray(x_eq, dtype=get_dtype())
    a, ex, ey, hx, hy, lM = (x_eq[k] for k in range(6))

    lE = longitude_mean_to_eccentric(lM, ex, ey)

    # In-plane basis vectors f (along the line of equinoxes) and g
    hx2 = hx * hx
    hy2 = hy * hy
    fact_h = 1.0 / (1.0 + hx2 + hy2)
    hxhy2 = 2.0 * hx * hy
    f_vec = jnp.array([(1.0 - hy2 + hx2) * fact_h, hxhy2 * fact_h, -2.0 * hy * fact_h])
    g_vec = jnp.array([hxhy2 * fact_h, (1.0 + hy2 - hx2) * fact_h, 2.0 * hx * fact_h])

    exey = ex * ey
    ex2 = ex * ex
    ey2 = ey * ey
    beta = 1.0 / (1.0 + jnp.sqrt(1.0 - ex2 - ey2))

    cos_lE = jnp.cos(lE)
    sin_lE = jnp.sin(lE)
    ex_ce_ey_s = ex * cos_lE + ey * sin_lE

    x = a * ((1.0 - beta * ey2) * cos_lE + beta * exey * sin_lE - ex)
    y = a * ((1.0 - beta * ex2) * sin_lE + beta * exey * cos_lE - ey)

    factor = jnp.sqrt(gm / a) / (1.0 - ex_ce_ey_s)
    xdot = factor * (-sin_lE + beta * ey * ex_ce_ey_s)
    ydot = factor * (cos_lE - beta * ex * ex_ce_ey_s)

    return jnp.concatenate([x * f_vec + y * g_vec, xdot * f_vec + ydot * g_vec])


def state_eci_to_eqn(x_cart: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Convert an inertial Cartesian state to equinoctial elements.

    The mean longitude is returned in ``[-pi, pi)``.

    Args:
        x_cart: Cartesian state ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.
        gm: Central attraction coefficient. Units: *m^3/s^2*

    Returns:
        Equinoctial elements ``[a, ex, ey, hx, hy, lM]``.
    """
    x_cart = jnp.asarray(x_cart, dtype=get_dtype())
    p = x_cart[:3]
    v = x_cart[3:6]

    r = jnp.linalg.norm(p)
    v2 = jnp.dot(v, v)
    r_v2_on_mu = r * v2 / gm

    a = r / (2.0 - r_v2_on_mu)

    w = jnp.cross(p, v)
    w = w / jnp.linalg.norm(w)
    d = 1.0 / (1.0 + w[2])
    hx = -d * w[1]
    hy = d * w[0]

    # True longitude
    cos_lv = (p[0] - d * p[2] * w[0]) / r
    sin_lv = (p[1] - d * p[2] * w[1]) / r
    lv = jnp.arctan2(sin_lv, cos_lv)

    e_sin_E = jnp.dot(p, v) / jnp.sqrt(gm * a)
    e_cos_E = r_v2_on_mu - 1.0
    e2 = e_cos_E * e_cos_E + e_sin_E * e_sin_E
    f = e_cos_E - e2
    g = jnp.sqrt(1.0 - e2) * e_sin_E
    ex = a * (f * cos_lv + g * sin_lv) / r
    ey = a * (f * sin_lv - g * cos_lv) / r

    lE = longitude_true_to_eccentric(lv, ex, ey)
    lM = normalize_angle(longitude_eccentric_to_mean(lE, ex, ey), 0.0)

    return jnp.array([a, ex, ey, hx, hy, lM])


# ──────────────────────────────────────────────
# Keplerian conversions
# ──────────────────────────────────────────────


def state_koe_to_eqn(x_oe: ArrayLike) -> Array:
    """Convert Keplerian elements ``[a, e, i, RAAN, omega, M]`` to
    equinoctial elements ``[a, ex, ey, hx, hy, lM]``.
    """
    x_oe = jnp.asarray(x_oe, dtype=get_dtype())
    a, e, i, raan, omega, M = (x_oe[k] for k in range(6))
    pa = omega + raan
    tan_half_i = jnp.tan(0.5 * i)
    return jnp.array([
        a,
        e * jnp.cos(pa),
        e * jnp.sin(pa),
        tan_half_i * jnp.cos(raan),
        tan_half_i * jnp.sin(raan),
        normalize_angle(M + pa, 0.0),
    ])


def state_eqn_to_koe(x_eq: ArrayLike) -> Array:
    """Convert equinoctial elements ``[a, ex, ey, hx, hy, lM]`` to
    Keplerian elements ``[a, e, i, RAAN, omega, M]``.

    The perigee and node angles are undefined for circular and equatorial
    orbits; in those cases they are returned as zero.
    """
    x_eq = jnp.asarray(x_eq, dtype=get_dtype())
    a, ex, ey, hx, hy, lM = (x_eq[k] for k in range(6))
    e = jnp.sqrt(ex * ex + ey * ey)
    i = 2.0 * jnp.arctan(jnp.sqrt(hx * hx + hy * hy))
    raan = jnp.arctan2(hy, hx)
    pa = jnp.arctan2(ey, ex)
    return jnp.array([
        a,
        e,
        i,
        normalize_angle(raan, jnp.pi),
        normalize_angle(pa - raan, jnp.pi),
        normalize_angle(lM - pa, jnp.pi),
    ])
