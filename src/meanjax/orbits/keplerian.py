"""Two-body relations and anomaly conversions.

Mean motion, period and semi-major axis for an arbitrary central
attraction coefficient, plus the conversions between the mean, eccentric
and true anomalies.  Everything is traceable (``jax.jit``, ``jax.vmap``,
``jax.grad``) and computed in the configured float dtype.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.constants import GM_EARTH
from meanjax.utils import from_radians, to_radians

# Newton iterations used by the Kepler equation solvers
KEPLER_ITERATIONS = 12

_TWO_PI = 2.0 * jnp.pi


def _as_float(*values: ArrayLike) -> tuple[Array, ...]:
    dtype = get_dtype()
    return tuple(jnp.asarray(v, dtype=dtype) for v in values)


# ──────────────────────────────────────────────
# Mean motion and period
# ──────────────────────────────────────────────


def mean_motion(a: ArrayLike, gm: float = GM_EARTH, use_degrees: bool = False) -> Array:
    """Keplerian mean motion ``sqrt(gm / |a|^3)``.

    Args:
        a: Semi-major axis. Units: *m*
        gm: Central attraction coefficient. Units: *m^3/s^2*
        use_degrees: If ``True``, return mean motion in degrees per second.

    Returns:
        Mean motion. Units: *rad/s* or *deg/s*

    Examples:
        ```python
        from meanjax.constants import R_EARTH
        from meanjax.orbits import mean_motion
        n = mean_motion(R_EARTH + 500e3)
        ```
    """
    (a,) = _as_float(a)
    return from_radians(jnp.sqrt(gm / jnp.abs(a) ** 3), use_degrees)


def semimajor_axis(n: ArrayLike, gm: float = GM_EARTH, use_degrees: bool = False) -> Array:
    """Semi-major axis with the given mean motion (inverse of :func:`mean_motion`)."""
    (n,) = _as_float(n)
    n = to_radians(n, use_degrees)
    return jnp.cbrt(gm / (n * n))


def orbital_period(a: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Keplerian orbital period in seconds."""
    return _TWO_PI / mean_motion(a, gm)


def mean_motion_dot_wrt_a(a: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Partial derivative of the mean motion with respect to the
    semi-major axis, ``dn/da = -3n / (2a)``.

    This is the only off-diagonal entry of the Keplerian state transition
    matrix in equinoctial or circular elements: after ``dt`` seconds a
    semi-major axis error ``da`` shows up as ``dn/da * da * dt`` in the
    mean angle.

    Args:
        a: Semi-major axis. Units: *m*
        gm: Central attraction coefficient. Units: *m^3/s^2*

    Returns:
        ``dn/da``. Units: *rad/s/m*
    """
    (a,) = _as_float(a)
    return -1.5 * mean_motion(a, gm) / a


# ──────────────────────────────────────────────
# Anomaly conversions
# ──────────────────────────────────────────────


def anomaly_eccentric_to_mean(anm_ecc: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    """Mean anomaly from Kepler's equation, ``M = E - e sin E``."""
    E, e = _as_float(anm_ecc, e)
    E = to_radians(E, use_degrees)
    return from_radians(E - e * jnp.sin(E), use_degrees)


def anomaly_mean_to_eccentric(anm_mean: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    """Solve Kepler's equation ``M = E - e sin E`` for the eccentric anomaly.

    Newton-Raphson from Danby's starter ``E0 = M + 0.85 e sign(sin M)``,
    applied to the mean anomaly reduced to ``[-pi, pi)``.  The removed
    whole turns are added back, so the result follows ``M`` continuously
    and ``E - M`` never exceeds ``e``.

    Args:
        anm_mean: Mean anomaly. Units: *rad* or *deg*
        e: Eccentricity, ``0 <= e < 1``.
        use_degrees: If ``True``, input and output are in degrees.

    Returns:
        Eccentric anomaly. Units: *rad* or *deg*

    Examples:
        ```python
        from meanjax.orbits import anomaly_mean_to_eccentric
        E = anomaly_mean_to_eccentric(84.27, 0.1, use_degrees=True)
        ```
    """
    M, e = _as_float(anm_mean, e)
    M = to_radians(M, use_degrees)
    offset = _TWO_PI * jnp.floor((M + jnp.pi) / _TWO_PI)
    m = M - offset

    def newton(_, E):
        return E - (E - e * jnp.sin(E) - m) / (1.0 - e * jnp.cos(E))

    E = jax.lax.fori_loop(0, KEPLER_ITERATIONS, newton, m + 0.85 * e * jnp.sign(jnp.sin(m)))
    return from_radians(E + offset, use_degrees)


def anomaly_true_to_eccentric(anm_true: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    """Eccentric anomaly from the true anomaly, in ``(-pi, pi]``."""
    nu, e = _as_float(anm_true, e)
    nu = to_radians(nu, use_degrees)
    E = jnp.arctan2(jnp.sqrt(1.0 - e * e) * jnp.sin(nu), e + jnp.cos(nu))
    return from_radians(E, use_degrees)


def anomaly_eccentric_to_true(anm_ecc: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    """True anomaly from the eccentric anomaly, in ``(-pi, pi]``."""
    E, e = _as_float(anm_ecc, e)
    E = to_radians(E, use_degrees)
    nu = jnp.arctan2(jnp.sqrt(1.0 - e * e) * jnp.sin(E), jnp.cos(E) - e)
    return from_radians(nu, use_degrees)


def anomaly_true_to_mean(anm_true: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    E = anomaly_true_to_eccentric(anm_true, e, use_degrees)
    return anomaly_eccentric_to_mean(E, e, use_degrees)


def anomaly_mean_to_true(anm_mean: ArrayLike, e: ArrayLike, use_degrees: bool = False) -> Array:
    E = anomaly_mean_to_eccentric(anm_mean, e, use_degrees)
    return anomaly_eccentric_to_true(E, e, use_degrees)
