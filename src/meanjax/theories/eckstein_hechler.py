"""Eckstein-Hechler mean element theory.

First-order analytical theory for near-circular orbits under the zonal
harmonics C20 to C60, written in circular elements
``[a, ex, ey, i, RAAN, alphaM]``.  It is singular for equatorial orbits
and at the critical inclinations, and its accuracy degrades quickly
once the eccentricity exceeds about 0.005.

References:
    1. M. C. Eckstein and F. Hechler, "A reliable derivation of the
       perturbations due to any zonal and tesseral harmonics of the
       geopotential for nearly-circular satellite orbits", ESRO SR-13,
       1970.
"""

from __future__ import annotations

import logging
import math

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.errors import OrbitValidityError
from meanjax.orbit import OrbitType
from meanjax.orbit_dynamics import ZonalHarmonics
from meanjax.theories._base import AnalyticalTheory
from meanjax.utils import normalize_angle

logger = logging.getLogger(__name__)

# Critical inclinations (1 - 5 cos^2 i = 0)
_CRITICAL_PROGRADE = 1.1071487
_CRITICAL_RETROGRADE = 2.0344439


def _zonal_factors(a: Array, field: ZonalHarmonics) -> tuple[Array, ...]:
    """``g_n = C_n0 (R / a)^n`` for n = 2..6."""
    q = field.radius / a
    ql = q * q
    g = []
    for n in range(2, 7):
        g.append(field.cn0(n) * ql)
        ql = ql * q
    return tuple(g)


def _secular(mean: Array, field: ZonalHarmonics, dt: ArrayLike):
    a, ex, ey, inc, raan, alpha = (mean[k] for k in range(6))
    g2, g3, g4, g5, g6 = _zonal_factors(a, field)

    cos_i1 = jnp.cos(inc)
    sin_i1 = jnp.sin(inc)
    sin_i2 = sin_i1 * sin_i1
    sin_i4 = sin_i2 * sin_i2
    sin_i6 = sin_i2 * sin_i4

    xnot = dt * jnp.sqrt(field.gm / a) / a

    # Eccentricity vector
    rdpom = -0.75 * g2 * (4.0 - 5.0 * sin_i2)
    rdpomp = (7.5 * g4 * (1.0 - 31.0 / 8.0 * sin_i2 + 49.0 / 16.0 * sin_i4)
              - 13.125 * g6 * (1.0 - 8.0 * sin_i2 + 129.0 / 8.0 * sin_i4 - 297.0 / 32.0 * sin_i6))
    x = (rdpom + rdpomp) * xnot
    cx = jnp.cos(x)
    sx = jnp.sin(x)
    q = 3.0 / (32.0 * rdpom)
    eps1 = (q * g4 * sin_i2 * (30.0 - 35.0 * sin_i2)
            - 175.0 * q * g6 * sin_i2 * (1.0 - 3.0 * sin_i2 + 2.0625 * sin_i4))
    q = 3.0 * sin_i1 / (8.0 * rdpom)
    eps2 = q * g3 * (4.0 - 5.0 * sin_i2) - q * g5 * (10.0 - 35.0 * sin_i2 + 26.25 * sin_i4)
    exm = ex * cx - (1.0 - eps1) * ey * sx + eps2 * sx
    eym = (1.0 + eps1) * ex * sx + (ey - eps2) * cx + eps2

    # Node
    q = (1.50 * g2 - 2.25 * g2 * g2 * (2.5 - 19.0 / 6.0 * sin_i2)
         + 0.9375 * g4 * (7.0 * sin_i2 - 4.0)
         + 3.28125 * g6 * (2.0 - 9.0 * sin_i2 + 8.25 * sin_i4))
    omm = normalize_angle(raan + q * cos_i1 * xnot, jnp.pi)

    # Argument of latitude
    rdl = 1.0 - 1.50 * g2 * (3.0 - 4.0 * sin_i2)
    q = (rdl
         + 2.25 * g2 * g2 * (9.0 - 263.0 / 12.0 * sin_i2 + 341.0 / 24.0 * sin_i4)
         + 15.0 / 16.0 * g4 * (8.0 - 31.0 * sin_i2 + 24.5 * sin_i4)
         + 105.0 / 32.0 * g6 * (-10.0 / 3.0 + 25.0 * sin_i2 - 48.75 * sin_i4 + 27.5 * sin_i6))
    xlm = normalize_angle(alpha + q * xnot, jnp.pi)

    return exm, eym, omm, xlm, rdl, rdpom, eps2


def eckstein_hechler_mean(
    mean: ArrayLike,
    dt: ArrayLike,
    field: ZonalHarmonics,
) -> Array:
    """Propagate Eckstein-Hechler mean elements by their secular rates.

    Args:
        mean: Mean circular elements ``[a, ex, ey, i, RAAN, alphaM]``.
        dt: Time since the epoch of *mean*. Units: *s*
        field: Zonal field; degrees 2 to 6 are used.

    Returns:
        Mean circular elements after *dt* seconds.
    """
    mean = jnp.asarray(mean, dtype=get_dtype())
    exm, eym, omm, xlm, _, _, _ = _secular(mean, field, dt)
    return jnp.array([mean[0], exm, eym, mean[3], omm, xlm])


def eckstein_hechler_osculating(
    mean: ArrayLike,
    dt: ArrayLike,
    field: ZonalHarmonics,
) -> Array:
    """Osculating circular elements described by Eckstein-Hechler mean
    elements, *dt* seconds after their epoch.

    Args:
        mean: Mean circular elements ``[a, ex, ey, i, RAAN, alphaM]``.
            Units: *m*, *rad*
        dt: Time since the epoch of *mean*. Units: *s*
        field: Zonal field; degrees 2 to 6 are used.

    Returns:
        Osculating circular elements ``[a, ex, ey, i, RAAN, alphaM]``.
    """
    mean = jnp.asarray(mean, dtype=get_dtype())
    a = mean[0]
    xim = mean[3]
    g2, g3, g4, g5, g6 = _zonal_factors(a, field)
    cos_i1 = jnp.cos(xim)
    sin_i1 = jnp.sin(xim)
    sin_i2 = sin_i1 * sin_i1
    sin_i4 = sin_i2 * sin_i2
    sin_i6 = sin_i2 * sin_i4

    exm, eym, omm, xlm, rdl, rdpom, eps2 = _secular(mean, field, dt)

    # Harmonics of the mean argument of latitude
    cl1 = jnp.cos(xlm)
    sl1 = jnp.sin(xlm)
    cl2 = cl1 * cl1 - sl1 * sl1
    sl2 = 2.0 * cl1 * sl1
    cl3 = cl2 * cl1 - sl2 * sl1
    sl3 = cl2 * sl1 + sl2 * cl1
    cl4 = cl3 * cl1 - sl3 * sl1
    sl4 = cl3 * sl1 + sl3 * cl1
    cl5 = cl4 * cl1 - sl4 * sl1
    sl5 = cl4 * sl1 + sl4 * cl1
    cl6 = cl5 * cl1 - sl5 * sl1

    qq = -1.5 * g2 / rdl
    qh = 0.375 * (eym - eps2) / rdpom
    ql = 0.375 * exm / (sin_i1 * rdpom)

    # Semi-major axis
    f = ((2.0 - 3.5 * sin_i2) * exm * cl1
         + (2.0 - 2.5 * sin_i2) * eym * sl1
         + sin_i2 * cl2
         + 3.5 * sin_i2 * (exm * cl3 + eym * sl3))
    rda = qq * f
    rda += 0.75 * g2 * g2 * sin_i2 * (7.0 * (2.0 - 3.0 * sin_i2) * cl2 + sin_i2 * cl4)
    rda += -0.75 * g3 * sin_i1 * ((4.0 - 5.0 * sin_i2) * sl1 + 5.0 / 3.0 * sin_i2 * sl3)
    rda += 0.25 * g4 * sin_i2 * ((15.0 - 17.5 * sin_i2) * cl2 + 4.375 * sin_i2 * cl4)
    rda += 3.75 * g5 * sin_i1 * ((2.625 * sin_i4 - 3.5 * sin_i2 + 1.0) * sl1
                                 + 7.0 / 6.0 * sin_i2 * (1.0 - 1.125 * sin_i2) * sl3
                                 + 21.0 / 80.0 * sin_i4 * sl5)
    rda += 105.0 / 16.0 * g6 * sin_i2 * ((3.0 * sin_i2 - 1.0 - 33.0 / 16.0 * sin_i4) * cl2
                                         + 0.75 * (1.1 * sin_i4 - sin_i2) * cl4
                                         - 11.0 / 80.0 * sin_i4 * cl6)

    # Eccentricity vector
    f = ((1.0 - 1.25 * sin_i2) * cl1
         + 0.5 * (3.0 - 5.0 * sin_i2) * exm * cl2
         + (2.0 - 1.5 * sin_i2) * eym * sl2
         + 7.0 / 12.0 * sin_i2 * cl3
         + 17.0 / 8.0 * sin_i2 * (exm * cl4 + eym * sl4))
    rdex = qq * f

    f = ((1.0 - 1.75 * sin_i2) * sl1
         + (1.0 - 3.0 * sin_i2) * exm * sl2
         + (2.0 * sin_i2 - 1.5) * eym * cl2
         + 7.0 / 12.0 * sin_i2 * sl3
         + 17.0 / 8.0 * sin_i2 * (exm * sl4 - eym * cl4))
    rdey = qq * f

    # Node
    f = (3.5 * exm * sl1 - 2.5 * eym * cl1 - 0.5 * sl2
         + 7.0 / 6.0 * (eym * cl3 - exm * sl3))
    rdom = -qq * cos_i1 * f
    rdom += ql * g3 * cos_i1 * (4.0 - 15.0 * sin_i2)
    rdom -= ql * 2.5 * g5 * cos_i1 * (4.0 - 42.0 * sin_i2 + 52.5 * sin_i4)

    # Inclination
    f = eym * sl1 - exm * cl1 + cl2 + 7.0 / 3.0 * (exm * cl3 + eym * sl3)
    rdxi = 0.5 * qq * sin_i1 * cos_i1 * f
    rdxi -= qh * g3 * cos_i1 * (4.0 - 5.0 * sin_i2)
    rdxi += qh * 2.5 * g5 * cos_i1 * (4.0 - 14.0 * sin_i2 + 10.5 * sin_i4)

    # Argument of latitude
    f = ((7.0 - 77.0 / 8.0 * sin_i2) * exm * sl1
         + (55.0 / 8.0 * sin_i2 - 7.50) * eym * cl1
         + (1.25 * sin_i2 - 0.5) * sl2
         + (77.0 / 24.0 * sin_i2 - 7.0 / 6.0) * (exm * sl3 - eym * cl3))
    rdxl = qq * f
    rdxl += ql * g3 * (53.0 * sin_i2 - 4.0 - 57.5 * sin_i4)
    rdxl += ql * 2.5 * g5 * (4.0 - 96.0 * sin_i2 + 269.5 * sin_i4 - 183.75 * sin_i6)

    return jnp.array([
        a * (1.0 + rda),
        exm + rdex,
        eym + rdey,
        xim + rdxi,
        normalize_angle(omm + rdom, jnp.pi),
        normalize_angle(xlm + rdxl, jnp.pi),
    ])


class EcksteinHechlerTheory(AnalyticalTheory):
    """Eckstein-Hechler mean element theory.

    Args:
        field: Zonal gravity field. Degrees above 6 are ignored.

    Examples:
        ```python
        from meanjax.orbit_dynamics import ZonalHarmonics
        from meanjax.theories import EcksteinHechlerTheory
        theory = EcksteinHechlerTheory(ZonalHarmonics.eigen5c())
        ```
    """

    name = "Eckstein-Hechler"
    element_type = OrbitType.CIRCULAR

    def __init__(self, field: ZonalHarmonics | None = None) -> None:
        self.field = field if field is not None else ZonalHarmonics.eigen5c()
        super().__init__(self.field.radius, self.field.gm)

    def _parameters(self) -> tuple:
        return (self.field,)

    def post_check(self, mean: Array) -> None:
        """Check the converged mean elements against the theory's domain.

        Raises:
            OrbitValidityError: If the orbit is too eccentric, almost
                equatorial or almost critically inclined.
        """
        e = math.hypot(float(mean[1]), float(mean[2]))
        if e > 0.1:
            raise OrbitValidityError(self.name, f"too eccentric orbit (e = {e})")
        if e > 0.005:
            logger.warning(
                "Eckstein-Hechler accuracy is poor for e = %.4f (valid for e < 0.005)", e
            )

        inc = float(mean[3])
        if inc < 0.0 or inc > math.pi or abs(math.sin(inc)) < 1.0e-10:
            raise OrbitValidityError(
                self.name, f"almost equatorial orbit (i = {math.degrees(inc)} degrees)"
            )
        if (abs(inc - _CRITICAL_PROGRADE) < 1.0e-3
                or abs(inc - _CRITICAL_RETROGRADE) < 1.0e-3):
            raise OrbitValidityError(
                self.name, f"almost critically inclined orbit (i = {math.degrees(inc)} degrees)"
            )

    def kernel(self, mean: Array) -> Array:
        return eckstein_hechler_osculating(mean, 0.0, self.field)

    def propagate(self, mean: ArrayLike, dt: ArrayLike) -> Array:
        """Osculating elements *dt* seconds after the epoch of *mean*."""
        return eckstein_hechler_osculating(mean, dt, self.field)

    def propagate_mean(self, mean: ArrayLike, dt: ArrayLike) -> Array:
        """Mean elements *dt* seconds after the epoch of *mean*."""
        return eckstein_hechler_mean(mean, dt, self.field)
