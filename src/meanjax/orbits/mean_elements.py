"""Closed-form first-order J2 mapping between mean and osculating
Keplerian elements (Schaub & Junkins, *Analytical Mechanics of Space
Systems*, Appendix F).

The mapping is Brouwer's theory truncated to first order in J2.  The sign
of ``gamma_2`` selects the direction: ``+1`` adds the short- and
long-period terms (mean to osculating), ``-1`` removes them.  The two
directions invert each other only up to O(J2^2), which is why
:class:`~meanjax.theories.J2FirstOrderTheory` relies on the iterative
converters for the osculating-to-mean direction.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.constants import J2_EARTH, R_EARTH
from meanjax.orbits.keplerian import anomaly_eccentric_to_true, anomaly_mean_to_eccentric
from meanjax.utils import from_radians, normalize_angle, to_radians


def transform_koe_j2(
    oe: Array,
    sign: float,
    j2: float = J2_EARTH,
    radius: float = R_EARTH,
) -> Array:
    """First-order J2 transformation of Keplerian elements.

    Args:
        oe: Keplerian elements ``[a, e, i, RAAN, omega, M]``. Units: *m*, *rad*
        sign: ``+1.0`` mean to osculating, ``-1.0`` osculating to mean.
        j2: Un-normalized J2 coefficient (``-C20``).
        radius: Reference radius of the zonal field. Units: *m*

    Returns:
        Transformed Keplerian elements, angles in ``[0, 2 pi)``.
    """
    a, e, inc, raan, argp, m = (oe[k] for k in range(6))

    g2 = sign * 0.5 * j2 * (radius / a) ** 2
    e2 = e * e
    eta = jnp.sqrt(1.0 - e2)
    b2 = eta * eta
    g2p = g2 / (b2 * b2)

    f = anomaly_eccentric_to_true(anomaly_mean_to_eccentric(m, e), e)
    cf, sf = jnp.cos(f), jnp.sin(f)
    ar = (1.0 + e * cf) / b2
    ar3 = ar**3

    c = jnp.cos(inc)
    c2 = c * c
    s2 = 1.0 - c2
    # 1 - 5 cos^2 i, singular at the critical inclination
    q = 1.0 - 5.0 * c2
    k1 = 1.0 - 11.0 * c2 - 40.0 * c2 * c2 / q

    # sin/cos of 2 omega + j f, j = 1..3
    phase = [2.0 * argp + j * f for j in (1.0, 2.0, 3.0)]
    c1f, c2f, c3f = (jnp.cos(p) for p in phase)
    s1f, s2f, s3f = (jnp.sin(p) for p in phase)

    # Semi-major axis (F.7)
    a_out = a + a * g2 * (
        (3.0 * c2 - 1.0) * (ar3 - 1.0 / (b2 * eta)) + 3.0 * s2 * ar3 * c2f
    )

    # Eccentricity (F.8, F.9)
    de1 = g2p / 8.0 * e * b2 * k1 * jnp.cos(2.0 * argp)
    poly = 3.0 * cf + 3.0 * e * cf * cf + e2 * cf**3
    b6 = b2 * b2 * b2
    de = de1 + 0.5 * b2 * (
        g2 * ((3.0 * c2 - 1.0) / b6 * (e * eta + e / (1.0 + eta) + poly)
              + 3.0 * s2 / b6 * (e + poly) * c2f)
        - g2p * s2 * (3.0 * c1f + c3f)
    )

    # Inclination (F.10)
    di = (-e * de1 / (b2 * jnp.tan(inc))
          + 0.5 * g2p * c * jnp.sqrt(s2) * (3.0 * c2f + 3.0 * e * c1f + e * c3f))

    # Node (F.13); its two terms also enter the mean longitude below
    centre = f - m + e * sf
    node_secular = -g2p / 8.0 * e2 * c * (11.0 + 80.0 * c2 / q + 200.0 * c2 * c2 / (q * q))
    node_periodic = -0.5 * g2p * c * (6.0 * centre - 3.0 * s2f - 3.0 * e * s1f - e * s3f)
    draan = node_secular + node_periodic

    # M + omega + RAAN (F.11)
    lon = (
        m + argp + raan
        + g2p / 8.0 * b2 * eta * k1
        - g2p / 16.0 * (
            2.0 + e2
            - 11.0 * (2.0 + 3.0 * e2) * c2
            - 40.0 * (2.0 + 5.0 * e2) * c2 * c2 / q
            - 400.0 * e2 * c2**3 / (q * q)
        )
        + g2p / 4.0 * (-6.0 * q * centre + (3.0 - 5.0 * c2) * (3.0 * s2f + 3.0 * e * s1f + e * s3f))
        + draan
    )

    # e * dM (F.12)
    r2 = (ar * eta) ** 2
    edm = g2p / 8.0 * e * b2 * eta * k1 - g2p / 4.0 * b2 * eta * (
        2.0 * (3.0 * c2 - 1.0) * (r2 + ar + 1.0) * sf
        + 3.0 * s2 * ((1.0 - r2 - ar) * s1f + (r2 + ar + 1.0 / 3.0) * s3f)
    )

    # Recover the elements from the perturbed eccentricity and node
    # vectors (F.14-F.22)
    sm, cm = jnp.sin(m), jnp.cos(m)
    ev1 = (e + de) * sm + edm * cm
    ev2 = (e + de) * cm - edm * sm
    m_out = jnp.arctan2(ev1, ev2)

    sh, ch = jnp.sin(0.5 * inc), jnp.cos(0.5 * inc)
    sn, cn = jnp.sin(raan), jnp.cos(raan)
    hv1 = (sh + 0.5 * ch * di) * sn + sh * draan * cn
    hv2 = (sh + 0.5 * ch * di) * cn - sh * draan * sn
    raan_out = jnp.arctan2(hv1, hv2)

    return jnp.array([
        a_out,
        jnp.hypot(ev1, ev2),
        2.0 * jnp.arcsin(jnp.hypot(hv1, hv2)),
        normalize_angle(raan_out, jnp.pi),
        normalize_angle(lon - m_out - raan_out, jnp.pi),
        normalize_angle(m_out, jnp.pi),
    ])


def _map(oe: ArrayLike, sign: float, use_degrees: bool, j2: float, radius: float) -> Array:
    oe = jnp.asarray(oe, dtype=get_dtype())
    x = oe.at[2:].set(to_radians(oe[2:], use_degrees))
    out = transform_koe_j2(x, sign, j2, radius)
    return out.at[2:].set(from_radians(out[2:], use_degrees))


def state_koe_osc_to_mean(
    oe: ArrayLike,
    use_degrees: bool = False,
    j2: float = J2_EARTH,
    radius: float = R_EARTH,
) -> Array:
    """Direct (non-iterative) first-order estimate of the mean Keplerian
    elements of an osculating orbit.

    Args:
        oe: Osculating elements ``[a, e, i, RAAN, omega, M]``.
        use_degrees: Angles in degrees instead of radians.
        j2: Un-normalized J2 coefficient.
        radius: Reference radius of the zonal field. Units: *m*

    Returns:
        Mean elements, same units as *oe*.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax.orbits import state_koe_osc_to_mean
        mean = state_koe_osc_to_mean(jnp.array([6.9e6, 0.001, 45.0, 0.0, 0.0, 0.0]),
                                     use_degrees=True)
        ```
    """
    return _map(oe, -1.0, use_degrees, j2, radius)


def state_koe_mean_to_osc(
    oe: ArrayLike,
    use_degrees: bool = False,
    j2: float = J2_EARTH,
    radius: float = R_EARTH,
) -> Array:
    """Osculating Keplerian elements of mean elements, first order in J2."""
    return _map(oe, +1.0, use_degrees, j2, radius)
