"""Semi-analytical zonal theory in the spirit of DSST.

The Draper Semi-analytical Satellite Theory splits the motion into mean
equinoctial elements, driven by orbit-averaged equations of motion, and
short-periodic terms that depend on the fast mean longitude.  Here both
parts are obtained for the zonal harmonics by sampling the Gauss
variational equations around one revolution of mean longitude:

- the zeroth Fourier harmonic of the element rates gives the averaged
  rates that drive the mean elements;
- the higher harmonics, integrated analytically over the mean longitude,
  give the first-order short-periodic corrections.  The correction to the
  mean longitude also includes the effect of the periodic semi-major axis
  on the mean motion.

The Gauss equations themselves are ``d(elements)/d(velocity)`` (by
``jax.jacfwd``) applied to the zonal acceleration (by ``jax.grad`` of the
zonal potential), so the whole map stays differentiable.

References:
    1. P. J. Cefola, "Equinoctial orbit elements: application to
       artificial satellite orbits", AIAA 72-937, 1972.
    2. D. A. Danielson et al., "Semianalytic Satellite Theory", Naval
       Postgraduate School report NPS-MA-95-002, 1995.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.coordinates import state_eci_to_eqn, state_eqn_to_eci
from meanjax.orbit import OrbitType
from meanjax.orbit_dynamics import ZonalHarmonics, accel_zonal
from meanjax.orbits import mean_motion
from meanjax.theories._base import AnalyticalTheory
from meanjax.utils import normalize_angle

DEFAULT_SAMPLES = 64


def _gauss_rates(x_eq: Array, field: ZonalHarmonics) -> Array:
    """Rates of the equinoctial elements caused by the zonal acceleration
    (Keplerian mean motion excluded)."""
    state = state_eqn_to_eci(x_eq, field.gm)
    jac = jax.jacfwd(lambda s: state_eci_to_eqn(s, field.gm))(state)
    return jac[:, 3:] @ accel_zonal(state[:3], field)


def _sampled_rates(mean: Array, field: ZonalHarmonics, n_samples: int) -> Array:
    """Element rates at ``n_samples`` equally spaced mean longitudes,
    shape ``(n_samples, 6)``."""
    lam = 2.0 * jnp.pi * jnp.arange(n_samples, dtype=mean.dtype) / n_samples
    samples = jnp.tile(mean, (n_samples, 1)).at[:, 5].set(lam)
    return jax.vmap(lambda x: _gauss_rates(x, field))(samples)


def dsst_zonal_mean_rates(
    mean: ArrayLike,
    field: ZonalHarmonics,
    n_samples: int = DEFAULT_SAMPLES,
) -> Array:
    """Averaged rates of the mean equinoctial elements.

    Args:
        mean: Mean equinoctial elements ``[a, ex, ey, hx, hy, lM]``.
        field: Zonal gravity field.
        n_samples: Number of mean longitude samples per revolution.

    Returns:
        Element rates, including the Keplerian mean motion in the mean
        longitude rate. Units: *m/s*, *1/s*, *rad/s*
    """
    mean = jnp.asarray(mean, dtype=get_dtype())
    rates = jnp.mean(_sampled_rates(mean, field, n_samples), axis=0)
    return rates.at[5].add(mean_motion(mean[0], field.gm))


def dsst_zonal_short_periodic(
    mean: ArrayLike,
    field: ZonalHarmonics,
    n_samples: int = DEFAULT_SAMPLES,
) -> Array:
    """First-order short-periodic corrections at the mean longitude of
    *mean*.

    With ``F_m`` the m-th Fourier coefficient of the element rates over
    the mean longitude, the corrections are
    ``eta = sum_m 2 Re(F_m / (i m n) exp(i m lM))`` plus, for the mean
    longitude, the integral of ``dn/da * eta_a``.

    Args:
        mean: Mean equinoctial elements ``[a, ex, ey, hx, hy, lM]``.
        field: Zonal gravity field.
        n_samples: Number of mean longitude samples per revolution.

    Returns:
        Corrections to add to the mean elements.
    """
    mean = jnp.asarray(mean, dtype=get_dtype())
    rates = _sampled_rates(mean, field, n_samples)
    coeffs = jnp.fft.rfft(rates, axis=0) / n_samples

    # Nyquist harmonic dropped
    m = jnp.arange(1, n_samples // 2, dtype=mean.dtype)
    fm = coeffs[1:n_samples // 2]
    n = mean_motion(mean[0], field.gm)

    eta = fm / (1j * m[:, None] * n)
    eta_lambda = -1.5 * n / mean[0] * eta[:, 0] / (1j * m * n)
    eta = eta.at[:, 5].add(eta_lambda)

    phase = jnp.exp(1j * m * mean[5])
    return 2.0 * jnp.real(jnp.sum(eta * phase[:, None], axis=0))


def dsst_zonal_osculating(
    mean: ArrayLike,
    field: ZonalHarmonics,
    n_samples: int = DEFAULT_SAMPLES,
) -> Array:
    """Osculating equinoctial elements described by mean elements.

    Args:
        mean: Mean equinoctial elements ``[a, ex, ey, hx, hy, lM]``.
        field: Zonal gravity field.
        n_samples: Number of mean longitude samples per revolution.

    Returns:
        Osculating equinoctial elements.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax.orbit_dynamics import ZonalHarmonics
        from meanjax.theories import dsst_zonal_osculating
        mean = jnp.array([7.0e6, 1e-3, 0.0, 0.5, 0.0, 0.3])
        osc = dsst_zonal_osculating(mean, ZonalHarmonics.eigen5c())
        ```
    """
    mean = jnp.asarray(mean, dtype=get_dtype())
    osc = mean + dsst_zonal_short_periodic(mean, field, n_samples)
    return osc.at[5].set(normalize_angle(osc[5], 0.0))


class DSSTZonalTheory(AnalyticalTheory):
    """Semi-analytical zonal theory in equinoctial elements.

    Args:
        field: Zonal gravity field; every degree it holds is used.
        n_samples: Number of mean longitude samples per revolution. Must
            be even and at least 8.

    Raises:
        ValueError: If *n_samples* is invalid.
    """

    name = "DSST zonal"
    element_type = OrbitType.EQUINOCTIAL

    def __init__(
        self,
        field: ZonalHarmonics | None = None,
        n_samples: int = DEFAULT_SAMPLES,
    ) -> None:
        if n_samples < 8 or n_samples % 2:
            raise ValueError(f"n_samples must be an even number >= 8, got {n_samples}")
        self.field = field if field is not None else ZonalHarmonics.eigen5c()
        self.n_samples = n_samples
        super().__init__(self.field.radius, self.field.gm)

    def _parameters(self) -> tuple:
        return (self.field, self.n_samples)

    def kernel(self, mean: Array) -> Array:
        return dsst_zonal_osculating(mean, self.field, self.n_samples)

    def mean_rates(self, mean: ArrayLike) -> Array:
        """Averaged element rates, see :func:`dsst_zonal_mean_rates`."""
        return dsst_zonal_mean_rates(mean, self.field, self.n_samples)
