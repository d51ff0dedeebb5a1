"""Keplerian theory: the two-body limit in which mean and osculating
elements coincide.

It backs :class:`meanjax.propagators.KeplerianPropagator` and gives the
converters a baseline that must converge in a single iteration.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.constants import GM_EARTH
from meanjax.orbit import OrbitType
from meanjax.orbits import mean_motion
from meanjax.theories._base import AnalyticalTheory
from meanjax.utils import normalize_angle


class KeplerianTheory(AnalyticalTheory):
    """Two-body theory in equinoctial elements.

    Args:
        mu: Central attraction coefficient. Units: *m^3/s^2*
    """

    name = "Keplerian"
    element_type = OrbitType.EQUINOCTIAL

    def __init__(self, mu: float = GM_EARTH) -> None:
        super().__init__(0.0, mu)

    def kernel(self, mean: Array) -> Array:
        return mean

    def propagate(self, mean: ArrayLike, dt: ArrayLike) -> Array:
        """Elements *dt* seconds after the epoch of *mean*."""
        return self.propagate_mean(mean, dt)

    def propagate_mean(self, mean: ArrayLike, dt: ArrayLike) -> Array:
        """Advance the mean longitude by ``n dt``."""
        mean = jnp.asarray(mean, dtype=get_dtype())
        lm = mean[5] + mean_motion(mean[0], self.mu) * dt
        return mean.at[5].set(normalize_angle(lm, 0.0))
