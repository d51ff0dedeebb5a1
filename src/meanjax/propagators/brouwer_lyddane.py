"""Brouwer-Lyddane analytical propagator."""

from __future__ import annotations

from meanjax.converters import MeanElementsConverter
from meanjax.orbit import Orbit
from meanjax.orbit_dynamics import ZonalHarmonics
from meanjax.propagators._base import AnalyticalPropagator, PropagationType
from meanjax.theories import BrouwerLyddaneTheory


class BrouwerLyddanePropagator(AnalyticalPropagator):
    """Brouwer-Lyddane propagator with optional empirical drag.

    The mean anomaly, perigee and node drift at their secular rates
    (with the quadratic ``M2`` drag term on the mean anomaly and the
    matching decay of ``a`` and ``e``); the osculating orbit adds the
    long- and short-period terms.

    Args:
        initial_orbit: Initial orbit.
        field: Zonal gravity field, EIGEN-5C by default.
        m2: Empirical drag coefficient. Units: *rad/s^2*
        propagation_type: Whether *initial_orbit* holds osculating or mean
            elements.
        converter: Converter for osculating initial orbits.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax import Epoch, Orbit, OrbitType
        from meanjax.propagators import BrouwerLyddanePropagator
        orbit = Orbit(jnp.array([7.2e6, 0.01, 1.2, 0.1, 0.2, 0.3]),
                      OrbitType.KEPLERIAN, Epoch(2024, 1, 1))
        prop = BrouwerLyddanePropagator(orbit)
        prop.propagate(Epoch(2024, 1, 2)).position
        ```
    """

    def __init__(
        self,
        initial_orbit: Orbit,
        field: ZonalHarmonics | None = None,
        m2: float = 0.0,
        propagation_type: PropagationType = PropagationType.OSCULATING,
        converter: MeanElementsConverter | None = None,
    ) -> None:
        theory = BrouwerLyddaneTheory(field, m2)
        super().__init__(initial_orbit, theory, propagation_type, converter)
