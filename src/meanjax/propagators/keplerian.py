"""Two-body propagator."""

from __future__ import annotations

from meanjax.orbit import Orbit
from meanjax.propagators._base import AnalyticalPropagator, PropagationType
from meanjax.theories import KeplerianTheory


class KeplerianPropagator(AnalyticalPropagator):
    """Keplerian motion in equinoctial elements.

    Mean and osculating elements coincide, so the propagation type only
    matters for symmetry with the other propagators.

    Args:
        initial_orbit: Initial orbit; its central attraction coefficient
            is used.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax import Epoch, Orbit, OrbitType
        from meanjax.propagators import KeplerianPropagator
        orbit = Orbit(jnp.array([7e6, 0.01, 1.0, 0.0, 0.0, 0.0]),
                      OrbitType.KEPLERIAN, Epoch(2024, 1, 1))
        KeplerianPropagator(orbit).propagate(Epoch(2024, 1, 1, 1, 0, 0))
        ```
    """

    def __init__(
        self,
        initial_orbit: Orbit,
        propagation_type: PropagationType = PropagationType.OSCULATING,
    ) -> None:
        super().__init__(initial_orbit, KeplerianTheory(initial_orbit.gm), propagation_type)
