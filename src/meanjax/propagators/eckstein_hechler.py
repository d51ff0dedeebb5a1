"""Eckstein-Hechler analytical propagator."""

from __future__ import annotations

from meanjax.converters import MeanElementsConverter
from meanjax.orbit import Orbit
from meanjax.orbit_dynamics import ZonalHarmonics
from meanjax.propagators._base import AnalyticalPropagator, PropagationType
from meanjax.theories import EcksteinHechlerTheory


class EcksteinHechlerPropagator(AnalyticalPropagator):
    """Eckstein-Hechler propagator for near-circular orbits.

    Args:
        initial_orbit: Initial orbit.
        field: Zonal gravity field, EIGEN-5C by default.
        propagation_type: Whether *initial_orbit* holds osculating or mean
            elements.
        converter: Converter for osculating initial orbits.

    Raises:
        OrbitValidityError: If the mean orbit is too eccentric, almost
            equatorial or almost critically inclined.
    """

    def __init__(
        self,
        initial_orbit: Orbit,
        field: ZonalHarmonics | None = None,
        propagation_type: PropagationType = PropagationType.OSCULATING,
        converter: MeanElementsConverter | None = None,
    ) -> None:
        theory = EcksteinHechlerTheory(field)
        super().__init__(initial_orbit, theory, propagation_type, converter)
