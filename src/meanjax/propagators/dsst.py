"""Semi-analytical zonal propagator.

The mean equinoctial elements are integrated with a fixed-step RK4 under
the orbit-averaged zonal equations of
:func:`~meanjax.theories.dsst_zonal_mean_rates`; the averaged dynamics
are slow, so steps of an hour or more are accurate.  The osculating orbit
adds the short-periodic terms of :class:`~meanjax.theories.DSSTZonalTheory`
at the target epoch.
"""

from __future__ import annotations

import jax
from jax import Array

from meanjax.converters import MeanElementsConverter
from meanjax.epoch import Epoch
from meanjax.integrators import rk4_integrate
from meanjax.orbit import Orbit
from meanjax.orbit_dynamics import ZonalHarmonics
from meanjax.propagators._base import AnalyticalPropagator, PropagationType
from meanjax.theories import AveragedElements, DSSTZonalTheory, MeanOrbit
from meanjax.theories.dsst import DEFAULT_SAMPLES
from meanjax.utils import normalize_angle


class DSSTZonalPropagator(AnalyticalPropagator):
    """Mean element propagator under the zonal harmonics.

    Args:
        initial_orbit: Initial orbit.
        field: Zonal gravity field, EIGEN-5C by default.
        n_samples: Mean longitude samples per revolution.
        step: Largest integration step of the mean equations. Units: *s*
        propagation_type: Whether *initial_orbit* holds osculating or mean
            elements.
        converter: Converter for osculating initial orbits.

    Raises:
        ValueError: If *step* is not positive.
    """

    def __init__(
        self,
        initial_orbit: Orbit,
        field: ZonalHarmonics | None = None,
        n_samples: int = DEFAULT_SAMPLES,
        step: float = 3600.0,
        propagation_type: PropagationType = PropagationType.OSCULATING,
        converter: MeanElementsConverter | None = None,
    ) -> None:
        if step <= 0.0:
            raise ValueError(f"Integration step must be positive, got {step}")
        self.step = float(step)
        theory = DSSTZonalTheory(field, n_samples)
        self._rates = jax.jit(lambda t, x: theory.mean_rates(x))
        super().__init__(initial_orbit, theory, propagation_type, converter)

    def _integrate(self, mean: Array, dt: float) -> Array:
        x = rk4_integrate(self._rates, 0.0, mean, dt, self.step)
        return x.at[5].set(normalize_angle(x[5], 0.0))

    def _osculating_elements(self, mean: Array, dt: float) -> Array:
        return self.theory.kernel(self._integrate(mean, dt))

    def propagate_mean(self, epoch: Epoch) -> MeanOrbit:
        """Mean state at *epoch*, by numerical integration."""
        dt = float(epoch - self._mean.epoch)
        return MeanOrbit(
            AveragedElements(self._integrate(self._mean.elements, dt), self.theory.element_type),
            epoch, self.theory, self._mean.frame,
        )

    def propagate(self, epoch: Epoch) -> Orbit:
        """Osculating orbit at *epoch*."""
        mean = self.propagate_mean(epoch)
        return self.theory.osculating_from_averaged(mean.averaged, epoch, mean.frame)
