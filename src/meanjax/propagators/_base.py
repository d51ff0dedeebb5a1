"""Base class of the analytical and semi-analytical propagators.

A propagator holds the mean state of its initial orbit.  The initial
orbit is either given directly as mean elements or, by default, obtained
from an osculating orbit with a converter.  Propagating means moving the
mean elements by the theory's secular dynamics and, for the osculating
output, expanding them with the theory's periodic terms.
"""

from __future__ import annotations

import enum
import logging

import jax
import jax.numpy as jnp
from jax import Array

from meanjax.converters import FixedPointConverter, MeanElementsConverter
from meanjax.epoch import Epoch
from meanjax.orbit import Orbit, OrbitType, convert_elements
from meanjax.theories import AveragedElements, MeanOrbit, MeanTheory

logger = logging.getLogger(__name__)


class PropagationType(enum.Enum):
    """How the elements of an initial orbit are to be read."""

    MEAN = "mean"
    OSCULATING = "osculating"


class AnalyticalPropagator:
    """Propagator driven by a theory exposing ``propagate(mean, dt)`` and
    ``propagate_mean(mean, dt)``.

    Both theory maps are JIT-compiled once per propagator, with the time
    offset as a traced argument.

    Args:
        initial_orbit: Initial orbit.
        theory: Mean element theory.
        propagation_type: Whether *initial_orbit* holds osculating or mean
            elements.
        converter: Converter used for osculating initial orbits.
            Defaults to a :class:`~meanjax.converters.FixedPointConverter`
            on *theory*.

    Raises:
        ValueError: If *converter* inverts a theory other than *theory*.
    """

    def __init__(
        self,
        initial_orbit: Orbit,
        theory: MeanTheory,
        propagation_type: PropagationType = PropagationType.OSCULATING,
        converter: MeanElementsConverter | None = None,
    ) -> None:
        if converter is None:
            converter = FixedPointConverter(theory)
        elif converter.theory != theory:
            raise ValueError(
                f"Converter inverts {converter.theory!r}, expected {theory!r}"
            )
        self.theory = theory
        self.converter = converter
        self._propagate_osc = jax.jit(self._osculating_elements)
        self._propagate_mean = jax.jit(self._mean_elements)
        self.reset_initial_state(initial_orbit, propagation_type)

    def reset_initial_state(
        self,
        orbit: Orbit,
        propagation_type: PropagationType = PropagationType.OSCULATING,
    ) -> None:
        """Replace the initial state of the propagator.

        Args:
            orbit: New initial orbit.
            propagation_type: Whether *orbit* holds osculating or mean
                elements.

        Raises:
            ConvergenceError: If the osculating-to-mean conversion fails.
            OrbitValidityError: If the theory rejects the orbit.
        """
        theory = self.theory
        if propagation_type is PropagationType.OSCULATING:
            self._mean = self.converter.convert_to_mean(orbit)
        else:
            theory.pre_check(orbit)
            averaged = AveragedElements.from_orbit(orbit).to_type(theory.element_type, theory.mu)
            theory.check_elements(averaged.elements)
            theory.post_check(averaged.elements)
            self._mean = MeanOrbit(averaged, orbit.epoch, theory, orbit.frame)
        logger.debug("%s initial mean state: %r", type(self).__name__, self._mean)

    @property
    def initial_mean(self) -> MeanOrbit:
        """Mean state at the initial epoch."""
        return self._mean

    @property
    def initial_epoch(self) -> Epoch:
        return self._mean.epoch

    # Theory maps, overridden by the semi-analytical propagators

    def _mean_elements(self, mean: Array, dt: Array) -> Array:
        return self.theory.propagate_mean(mean, dt)

    def _osculating_elements(self, mean: Array, dt: Array) -> Array:
        return self.theory.propagate(mean, dt)

    def propagate_mean(self, epoch: Epoch) -> MeanOrbit:
        """Mean state at *epoch*.

        Args:
            epoch: Target epoch; may precede the initial epoch.

        Returns:
            MeanOrbit: Mean elements at *epoch*.
        """
        dt = epoch - self._mean.epoch
        elements = self._propagate_mean(self._mean.elements, dt)
        return MeanOrbit(
            AveragedElements(elements, self.theory.element_type),
            epoch, self.theory, self._mean.frame,
        )

    def propagate(self, epoch: Epoch) -> Orbit:
        """Osculating orbit at *epoch*.

        Args:
            epoch: Target epoch; may precede the initial epoch.

        Returns:
            Orbit: Osculating orbit in the theory's osculating
            parameterization.
        """
        dt = epoch - self._mean.epoch
        elements = self._propagate_osc(self._mean.elements, dt)
        return Orbit(
            elements, self.theory.osculating_type, epoch, self._mean.frame, self.theory.mu
        )

    def state_transition_matrix(self, epoch: Epoch) -> Array:
        """Jacobian of the osculating Cartesian state at *epoch* with
        respect to the osculating Cartesian state at the initial epoch.

        Both states are differentiated with ``jax.jacfwd`` with respect to
        the initial mean elements; the initial-epoch Jacobian is then
        inverted, which is the linearization of the converter.

        Args:
            epoch: Target epoch; may precede the initial epoch.

        Returns:
            6x6 state transition matrix.
        """
        dt = float(epoch - self._mean.epoch)
        theory = self.theory

        def cartesian(mean: Array, dt: float) -> Array:
            osc = self._osculating_elements(mean, dt)
            return convert_elements(osc, theory.osculating_type, OrbitType.CARTESIAN, theory.mu)

        d_initial = jax.jacfwd(cartesian)(self._mean.elements, 0.0)
        d_final = jax.jacfwd(cartesian)(self._mean.elements, dt)
        # d_final @ inv(d_initial)
        return jnp.linalg.solve(d_initial.T, d_final.T).T
