"""Shared machinery of the osculating-to-mean converters.

A converter inverts a :class:`~meanjax.theories.MeanTheory`: starting
from the osculating elements it adjusts a set of mean elements until the
theory maps them back onto the osculating orbit.  The unknowns and the
residuals are equinoctial elements expressed with the theory's central
attraction coefficient, which keeps the iteration regular for circular
and equatorial orbits whatever the theory's own parameterization.

Each run moves through a small state machine, ``ITERATING`` until either
every residual component is under its threshold (``CONVERGED``) or the
iteration limit is reached (``FAILED``).  :meth:`MeanElementsConverter.convert`
reports the final state; :meth:`MeanElementsConverter.convert_to_mean`
raises :class:`~meanjax.errors.ConvergenceError` instead of ever
returning a non-converged result.
"""

from __future__ import annotations

import abc
import enum
import logging
import math
from typing import NamedTuple

import jax.numpy as jnp
import numpy as np
from jax import Array

from meanjax.config import get_convergence_threshold, get_dtype
from meanjax.epoch import Epoch
from meanjax.errors import ConvergenceError
from meanjax.orbit import Orbit, OrbitType, convert_elements
from meanjax.theories import AveragedElements, MeanOrbit, MeanTheory
from meanjax.utils import normalize_angle

logger = logging.getLogger(__name__)


class ConverterState(enum.Enum):
    """State of a conversion run."""

    ITERATING = "iterating"
    CONVERGED = "converged"
    FAILED = "failed"


class ConversionResult(NamedTuple):
    """Outcome of :meth:`MeanElementsConverter.convert`.

    Attributes:
        state: ``CONVERGED`` or ``FAILED``.
        mean: Mean orbit reached by the last iteration.
        iterations: Number of iterations performed.
        residual: Last equinoctial residual, osculating minus rebuilt.
    """

    state: ConverterState
    mean: MeanOrbit
    iterations: int
    residual: Array


def equinoctial_residual(target: Array, rebuilt: Array) -> Array:
    """Difference of two equinoctial element sets with the mean
    longitude difference wrapped to ``[-pi, pi)``."""
    delta = target - rebuilt
    return delta.at[5].set(normalize_angle(delta[5], 0.0))


class MeanElementsConverter(abc.ABC):
    """Base class of the osculating-to-mean converters.

    Args:
        theory: Mean element theory to invert.
        epsilon: Relative convergence threshold. Defaults to the
            dtype-adaptive :func:`~meanjax.config.get_convergence_threshold`.
        max_iterations: Maximum number of iterations.

    Raises:
        ValueError: If *epsilon* or *max_iterations* is not positive.
    """

    def __init__(
        self,
        theory: MeanTheory,
        epsilon: float | None = None,
        max_iterations: int = 100,
    ) -> None:
        if epsilon is None:
            epsilon = get_convergence_threshold()
        if epsilon <= 0.0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
        self.theory = theory
        self.epsilon = float(epsilon)
        self.max_iterations = int(max_iterations)

    def thresholds(self, target_eq: Array) -> np.ndarray:
        """Per-component convergence thresholds for a target orbit.

        ``eps (1 + |a|)`` on the semi-major axis, ``eps (1 + e)`` on the
        eccentricity vector, ``eps (1 + |h|)`` on the inclination vector
        and ``eps pi`` on the mean longitude.
        """
        x = np.asarray(target_eq, dtype=np.float64)
        e = math.hypot(x[1], x[2])
        h = math.hypot(x[3], x[4])
        eps = self.epsilon
        return np.array([
            eps * (1.0 + abs(x[0])),
            eps * (1.0 + e),
            eps * (1.0 + e),
            eps * (1.0 + h),
            eps * (1.0 + h),
            eps * math.pi,
        ])

    def residual(self, target_eq: Array, mean_eq: Array, epoch: Epoch) -> Array:
        """Osculating target minus the orbit rebuilt from *mean_eq*."""
        self.theory.check_elements(
            convert_elements(mean_eq, OrbitType.EQUINOCTIAL, self.theory.element_type, self.theory.mu)
        )
        rebuilt = self.theory.osculating_equinoctial(mean_eq, epoch)
        return equinoctial_residual(target_eq, rebuilt)

    @abc.abstractmethod
    def update(self, mean_eq: Array, delta: Array, target_eq: Array, epoch: Epoch) -> Array:
        """Return the next estimate of the mean elements."""

    def convert(self, osculating: Orbit) -> ConversionResult:
        """Run the iteration and report its final state.

        Args:
            osculating: Osculating orbit to convert.

        Returns:
            ConversionResult: Final state, mean orbit and residual.

        Raises:
            OrbitValidityError: If the theory rejects the orbit.
        """
        theory = self.theory
        theory.pre_check(osculating)
        target = theory.preprocessing(osculating)
        epoch = target.epoch
        target_eq = target.to_equinoctial().elements
        tol = self.thresholds(target_eq)

        initial = theory.initialize(target)
        mean_eq = convert_elements(initial, theory.element_type, OrbitType.EQUINOCTIAL, theory.mu)

        state = ConverterState.ITERATING
        delta = jnp.zeros(6, dtype=get_dtype())
        iteration = 0
        while state is ConverterState.ITERATING:
            iteration += 1
            delta = self.residual(target_eq, mean_eq, epoch)
            mean_eq = self.update(mean_eq, delta, target_eq, epoch)

            scaled = np.abs(np.asarray(delta, dtype=np.float64)) / tol
            logger.debug(
                "%s iteration %d: max scaled residual %.3e", theory.name, iteration, np.max(scaled)
            )
            if np.all(scaled < 1.0):
                state = ConverterState.CONVERGED
            elif iteration >= self.max_iterations:
                state = ConverterState.FAILED

        mean = convert_elements(mean_eq, OrbitType.EQUINOCTIAL, theory.element_type, theory.mu)
        mean_orbit = MeanOrbit(
            AveragedElements(mean, theory.element_type), epoch, theory, target.frame, iteration
        )
        return ConversionResult(state, mean_orbit, iteration, delta)

    def convert_to_mean(self, osculating: Orbit) -> MeanOrbit:
        """Compute the mean orbit of an osculating orbit.

        Args:
            osculating: Osculating orbit to convert.

        Returns:
            MeanOrbit: Mean elements in the theory's parameterization,
            with the iteration count.

        Raises:
            ConvergenceError: If the thresholds are not met within
                ``max_iterations``.
            OrbitValidityError: If the theory rejects the orbit or the
                converged mean elements.
        """
        result = self.convert(osculating)
        if result.state is ConverterState.FAILED:
            logger.error(
                "%s: %s conversion failed after %d iterations",
                type(self).__name__, self.theory.name, result.iterations,
            )
            raise ConvergenceError(self.theory.name, result.iterations)

        self.theory.post_check(result.mean.elements)
        logger.info(
            "%s: %s mean elements converged in %d iterations",
            type(self).__name__, self.theory.name, result.iterations,
        )
        return result.mean
