"""Covariance interpolation between tabulated orbital states.

Two interpolators are provided:

- :class:`StateCovarianceKeplerianHermiteInterpolator` interpolates the
  covariance in equinoctial elements with a Hermite polynomial.  Under
  Keplerian motion the equinoctial covariance evolves as
  ``Phi(t) P Phi(t)^T`` with ``Phi`` the identity plus ``dn/da * t`` in
  ``[5, 0]``, which gives its first and second time derivatives in
  closed form.  The filter selects how many of them are used.
- :class:`StateCovarianceBlender` shifts the two covariances bracketing
  the interpolation epoch to that epoch with Keplerian motion and blends
  them with a smoothstep weight (Tanygin's approach).

References:
    1. S. Tanygin, "Efficient covariance interpolation using blending of
       approximate covariance propagations", Journal of Guidance, Control
       and Dynamics, 2014.
"""

from __future__ import annotations

import enum
import logging
import math
from collections.abc import Callable, Sequence

import jax.numpy as jnp
from jax import Array

from meanjax.covariance.state_covariance import StateCovariance
from meanjax.epoch import Epoch
from meanjax.orbit import Orbit, OrbitType

logger = logging.getLogger(__name__)

Sample = tuple[Orbit, StateCovariance]


class CovarianceDerivativesFilter(enum.Enum):
    """Covariance time derivatives used by the Hermite interpolator.

    - ``USE_P``: values only (Lagrange interpolation)
    - ``USE_PV``: values and first derivatives
    - ``USE_PVA``: values, first and second derivatives
    """

    USE_P = 1
    USE_PV = 2
    USE_PVA = 3


def hermite_interpolate(times: Sequence[float], values: Array, t: float = 0.0) -> Array:
    """Evaluate the Hermite interpolating polynomial of tabulated values.

    Uses Newton divided differences over nodes repeated once per known
    derivative.

    Args:
        times: Distinct sample abscissas, length ``K``.
        values: Samples of shape ``(K, d, ...)``; ``values[k, j]`` is the
            j-th derivative at ``times[k]``.
        t: Abscissa at which the polynomial is evaluated.

    Returns:
        Interpolated value, shape ``values.shape[2:]``.

    Raises:
        ValueError: If *times* holds duplicates or does not match *values*.
    """
    times = [float(x) for x in times]
    if len(set(times)) != len(times):
        raise ValueError("Hermite interpolation requires distinct sample times")
    if values.shape[0] != len(times):
        raise ValueError(f"Got {len(times)} times for {values.shape[0]} samples")

    order = values.shape[1]
    nodes = [x for x in times for _ in range(order)]
    n = len(nodes)

    # column j of the divided difference table, rows j..n-1
    column = [values[i // order, 0] for i in range(n)]
    result = column[0]
    product = 1.0
    for j in range(1, n):
        updated = list(column)
        for i in range(n - 1, j - 1, -1):
            if i // order == (i - j) // order:
                updated[i] = values[i // order, j] / math.factorial(j)
            else:
                updated[i] = (column[i] - column[i - 1]) / (nodes[i] - nodes[i - j])
        column = updated
        product = product * (t - nodes[j - 1])
        result = result + column[j] * product
    return result


def _covariance_derivatives(
    matrix: Array,
    dn_da: Array,
    derivatives: CovarianceDerivativesFilter,
) -> Array:
    """Stack of the equinoctial covariance and its Keplerian time
    derivatives, shape ``(d, 6, 6)``."""
    stack = [matrix]
    if derivatives is not CovarianceDerivativesFilter.USE_P:
        row = matrix[0] * dn_da
        first = jnp.zeros_like(matrix).at[5, :].set(row).at[:, 5].set(row)
        first = first.at[5, 5].set(2.0 * matrix[0, 5] * dn_da)
        stack.append(first)
    if derivatives is CovarianceDerivativesFilter.USE_PVA:
        second = jnp.zeros_like(matrix).at[5, 5].set(2.0 * matrix[0, 0] * dn_da * dn_da)
        stack.append(second)
    return jnp.stack(stack)


def _to_inertial_equinoctial(orbit: Orbit, covariance: StateCovariance) -> StateCovariance:
    inertial = covariance.change_covariance_frame(orbit)
    return inertial.change_covariance_type(orbit, OrbitType.EQUINOCTIAL)


def _to_output(
    orbit: Orbit,
    covariance: StateCovariance,
    orbit_type: OrbitType,
    lof: str | None,
) -> StateCovariance:
    if lof is not None:
        return covariance.change_covariance_frame(orbit, lof=lof)
    return covariance.change_covariance_type(orbit, orbit_type)


class StateCovarianceKeplerianHermiteInterpolator:
    """Hermite interpolation of orbital covariances in equinoctial
    elements.

    Args:
        derivatives: Time derivatives of the covariance to use.
        orbit_type: Parameterization of the interpolated covariance.
        lof: Local orbital frame of the interpolated covariance; overrides
            *orbit_type* (covariances in a LOF are Cartesian).

    Examples:
        ```python
        from meanjax.covariance import (
            CovarianceDerivativesFilter,
            StateCovarianceKeplerianHermiteInterpolator,
        )
        interpolator = StateCovarianceKeplerianHermiteInterpolator(
            CovarianceDerivativesFilter.USE_PV)
        cov = interpolator.interpolate(orbit, [(orbit0, cov0), (orbit1, cov1)])
        ```
    """

    def __init__(
        self,
        derivatives: CovarianceDerivativesFilter = CovarianceDerivativesFilter.USE_PVA,
        orbit_type: OrbitType = OrbitType.CARTESIAN,
        lof: str | None = None,
    ) -> None:
        self.derivatives = derivatives
        self.orbit_type = orbit_type
        self.lof = lof

    def interpolate(self, orbit: Orbit, samples: Sequence[Sample]) -> StateCovariance:
        """Interpolate the covariance at the epoch of *orbit*.

        Args:
            orbit: Orbit at the interpolation epoch, used for the output
                type and frame.
            samples: Tabulated ``(orbit, covariance)`` pairs.

        Returns:
            StateCovariance: Interpolated covariance in the configured
            parameterization and frame.

        Raises:
            ValueError: If *samples* is empty.
        """
        if not samples:
            raise ValueError("At least one covariance sample is required")

        times = []
        values = []
        for sample_orbit, covariance in samples:
            equinoctial = _to_inertial_equinoctial(sample_orbit, covariance)
            times.append(sample_orbit.epoch - orbit.epoch)
            values.append(_covariance_derivatives(
                equinoctial.matrix, sample_orbit.mean_anomaly_dot_wrt_a(), self.derivatives
            ))
        logger.debug("Hermite covariance interpolation over %d samples", len(samples))

        matrix = hermite_interpolate(times, jnp.stack(values))
        matrix = 0.5 * (matrix + matrix.T)
        interpolated = StateCovariance(
            matrix, orbit.epoch, frame=orbit.frame, orbit_type=OrbitType.EQUINOCTIAL
        )
        return _to_output(orbit, interpolated, self.orbit_type, self.lof)


def smoothstep(x: float, order: int = 1) -> float:
    """Smoothstep function of a given order on ``[0, 1]``.

    Order 0 is the linear ramp, order 1 the classic cubic ``3x^2 - 2x^3``,
    order 2 the quintic.  Values outside ``[0, 1]`` are clamped.

    Args:
        x: Abscissa.
        order: Number of vanishing derivatives at both ends.

    Returns:
        Blending weight in ``[0, 1]``.
    """
    if order < 0:
        raise ValueError(f"Smoothstep order must be non-negative, got {order}")
    x = min(max(float(x), 0.0), 1.0)
    total = 0.0
    for k in range(order + 1):
        total += math.comb(order + k, k) * math.comb(2 * order + 1, order - k) * (-x) ** k
    return x ** (order + 1) * total


def quadratic_step(x: float) -> float:
    """Piecewise quadratic blending weight, ``2x^2`` then ``1 - 2(1-x)^2``."""
    x = min(max(float(x), 0.0), 1.0)
    if x < 0.5:
        return 2.0 * x * x
    return 1.0 - 2.0 * (1.0 - x) * (1.0 - x)


class StateCovarianceBlender:
    """Blend the Keplerian propagations of the two covariances bracketing
    the interpolation epoch.

    With ``t0 <= t < t1`` the bracketing sample epochs, both covariances
    are shifted to ``t`` with :meth:`StateCovariance.shifted_by` and
    combined as ``(1 - w) P0(t) + w P1(t)`` where
    ``w = blending((t - t0) / (t1 - t0))``.

    Args:
        blending: Weight function on ``[0, 1]``.
        orbit_type: Parameterization of the interpolated covariance.
        lof: Local orbital frame of the interpolated covariance.
    """

    def __init__(
        self,
        blending: Callable[[float], float] = quadratic_step,
        orbit_type: OrbitType = OrbitType.CARTESIAN,
        lof: str | None = None,
    ) -> None:
        self.blending = blending
        self.orbit_type = orbit_type
        self.lof = lof

    @staticmethod
    def bracket(epoch: Epoch, samples: Sequence[Sample]) -> tuple[Sample, Sample]:
        """Select the samples surrounding *epoch*.

        Raises:
            ValueError: If fewer than two samples are given or *epoch* is
                outside the tabulated interval.
        """
        if len(samples) < 2:
            raise ValueError("Covariance blending requires at least two samples")
        reference = samples[0][0].epoch
        ordered = sorted(samples, key=lambda s: float(s[0].epoch - reference))
        first, last = ordered[0][0].epoch, ordered[-1][0].epoch
        if epoch < first or epoch > last:
            raise ValueError(f"Epoch {epoch} is outside the sample interval [{first}, {last}]")
        for previous, following in zip(ordered[:-1], ordered[1:]):
            if epoch <= following[0].epoch:
                return previous, following
        return ordered[-2], ordered[-1]

    def interpolate(self, orbit: Orbit, samples: Sequence[Sample]) -> StateCovariance:
        """Interpolate the covariance at the epoch of *orbit*.

        Args:
            orbit: Orbit at the interpolation epoch, used for the output
                type and frame.
            samples: Tabulated ``(orbit, covariance)`` pairs.

        Returns:
            StateCovariance: Blended covariance in the configured
            parameterization and frame.
        """
        (orbit0, cov0), (orbit1, cov1) = self.bracket(orbit.epoch, samples)
        dt0 = float(orbit.epoch - orbit0.epoch)
        dt1 = float(orbit.epoch - orbit1.epoch)
        weight = self.blending(dt0 / (dt0 - dt1))

        shifted0 = _to_inertial_equinoctial(orbit0, cov0).shifted_by(orbit0, dt0)
        shifted1 = _to_inertial_equinoctial(orbit1, cov1).shifted_by(orbit1, dt1)
        matrix = (1.0 - weight) * shifted0.matrix + weight * shifted1.matrix
        logger.debug("Covariance blending weight %.6f", weight)

        blended = StateCovariance(
            matrix, orbit.epoch, frame=orbit.frame, orbit_type=OrbitType.EQUINOCTIAL
        )
        return _to_output(orbit, blended, self.orbit_type, self.lof)
