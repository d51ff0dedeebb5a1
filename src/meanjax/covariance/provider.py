"""Covariance carried along an analytical propagator.

The initial covariance is expressed in Cartesian coordinates at the
initial osculating orbit, propagated as ``Phi P Phi^T`` with the
propagator's state transition matrix and returned at the propagated orbit
in the parameterization and frame it was given in.
"""

from __future__ import annotations

import logging

from meanjax.covariance.state_covariance import StateCovariance, _symmetrize
from meanjax.epoch import Epoch
from meanjax.orbit import OrbitType
from meanjax.propagators import AnalyticalPropagator

logger = logging.getLogger(__name__)


class StateCovarianceMatrixProvider:
    """Covariance of the state of an analytical propagator.

    Args:
        propagator: Propagator holding the initial state.
        initial_covariance: Covariance at the propagator's initial epoch,
            in any parameterization, inertial frame or local orbital
            frame.

    Raises:
        ValueError: If the covariance epoch differs from the initial
            epoch, or its inertial frame differs from the orbit's.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax import Epoch, Orbit, OrbitType
        from meanjax.covariance import StateCovariance, StateCovarianceMatrixProvider
        from meanjax.propagators import BrouwerLyddanePropagator
        t0 = Epoch(2024, 1, 1)
        prop = BrouwerLyddanePropagator(
            Orbit(jnp.array([7.2e6, 0.01, 1.2, 0.1, 0.2, 0.3]), OrbitType.KEPLERIAN, t0)
        )
        cov = StateCovariance(jnp.diag(jnp.array([1e2, 1e2, 1e2, 1e-2, 1e-2, 1e-2])), t0)
        provider = StateCovarianceMatrixProvider(prop, cov)
        provider.get_state_covariance(t0 + 3600.0).matrix
        ```
    """

    def __init__(
        self,
        propagator: AnalyticalPropagator,
        initial_covariance: StateCovariance,
    ) -> None:
        if initial_covariance.epoch != propagator.initial_epoch:
            raise ValueError(
                f"Covariance epoch {initial_covariance.epoch} differs from the initial "
                f"epoch {propagator.initial_epoch} of the propagator"
            )
        self.propagator = propagator
        self.initial_covariance = initial_covariance

        orbit = propagator.propagate(propagator.initial_epoch)
        inertial = initial_covariance.change_covariance_frame(orbit)
        self._cartesian = inertial.change_covariance_type(orbit, OrbitType.CARTESIAN)

    def get_state_covariance(self, epoch: Epoch) -> StateCovariance:
        """Covariance at *epoch*.

        Args:
            epoch: Target epoch; may precede the initial epoch.

        Returns:
            StateCovariance: Propagated covariance, in the parameterization
            and frame of the initial covariance.
        """
        stm = self.propagator.state_transition_matrix(epoch)
        matrix = _symmetrize(stm @ self._cartesian.matrix @ stm.T)
        logger.debug(
            "%s covariance propagated by %.3f s",
            type(self.propagator).__name__, float(epoch - self.propagator.initial_epoch),
        )

        orbit = self.propagator.propagate(epoch)
        propagated = StateCovariance(matrix, epoch, frame=self._cartesian.frame)
        initial = self.initial_covariance
        if initial.lof is not None:
            return propagated.change_covariance_frame(orbit, lof=initial.lof)
        return propagated.change_covariance_type(orbit, initial.orbit_type)
