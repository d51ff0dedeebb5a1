"""Least-squares osculating-to-mean converter.

Each iteration linearizes the theory around the current mean elements
and solves for the Gauss-Newton correction,
``J dmean = osculating - theory(mean)`` with ``J = d theory / d mean``.
The Jacobian comes from ``jax.jacfwd`` for differentiable theories and
from central finite differences otherwise.  Both the residual rows and
the unknowns are scaled by the convergence thresholds, so that the
metre-sized semi-major axis and the dimensionless elements carry
comparable weight, and the step is solved in float64 on the host.
"""

from __future__ import annotations

import jax.numpy as jnp
import numpy as np
from jax import Array

from meanjax.config import get_dtype
from meanjax.converters._base import MeanElementsConverter
from meanjax.epoch import Epoch
from meanjax.theories import MeanTheory
from meanjax.utils import normalize_angle

# Relative step of the finite-difference Jacobian
FINITE_DIFFERENCE_STEP = 1.0e-7


class LeastSquaresConverter(MeanElementsConverter):
    """Osculating-to-mean conversion by Gauss-Newton least squares.

    Args:
        theory: Mean element theory to invert.
        epsilon: Relative convergence threshold. Defaults to the
            dtype-adaptive :func:`~meanjax.config.get_convergence_threshold`.
        max_iterations: Maximum number of iterations.
        use_autodiff: Use ``jax.jacfwd`` when the theory is
            differentiable. Finite differences are used otherwise.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax import Epoch, Orbit, OrbitType
        from meanjax.converters import LeastSquaresConverter
        from meanjax.theories import EcksteinHechlerTheory
        osc = Orbit(jnp.array([7.2e6, 1e-3, 1.7, 0.2, 0.3, 0.4]),
                    OrbitType.KEPLERIAN, Epoch(2024, 1, 1))
        mean = LeastSquaresConverter(EcksteinHechlerTheory()).convert_to_mean(osc)
        ```
    """

    def __init__(
        self,
        theory: MeanTheory,
        epsilon: float | None = None,
        max_iterations: int = 1000,
        use_autodiff: bool = True,
    ) -> None:
        super().__init__(theory, epsilon, max_iterations)
        self.use_autodiff = use_autodiff

    def jacobian(self, mean_eq: Array, epoch: Epoch) -> Array:
        """Jacobian of the rebuilt equinoctial elements with respect to
        the mean equinoctial elements, shape ``(6, 6)``."""
        if self.use_autodiff and self.theory.differentiable:
            return self.theory.osculating_equinoctial_jacobian(mean_eq, epoch)
        return self._finite_difference_jacobian(mean_eq, epoch)

    def _finite_difference_jacobian(self, mean_eq: Array, epoch: Epoch) -> Array:
        columns = []
        for k in range(6):
            h = FINITE_DIFFERENCE_STEP * (1.0 + abs(float(mean_eq[k])))
            plus = self.theory.osculating_equinoctial(mean_eq.at[k].add(h), epoch)
            minus = self.theory.osculating_equinoctial(mean_eq.at[k].add(-h), epoch)
            diff = plus - minus
            diff = diff.at[5].set(normalize_angle(diff[5], 0.0))
            columns.append(diff / (2.0 * h))
        return jnp.stack(columns, axis=1)

    def update(self, mean_eq: Array, delta: Array, target_eq: Array, epoch: Epoch) -> Array:
        jac = np.asarray(self.jacobian(mean_eq, epoch), dtype=np.float64)
        scale = self.thresholds(target_eq)
        # D^-1 J D with D = diag(thresholds), close to the identity
        scaled_jac = jac * (scale[None, :] / scale[:, None])
        rhs = np.asarray(delta, dtype=np.float64) / scale
        scaled_step, *_ = np.linalg.lstsq(scaled_jac, rhs, rcond=None)
        updated = mean_eq + jnp.asarray(scaled_step * scale, dtype=get_dtype())
        return updated.at[5].set(normalize_angle(updated[5], 0.0))
