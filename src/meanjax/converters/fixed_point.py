"""Fixed-point osculating-to-mean converter.

The mean elements are corrected by the residual between the osculating
target and the orbit the theory rebuilds from them,
``mean <- mean + damping * (osculating - theory(mean))``.  The map is a
contraction whenever the short-periodic terms are small, which is the
case for every zonal theory away from its singularities.
"""

from __future__ import annotations

from jax import Array

from meanjax.converters._base import MeanElementsConverter
from meanjax.epoch import Epoch
from meanjax.theories import MeanTheory
from meanjax.utils import normalize_angle


class FixedPointConverter(MeanElementsConverter):
    """Osculating-to-mean conversion by fixed-point iteration.

    Args:
        theory: Mean element theory to invert.
        epsilon: Relative convergence threshold. Defaults to the
            dtype-adaptive :func:`~meanjax.config.get_convergence_threshold`.
        max_iterations: Maximum number of iterations.
        damping: Fraction of the residual applied at each step, in
            ``(0, 1]``.

    Raises:
        ValueError: If a parameter is out of range.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax import Epoch, Orbit, OrbitType
        from meanjax.converters import FixedPointConverter
        from meanjax.theories import BrouwerLyddaneTheory
        osc = Orbit(jnp.array([1e7, 0.1, 1.0, 0.2, 0.3, 0.4]),
                    OrbitType.KEPLERIAN, Epoch(2024, 1, 1))
        mean = FixedPointConverter(BrouwerLyddaneTheory()).convert_to_mean(osc)
        mean.iterations
        ```
    """

    def __init__(
        self,
        theory: MeanTheory,
        epsilon: float | None = None,
        max_iterations: int = 100,
        damping: float = 1.0,
    ) -> None:
        if not 0.0 < damping <= 1.0:
            raise ValueError(f"damping must be in (0, 1], got {damping}")
        super().__init__(theory, epsilon, max_iterations)
        self.damping = float(damping)

    def update(self, mean_eq: Array, delta: Array, target_eq: Array, epoch: Epoch) -> Array:
        updated = mean_eq + self.damping * delta
        return updated.at[5].set(normalize_angle(updated[5], 0.0))
