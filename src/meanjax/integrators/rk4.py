"""Fixed-step Runge-Kutta integration of the averaged element equations.

Mean element rates are smooth and change on the time scale of the
secular drift, so a fixed step of a fraction of a day is enough and no
error control is attempted.  The stages come from the classic fourth
order Butcher tableau below.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import NamedTuple

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype

# Classic RK4 tableau: stage nodes, stage coupling, final weights
_NODES = (0.0, 0.5, 0.5, 1.0)
_COUPLING = ((), (0.5,), (0.0, 0.5), (0.0, 0.0, 1.0))
_WEIGHTS = (1.0 / 6.0, 1.0 / 3.0, 1.0 / 3.0, 1.0 / 6.0)


class StepResult(NamedTuple):
    """Outcome of one integrator step.

    Attributes:
        state: State vector at ``t + dt_used``.
        dt_used: Step that was taken.
    """

    state: Array
    dt_used: Array


def rk4_step(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    t: ArrayLike,
    state: ArrayLike,
    dt: ArrayLike,
) -> StepResult:
    """Advance *state* by one RK4 step of length *dt*.

    Traceable, so it can be wrapped in ``jax.jit`` or ``jax.vmap``.

    Args:
        dynamics: Right-hand side ``f(t, x) -> dx/dt``.
        t: Time of *state*.
        state: State vector.
        dt: Step length, negative to integrate backwards.

    Returns:
        StepResult: State at ``t + dt`` and the step taken.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax.integrators import rk4_step
        def harmonic(t, x):
            return jnp.array([x[1], -x[0]])
        result = rk4_step(harmonic, 0.0, jnp.array([1.0, 0.0]), 0.01)
        result.state  # ~[cos(0.01), -sin(0.01)]
        ```
    """
    dtype = get_dtype()
    t, x, dt = (jnp.asarray(v, dtype=dtype) for v in (t, state, dt))

    slopes = []
    for node, row in zip(_NODES, _COUPLING):
        stage = x + dt * sum((c * k for c, k in zip(row, slopes)), jnp.zeros_like(x))
        slopes.append(dynamics(t + node * dt, stage))

    increment = sum(w * k for w, k in zip(_WEIGHTS, slopes))
    return StepResult(state=x + dt * increment, dt_used=dt)


def rk4_integrate(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    t0: float,
    state: ArrayLike,
    t1: float,
    max_step: float,
) -> Array:
    """Integrate from *t0* to *t1* in equal steps no longer than *max_step*.

    The step count is fixed from the Python values of the bounds; the
    steps themselves run in ``jax.lax.fori_loop``.

    Raises:
        ValueError: If *max_step* is not positive.
    """
    if max_step <= 0.0:
        raise ValueError(f"max_step must be positive, got {max_step}")
    span = float(t1) - float(t0)
    n_steps = max(1, math.ceil(abs(span) / max_step))
    h = span / n_steps

    def advance(k, x):
        return rk4_step(dynamics, t0 + k * h, x, h).state

    return jax.lax.fori_loop(0, n_steps, advance, jnp.asarray(state, dtype=get_dtype()))
