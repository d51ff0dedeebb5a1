"""Module-wide floating-point precision.

``set_dtype`` selects the float dtype every meanjax function computes in
(``jnp.float32`` by default, so kernels run unchanged on GPU/TPU).
Selecting ``jnp.float64`` also turns on JAX's ``jax_enable_x64`` mode.

Two tolerances follow the active dtype: the slack allowed when comparing
epochs, and the default relative convergence threshold of the mean
element converters.  A float32 session therefore converges to float32
residuals instead of failing against a float64 target.

Call ``set_dtype`` before anything is JIT-compiled: ``get_dtype()`` is
read while tracing and the result is frozen into the compiled program.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

# dtype -> (epoch equality tolerance in s, relative convergence threshold)
_TOLERANCES = {
    jnp.float64: (1e-9, 1e-12),
    jnp.float32: (1e-3, 1e-6),
    jnp.float16: (0.1, 1e-2),
    jnp.bfloat16: (0.1, 1e-2),
}

_dtype = jnp.float32


def set_dtype(dtype) -> None:
    """Select the float dtype used throughout meanjax.

    Args:
        dtype: ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32`` or
            ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not one of the supported float types.
    """
    global _dtype
    if not any(dtype is known for known in _TOLERANCES):
        raise ValueError(
            f"Unsupported dtype {dtype!r}. Must be one of: "
            "jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype is jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the active float dtype (default ``jnp.float32``)."""
    return _dtype


def get_epoch_eq_tolerance() -> float:
    """Seconds within which two epochs compare equal.

    1e-9 s in float64, 1e-3 s in float32, 0.1 s in half precision.
    """
    return _TOLERANCES[_dtype][0]


def get_convergence_threshold() -> float:
    """Default relative convergence threshold of the mean element converters.

    The converters scale it per element, e.g. ``eps * (1 + |a|)`` for the
    semi-major axis, so it sits a few orders of magnitude above the
    machine epsilon of the dtype: 1e-12 in float64, 1e-6 in float32 and
    1e-2 in half precision.
    """
    return _TOLERANCES[_dtype][1]
