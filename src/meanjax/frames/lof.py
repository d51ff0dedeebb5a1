"""RTN local orbital frame.

The frame attached to an inertial state ``[r, v]`` has axes

- **R**, radial: along ``r``;
- **N**, normal: along the angular momentum ``r x v``;
- **T**, transverse: ``N x R``, along-track for a circular orbit.

It turns about N at the rate ``|r x v| / |r|^2``.  A state perturbation
therefore picks up a velocity term from that rotation, which is why the
6x6 transforms below are not block diagonal.  Covariance frame changes
apply them as ``M P M^T``.

References:
    1. K. Alfriend et al., *Spacecraft Formation Flying*, Elsevier, 2010,
       eq. 2.16.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype


def _axes_and_rate(x_eci: ArrayLike) -> tuple[Array, Array]:
    """RTN axes as the columns of a matrix, and the frame's turn rate."""
    x_eci = jnp.asarray(x_eci, dtype=get_dtype())
    r = x_eci[:3]
    h = jnp.cross(r, x_eci[3:6])
    r_hat = r / jnp.linalg.norm(r)
    n_hat = h / jnp.linalg.norm(h)
    axes = jnp.column_stack([r_hat, jnp.cross(n_hat, r_hat), n_hat])
    return axes, jnp.linalg.norm(h) / jnp.dot(r, r)


def _rate_matrix(rate: Array) -> Array:
    # Cross-product matrix of the frame rate [0, 0, rate], in RTN axes
    return rate * jnp.array([[0.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 0.0]])


def rotation_rtn_to_eci(x_eci: ArrayLike) -> Array:
    """Rotation taking RTN components of the frame of *x_eci* to inertial
    components; its columns are ``[r_hat | t_hat | n_hat]``."""
    return _axes_and_rate(x_eci)[0]


def rotation_eci_to_rtn(x_eci: ArrayLike) -> Array:
    """Transpose of :func:`rotation_rtn_to_eci`."""
    return _axes_and_rate(x_eci)[0].T


def state_transform_eci_to_rtn(x_eci: ArrayLike) -> Array:
    """6x6 Jacobian of the inertial to RTN map of state perturbations.

    Args:
        x_eci: Inertial state defining the frame. Units: *m*, *m/s*

    Returns:
        ``[[Rt, 0], [-W Rt, Rt]]`` with ``Rt`` the inertial to RTN rotation
        and ``W`` the cross-product matrix of the frame rate.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax.frames import state_transform_eci_to_rtn
        m = state_transform_eci_to_rtn(jnp.array([7.0e6, 0.0, 0.0, 0.0, 7.5e3, 0.0]))
        ```
    """
    axes, rate = _axes_and_rate(x_eci)
    rot = axes.T
    return jnp.block([[rot, jnp.zeros_like(rot)], [-_rate_matrix(rate) @ rot, rot]])


def state_transform_rtn_to_eci(x_eci: ArrayLike) -> Array:
    """Inverse of :func:`state_transform_eci_to_rtn`."""
    axes, rate = _axes_and_rate(x_eci)
    return jnp.block([[axes, jnp.zeros_like(axes)], [axes @ _rate_matrix(rate), axes]])
