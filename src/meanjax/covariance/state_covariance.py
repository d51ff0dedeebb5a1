"""Orbital state covariance.

A :class:`StateCovariance` is a 6x6 covariance matrix tagged with the
epoch, the parameterization of the state it describes and either an
inertial frame label or a local orbital frame (``"RTN"``).  Changing the
parameterization or the frame is a linear map of the perturbation, so
every change is applied as ``M P M^T``:

- **Type changes** use the Jacobian of :func:`meanjax.orbit.convert_elements`
  evaluated at a reference orbit, obtained with ``jax.jacfwd``.
- **Frame changes** use the 6x6 inertial <-> RTN state transformations of
  :mod:`meanjax.frames`, which include the rotation rate of the RTN frame.
  Covariances in a local orbital frame are always Cartesian.
- **Time shifts** use the Keplerian state transition matrix in
  equinoctial elements, which is the identity except for
  ``d(lM)/d(a) = dn/da * dt``.

References:
    1. D. A. Vallado, "Covariance Transformations for Satellite Flight
       Dynamics Operations", AAS 03-526, 2003.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import jax
import jax.numpy as jnp
from jax import Array

from meanjax.config import get_dtype
from meanjax.epoch import Epoch
from meanjax.frames import state_transform_eci_to_rtn, state_transform_rtn_to_eci
from meanjax.orbit import Orbit, OrbitType, convert_elements

RTN = "RTN"
_SUPPORTED_LOF = (RTN,)

# Relative tolerance of the symmetry check
_SYMMETRY_TOLERANCE = 1.0e-6


def _symmetrize(matrix: Array) -> Array:
    return 0.5 * (matrix + matrix.T)


def keplerian_transition_matrix(orbit: Orbit, dt: float) -> Array:
    """Keplerian state transition matrix in equinoctial elements.

    Args:
        orbit: Reference orbit; only its semi-major axis is used.
        dt: Time shift. Units: *s*

    Returns:
        6x6 matrix, the identity with ``[5, 0] = dn/da * dt``.
    """
    stm = jnp.eye(6, dtype=get_dtype())
    return stm.at[5, 0].set(orbit.mean_anomaly_dot_wrt_a() * dt)


@dataclass(frozen=True, eq=False)
class StateCovariance:
    """Covariance of an orbital state.

    Exactly one of *frame* and *lof* describes the axes of the matrix.
    When neither is given the covariance is expressed in ``"GCRF"``.

    Args:
        matrix: 6x6 symmetric covariance matrix.
        epoch: Epoch of the covariance.
        frame: Inertial frame label.
        lof: Local orbital frame, ``"RTN"``. Requires a Cartesian
            *orbit_type*.
        orbit_type: Parameterization of the state the covariance refers
            to.

    Raises:
        ValueError: If the matrix is not 6x6 or not symmetric, if both
            *frame* and *lof* are given, or if the local orbital frame is
            unsupported or paired with non-Cartesian elements.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax import Epoch
        from meanjax.covariance import StateCovariance
        cov = StateCovariance(jnp.diag(jnp.array([1e2, 1e2, 1e2, 1e-2, 1e-2, 1e-2])),
                              Epoch(2024, 1, 1))
        ```
    """

    matrix: Array
    epoch: Epoch
    frame: str | None = None
    lof: str | None = None
    orbit_type: OrbitType = OrbitType.CARTESIAN

    def __post_init__(self) -> None:
        matrix = jnp.asarray(self.matrix, dtype=get_dtype())
        if matrix.shape != (6, 6):
            raise ValueError(f"Covariance matrix must have shape (6, 6), got {matrix.shape}")
        scale = float(jnp.max(jnp.abs(matrix)))
        if float(jnp.max(jnp.abs(matrix - matrix.T))) > _SYMMETRY_TOLERANCE * scale:
            raise ValueError("Covariance matrix is not symmetric")
        object.__setattr__(self, "matrix", matrix)

        if self.frame is not None and self.lof is not None:
            raise ValueError(
                f"Covariance cannot be expressed in both frame {self.frame!r} and LOF {self.lof!r}"
            )
        if self.lof is not None:
            if self.lof not in _SUPPORTED_LOF:
                raise ValueError(f"Unsupported local orbital frame {self.lof!r}")
            if self.orbit_type is not OrbitType.CARTESIAN:
                raise ValueError(
                    f"Covariance in a local orbital frame must be CARTESIAN, got "
                    f"{self.orbit_type.name}"
                )
        elif self.frame is None:
            object.__setattr__(self, "frame", "GCRF")

    # Type

    def change_covariance_type(self, orbit: Orbit, new_type: OrbitType) -> StateCovariance:
        """Express the covariance in another parameterization.

        Args:
            orbit: Reference orbit at which the conversion is linearized.
            new_type: Requested parameterization.

        Returns:
            StateCovariance: ``J P J^T`` with ``J = d(new)/d(old)``.

        Raises:
            ValueError: If the covariance is expressed in a local orbital
                frame.
        """
        if self.lof is not None:
            raise ValueError("Cannot change the type of a covariance expressed in a LOF")
        if new_type is self.orbit_type:
            return self

        x = orbit.to_type(self.orbit_type).elements
        convert = lambda s: convert_elements(s, self.orbit_type, new_type, orbit.gm)
        jac = jax.jacfwd(convert)(x)
        matrix = _symmetrize(jac @ self.matrix @ jac.T)
        return replace(self, matrix=matrix, orbit_type=new_type)

    # Frame

    def change_covariance_frame(
        self,
        orbit: Orbit,
        lof: str | None = None,
        frame: str | None = None,
    ) -> StateCovariance:
        """Express the covariance in another frame.

        Either *lof* selects the RTN frame of *orbit*, or the covariance is
        brought back to the inertial *frame* (default: the frame of
        *orbit*).  Inertial frames are labels only; a change between two
        different inertial labels is rejected.

        Args:
            orbit: Reference orbit defining the local orbital frame.
            lof: Target local orbital frame, ``"RTN"``.
            frame: Target inertial frame label.

        Returns:
            StateCovariance: Covariance in the target frame (Cartesian when
            a conversion is performed), or *self* if it is already
            expressed there.

        Raises:
            ValueError: If both *lof* and *frame* are given, or the frame
                change is not supported.
        """
        if lof is not None and frame is not None:
            raise ValueError("Give either a local orbital frame or an inertial frame, not both")

        if lof is not None:
            if lof not in _SUPPORTED_LOF:
                raise ValueError(f"Unsupported local orbital frame {lof!r}")
            if self.lof == lof:
                return self
            cartesian = self.change_covariance_type(orbit, OrbitType.CARTESIAN)
            m = state_transform_eci_to_rtn(orbit.to_cartesian().elements)
            matrix = _symmetrize(m @ cartesian.matrix @ m.T)
            return StateCovariance(matrix, self.epoch, lof=lof)

        target = frame if frame is not None else orbit.frame
        if self.lof is None:
            if target != self.frame:
                raise ValueError(
                    f"No transformation between inertial frames {self.frame!r} and {target!r}"
                )
            return self
        m = state_transform_rtn_to_eci(orbit.to_cartesian().elements)
        matrix = _symmetrize(m @ self.matrix @ m.T)
        return StateCovariance(matrix, self.epoch, frame=target)

    # Time

    def shifted_by(self, orbit: Orbit, dt: float) -> StateCovariance:
        """Shift the covariance in time with Keplerian motion.

        The covariance is converted to equinoctial elements, propagated as
        ``Phi P Phi^T`` with :func:`keplerian_transition_matrix` and
        converted back to its original parameterization and frame at the
        shifted orbit.

        Args:
            orbit: Orbit at the epoch of the covariance.
            dt: Time shift. Units: *s*

        Returns:
            StateCovariance: Covariance at ``epoch + dt``.
        """
        shifted_orbit = orbit.shifted_by(dt)

        if self.lof is not None:
            inertial = self.change_covariance_frame(orbit)
            return inertial.shifted_by(orbit, dt).change_covariance_frame(
                shifted_orbit, lof=self.lof
            )

        equinoctial = self.change_covariance_type(orbit, OrbitType.EQUINOCTIAL)
        stm = keplerian_transition_matrix(orbit, dt)
        matrix = _symmetrize(stm @ equinoctial.matrix @ stm.T)
        shifted = StateCovariance(
            matrix, self.epoch + dt, frame=self.frame, orbit_type=OrbitType.EQUINOCTIAL
        )
        return shifted.change_covariance_type(shifted_orbit, self.orbit_type)

    def __repr__(self) -> str:
        axes = f"lof={self.lof}" if self.lof is not None else f"frame={self.frame}"
        return f"StateCovariance({self.orbit_type.name}, epoch={self.epoch}, {axes})"

