"""Orbit representation shared by theories, converters and propagators.

An :class:`Orbit` is a six-element state in one of four parameterizations
(:class:`OrbitType`), tagged with the epoch, the inertial frame label and
the central attraction coefficient it refers to.  The conversions between
parameterizations are the pure functions of :mod:`meanjax.coordinates`;
:func:`convert_elements` dispatches between them and is differentiable,
which is what the least-squares converter and the covariance type changes
rely on.

Frames are plain labels (e.g. ``"GCRF"``, ``"EME2000"``, ``"TEME"``);
meanjax performs no transformation between inertial frames.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.constants import GM_EARTH
from meanjax.coordinates import (
    state_cir_to_eqn,
    state_eci_to_eqn,
    state_eci_to_koe,
    state_eqn_to_cir,
    state_eqn_to_eci,
    state_eqn_to_koe,
    state_koe_to_eci,
    state_koe_to_eqn,
)
from meanjax.epoch import Epoch
from meanjax.orbits import mean_motion, mean_motion_dot_wrt_a, orbital_period


class OrbitType(enum.Enum):
    """Orbit parameterizations.

    - ``CARTESIAN``: ``[x, y, z, vx, vy, vz]``
    - ``KEPLERIAN``: ``[a, e, i, RAAN, omega, M]``
    - ``CIRCULAR``: ``[a, ex, ey, i, RAAN, alphaM]``
    - ``EQUINOCTIAL``: ``[a, ex, ey, hx, hy, lM]``
    """

    CARTESIAN = "cartesian"
    KEPLERIAN = "keplerian"
    CIRCULAR = "circular"
    EQUINOCTIAL = "equinoctial"


def _to_equinoctial(x: Array, orbit_type: OrbitType, gm: float) -> Array:
    if orbit_type is OrbitType.EQUINOCTIAL:
        return x
    if orbit_type is OrbitType.CARTESIAN:
        return state_eci_to_eqn(x, gm)
    if orbit_type is OrbitType.KEPLERIAN:
        return state_koe_to_eqn(x)
    return state_cir_to_eqn(x)


def _from_equinoctial(x: Array, orbit_type: OrbitType, gm: float) -> Array:
    if orbit_type is OrbitType.EQUINOCTIAL:
        return x
    if orbit_type is OrbitType.CARTESIAN:
        return state_eqn_to_eci(x, gm)
    if orbit_type is OrbitType.KEPLERIAN:
        return state_eqn_to_koe(x)
    return state_eqn_to_cir(x)


def convert_elements(
    x: ArrayLike,
    from_type: OrbitType,
    to_type: OrbitType,
    gm: float = GM_EARTH,
) -> Array:
    """Convert a six-element state between parameterizations.

    Keplerian ↔ Cartesian uses the direct conversion; every other pair
    goes through equinoctial elements.  The function is traceable and
    differentiable wherever both parameterizations are regular.

    Args:
        x: Elements in *from_type*.
        from_type: Parameterization of *x*.
        to_type: Requested parameterization.
        gm: Central attraction coefficient. Units: *m^3/s^2*

    Returns:
        Elements in *to_type*.
    """
    x = jnp.asarray(x, dtype=get_dtype())
    if from_type is to_type:
        return x
    if from_type is OrbitType.KEPLERIAN and to_type is OrbitType.CARTESIAN:
        return state_koe_to_eci(x, gm)
    if from_type is OrbitType.CARTESIAN and to_type is OrbitType.KEPLERIAN:
        return state_eci_to_koe(x, gm)
    return _from_equinoctial(_to_equinoctial(x, from_type, gm), to_type, gm)


@dataclass(frozen=True, eq=False)
class Orbit:
    """An osculating orbit at an epoch.

    Args:
        elements: Six elements in the parameterization given by
            *orbit_type*. Units: *m*, *m/s*, *rad*.
        orbit_type: Parameterization of *elements*.
        epoch: Epoch of the state.
        frame: Inertial frame label.
        gm: Central attraction coefficient. Units: *m^3/s^2*

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax import Epoch, Orbit, OrbitType
        orbit = Orbit(jnp.array([1e7, 0.1, 1.0, 0.2, 0.3, 0.4]),
                      OrbitType.KEPLERIAN, Epoch(2024, 1, 1))
        orbit.to_cartesian().position
        ```
    """

    elements: Array
    orbit_type: OrbitType
    epoch: Epoch
    frame: str = "GCRF"
    gm: float = GM_EARTH

    def __post_init__(self) -> None:
        elements = jnp.asarray(self.elements, dtype=get_dtype())
        if elements.shape != (6,):
            raise ValueError(
                f"Orbit elements must have shape (6,), got {elements.shape}"
            )
        if not isinstance(self.orbit_type, OrbitType):
            raise ValueError(f"Unknown orbit type {self.orbit_type!r}")
        if self.gm <= 0.0:
            raise ValueError(f"Central attraction coefficient must be positive, got {self.gm}")
        if self.orbit_type is not OrbitType.CARTESIAN and float(elements[0]) <= 0.0:
            raise ValueError(
                f"Semi-major axis must be positive (elliptic orbits only), got {float(elements[0])}"
            )
        object.__setattr__(self, "elements", elements)

    # Conversions

    def to_type(self, orbit_type: OrbitType) -> Orbit:
        """Return the same orbit in another parameterization."""
        if orbit_type is self.orbit_type:
            return self
        return replace(
            self,
            elements=convert_elements(self.elements, self.orbit_type, orbit_type, self.gm),
            orbit_type=orbit_type,
        )

    def to_cartesian(self) -> Orbit:
        return self.to_type(OrbitType.CARTESIAN)

    def to_keplerian(self) -> Orbit:
        return self.to_type(OrbitType.KEPLERIAN)

    def to_circular(self) -> Orbit:
        return self.to_type(OrbitType.CIRCULAR)

    def to_equinoctial(self) -> Orbit:
        return self.to_type(OrbitType.EQUINOCTIAL)

    def with_gm(self, gm: float) -> Orbit:
        """Return the orbit sharing this position and velocity but
        expressed for another central attraction coefficient.

        Element values other than Cartesian change because the same
        position and velocity describe a different conic under *gm*.
        """
        cart = self.to_cartesian()
        return replace(cart, gm=gm).to_type(self.orbit_type)

    # Accessors

    @property
    def state(self) -> Array:
        """Cartesian state ``[x, y, z, vx, vy, vz]``."""
        return self.to_cartesian().elements

    @property
    def position(self) -> Array:
        return self.state[:3]

    @property
    def velocity(self) -> Array:
        return self.state[3:]

    @property
    def a(self) -> Array:
        """Semi-major axis. Units: *m*"""
        if self.orbit_type is OrbitType.CARTESIAN:
            return self.to_equinoctial().elements[0]
        return self.elements[0]

    @property
    def e(self) -> Array:
        """Eccentricity."""
        if self.orbit_type is OrbitType.KEPLERIAN:
            return self.elements[1]
        eq = self.to_equinoctial().elements
        return jnp.sqrt(eq[1] * eq[1] + eq[2] * eq[2])

    @property
    def i(self) -> Array:
        """Inclination. Units: *rad*"""
        if self.orbit_type is OrbitType.KEPLERIAN:
            return self.elements[2]
        eq = self.to_equinoctial().elements
        return 2.0 * jnp.arctan(jnp.sqrt(eq[3] * eq[3] + eq[4] * eq[4]))

    def mean_motion(self) -> Array:
        """Keplerian mean motion. Units: *rad/s*"""
        return mean_motion(self.a, self.gm)

    def keplerian_period(self) -> Array:
        """Keplerian period. Units: *s*"""
        return orbital_period(self.a, self.gm)

    def mean_anomaly_dot_wrt_a(self) -> Array:
        """``dn/da`` of the Keplerian mean motion. Units: *rad/s/m*"""
        return mean_motion_dot_wrt_a(self.a, self.gm)

    # Motion

    def shifted_by(self, dt: float) -> Orbit:
        """Propagate the orbit by *dt* seconds of Keplerian motion.

        Args:
            dt: Time shift. Units: *s*

        Returns:
            Orbit: The shifted orbit, in the same parameterization.
        """
        eq = self.to_equinoctial().elements
        eq = eq.at[5].add(self.mean_motion() * dt)
        shifted = Orbit(eq, OrbitType.EQUINOCTIAL, self.epoch + dt, self.frame, self.gm)
        return shifted.to_type(self.orbit_type)

    def jacobian_wrt_cartesian(self) -> Array:
        """Jacobian of this orbit's elements with respect to its Cartesian
        state, ``d(elements)/d(x, y, z, vx, vy, vz)``.

        Returns:
            6x6 Jacobian matrix.
        """
        convert = lambda x: convert_elements(x, OrbitType.CARTESIAN, self.orbit_type, self.gm)
        return jax.jacfwd(convert)(self.state)

    def __repr__(self) -> str:
        values = ", ".join(f"{float(v):.6g}" for v in self.elements)
        return (f"Orbit({self.orbit_type.name}, [{values}], epoch={self.epoch}, "
                f"frame={self.frame})")
