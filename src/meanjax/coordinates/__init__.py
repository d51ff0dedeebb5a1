"""Orbital element conversions.

This sub-module provides conversions between the orbit parameterizations
used by the mean element theories:

- **Keplerian**: ``[a, e, i, Ω, ω, M]`` ↔ inertial Cartesian
- **Equinoctial**: ``[a, ex, ey, hx, hy, lM]`` ↔ inertial Cartesian,
  non-singular for circular and equatorial orbits
- **Circular**: ``[a, ex, ey, i, Ω, αM]`` ↔ inertial Cartesian,
  non-singular for circular orbits
"""

from .circular import (
    state_cir_to_eci,
    state_cir_to_eqn,
    state_eci_to_cir,
    state_eqn_to_cir,
)
from .equinoctial import (
    longitude_eccentric_to_mean,
    longitude_eccentric_to_true,
    longitude_mean_to_eccentric,
    longitude_true_to_eccentric,
    state_eci_to_eqn,
    state_eqn_to_eci,
    state_eqn_to_koe,
    state_koe_to_eqn,
)
from .keplerian import (
    state_eci_to_koe,
    state_koe_to_eci,
)

__all__ = [
    "state_koe_to_eci",
    "state_eci_to_koe",
    "state_eqn_to_eci",
    "state_eci_to_eqn",
    "state_koe_to_eqn",
    "state_eqn_to_koe",
    "state_cir_to_eci",
    "state_eci_to_cir",
    "state_cir_to_eqn",
    "state_eqn_to_cir",
    "longitude_eccentric_to_mean",
    "longitude_mean_to_eccentric",
    "longitude_true_to_eccentric",
    "longitude_eccentric_to_true",
]
