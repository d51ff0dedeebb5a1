"""Central-body gravity used by the mean element theories.

Provides the zonal gravity field description shared by the analytical
theories and the zonal disturbing potential and acceleration used by the
semi-analytical short-periodic terms and the mean element equations of
motion.
"""

from .gravity import (
    ZonalHarmonics,
    accel_point_mass,
    accel_zonal,
    potential_zonal,
)

__all__ = [
    "ZonalHarmonics",
    "accel_point_mass",
    "accel_zonal",
    "potential_zonal",
]
