"""Local orbital frame transformations.

Inertial frames (``"GCRF"``, ``"EME2000"``, ``"TEME"``) are labels only;
no transformation between them is performed.  The one frame change
available is between an inertial frame and the RTN local orbital frame,
as 3x3 rotations and as 6x6 state perturbation transforms.
"""

from .lof import (
    rotation_eci_to_rtn,
    rotation_rtn_to_eci,
    state_transform_eci_to_rtn,
    state_transform_rtn_to_eci,
)

__all__ = [
    "rotation_rtn_to_eci",
    "rotation_eci_to_rtn",
    "state_transform_eci_to_rtn",
    "state_transform_rtn_to_eci",
]
