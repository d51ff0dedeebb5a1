"""SGP4 mean element theory.

The mean elements of a two-line element set are only meaningful through
the SGP4/SDP4 propagator that consumes them.  :class:`TLETheory` expands
mean Keplerian elements ``[a, e, i, RAAN, omega, M]`` into an osculating
Cartesian state in the TEME frame by initialising a ``sgp4`` satellite
record and evaluating it at its own epoch.  The semi-major axis stands
for the Kozai mean motion, ``n = sqrt(mu / a^3)`` with the WGS-72
gravitational parameter.

The ``sgp4`` library runs outside JAX, so the theory is not
differentiable; the least-squares converter falls back to finite
differences for it.
"""

from __future__ import annotations

import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike
from sgp4.api import SGP4_ERRORS, WGS72, Satrec

from meanjax.config import get_dtype
from meanjax.constants import JD_SGP4_ORIGIN, WGS72_MU, WGS72_RADIUS
from meanjax.epoch import Epoch
from meanjax.errors import OrbitValidityError
from meanjax.orbit import Orbit, OrbitType
from meanjax.theories._base import MeanTheory

TEME = "TEME"


class TLETheory(MeanTheory):
    """SGP4 mean elements.

    Args:
        bstar: Ballistic drag term B*. Units: *1/earth radii*
        satnum: Catalog number written into the satellite record.

    Examples:
        ```python
        from meanjax.theories import TLETheory
        theory = TLETheory(bstar=1.0e-4)
        ```
    """

    name = "TLE"
    element_type = OrbitType.KEPLERIAN
    differentiable = False

    def __init__(self, bstar: float = 0.0, satnum: int = 0) -> None:
        super().__init__(WGS72_RADIUS, WGS72_MU)
        self.bstar = float(bstar)
        self.satnum = int(satnum)

    def _parameters(self) -> tuple:
        return (self.bstar, self.satnum)

    @property
    def osculating_type(self) -> OrbitType:
        return OrbitType.CARTESIAN

    def pre_check(self, orbit: Orbit) -> None:
        """Reject orbits not expressed in TEME or inside the Earth.

        Raises:
            ValueError: If the frame of *orbit* is not ``"TEME"``.
            OrbitValidityError: If the orbit lies inside the Brillouin
                sphere.
        """
        if orbit.frame != TEME:
            raise ValueError(f"TLE mean elements require the {TEME} frame, got {orbit.frame!r}")
        super().pre_check(orbit)

    def check_elements(self, mean: Array) -> None:
        e = float(mean[1])
        if not 0.0 <= e < 1.0:
            raise OrbitValidityError(self.name, f"eccentricity out of range: e = {e}")

    def satellite(self, mean: ArrayLike, epoch: Epoch) -> Satrec:
        """Initialise an SGP4 satellite record from mean elements.

        Args:
            mean: Mean Keplerian elements ``[a, e, i, RAAN, omega, M]``.
            epoch: Epoch of the elements.

        Returns:
            Satrec: Record initialised in improved mode with WGS-72
            constants.
        """
        a, e, i, raan, argp, m = (float(v) for v in np.asarray(mean))
        # Kozai mean motion in rad/min
        no_kozai = np.sqrt(WGS72_MU / a**3) * 60.0
        jd, fraction = epoch.jd_split()
        sat = Satrec()
        sat.sgp4init(
            WGS72, "i", self.satnum, (jd - JD_SGP4_ORIGIN) + fraction,
            self.bstar, 0.0, 0.0, e, argp, i, m, no_kozai, raan,
        )
        return sat

    def mean_to_osculating(self, mean: ArrayLike, epoch: Epoch) -> Array:
        """Osculating TEME state at the epoch of the mean elements.

        Raises:
            RuntimeError: If SGP4 reports an error.
        """
        sat = self.satellite(mean, epoch)
        error, r, v = sat.sgp4_tsince(0.0)
        if error != 0:
            raise RuntimeError(f"SGP4 error {error}: {SGP4_ERRORS.get(error, 'unknown error')}")
        # km, km/s -> m, m/s
        state = np.concatenate([np.asarray(r), np.asarray(v)]) * 1.0e3
        return jnp.asarray(state, dtype=get_dtype())
