"""Zonal gravity field of the central body.

The mean element theories only involve the zonal part of the gravity
field.  :class:`ZonalHarmonics` holds the un-normalized zonal
coefficients ``C_n0`` together with the reference radius and central
attraction coefficient they refer to, and the functions below evaluate
the zonal disturbing potential and acceleration in an inertial frame
whose z axis is the body's rotation axis.

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, p. 56-68.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import jax
import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.constants import (
    EIGEN5C_MU,
    EIGEN5C_RADIUS,
    EIGEN5C_ZONALS,
    GM_EARTH,
    J2_EARTH,
    R_EARTH,
)


@dataclass(frozen=True)
class ZonalHarmonics:
    """Zonal part of a central-body gravity field.

    Args:
        gm: Central attraction coefficient [m^3/s^2].
        radius: Reference radius [m].
        coefficients: Un-normalized zonal coefficients; entry ``n`` is
            ``C_n0 = -J_n``.  Entries 0 and 1 are ignored.
        name: Label of the field.

    Examples:
        ```python
        from meanjax.orbit_dynamics import ZonalHarmonics
        field = ZonalHarmonics.eigen5c()
        field.cn0(2)
        ```
    """

    gm: float = EIGEN5C_MU
    radius: float = EIGEN5C_RADIUS
    coefficients: tuple[float, ...] = EIGEN5C_ZONALS
    name: str = "EIGEN-5C"

    def __post_init__(self) -> None:
        if self.gm <= 0.0:
            raise ValueError(f"gm must be positive, got {self.gm}")
        if self.radius <= 0.0:
            raise ValueError(f"radius must be positive, got {self.radius}")
        if len(self.coefficients) < 3:
            raise ValueError(
                f"At least degree 2 is required, got {len(self.coefficients) - 1}"
            )
        object.__setattr__(self, "coefficients", tuple(float(c) for c in self.coefficients))

    @property
    def max_degree(self) -> int:
        return len(self.coefficients) - 1

    def cn0(self, n: int) -> float:
        """Return the un-normalized ``C_n0`` coefficient, zero beyond the
        field's maximum degree.
        """
        if n < 0:
            raise ValueError(f"Degree must be non-negative, got {n}")
        return self.coefficients[n] if n <= self.max_degree else 0.0

    def truncated(self, degree: int) -> ZonalHarmonics:
        """Return a copy of the field truncated to *degree*."""
        if degree < 2:
            raise ValueError(f"Truncation degree must be at least 2, got {degree}")
        return ZonalHarmonics(
            self.gm, self.radius, self.coefficients[: degree + 1], self.name
        )

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @staticmethod
    def eigen5c() -> ZonalHarmonics:
        """Preset: EIGEN-5C zonal field up to degree 6."""
        return ZonalHarmonics()

    @staticmethod
    def j2_only(
        j2: float = J2_EARTH,
        gm: float = GM_EARTH,
        radius: float = R_EARTH,
    ) -> ZonalHarmonics:
        """Preset: J2-only field."""
        return ZonalHarmonics(gm, radius, (0.0, 0.0, -j2), "J2")

    @classmethod
    def from_gfc(cls, filepath: str | Path, max_degree: int = 6) -> ZonalHarmonics:
        """Read the zonal coefficients of an ICGEM ``.gfc`` gravity model.

        Fully normalized coefficients are converted with
        ``C_n0 = sqrt(2n + 1) * Cbar_n0``; tesseral and sectoral rows are
        skipped.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the header is unterminated or lacks the
                gravity constant or the radius.
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Gravity model file not found: {filepath}")

        header: dict[str, str] = {}
        zonals = np.zeros(max_degree + 1, dtype=np.float64)
        with open(filepath) as f:
            for line in f:
                if line.startswith("end_of_head"):
                    break
                fields = line.split()
                if len(fields) >= 2:
                    header[fields[0].lower()] = fields[-1]
            else:
                raise ValueError("GFC file missing 'end_of_head' marker.")

            for line in f:
                fields = line.lower().replace("d", "e").split()
                if len(fields) < 4 or fields[0] != "gfc":
                    continue
                n, m = int(fields[1]), int(fields[2])
                if m == 0 and n <= max_degree:
                    zonals[n] = float(fields[3])

        for key in ("earth_gravity_constant", "radius"):
            if key not in header:
                raise ValueError(f"GFC header missing '{key}'.")
        if header.get("norm", header.get("normalization")) != "unnormalized":
            zonals *= np.sqrt(2.0 * np.arange(max_degree + 1) + 1.0)

        return cls(
            float(header["earth_gravity_constant"].lower().replace("d", "e")),
            float(header["radius"].lower().replace("d", "e")),
            tuple(zonals),
            header.get("modelname", filepath.stem),
        )


# ---------------------------------------------------------------------------
# Zonal potential and acceleration
# ---------------------------------------------------------------------------


def _legendre(x: Array, degree: int) -> list[Array]:
    """Legendre polynomials ``P_0..P_degree`` by Bonnet's recursion."""
    p = [jnp.ones_like(x), x]
    for n in range(1, degree):
        p.append(((2 * n + 1) * x * p[n] - n * p[n - 1]) / (n + 1))
    return p


def potential_zonal(r_eci: ArrayLike, field: ZonalHarmonics) -> Array:
    """Zonal disturbing potential (central term excluded).

    ``R = gm/r * sum_{n>=2} C_n0 (R_e/r)^n P_n(z/r)``

    Args:
        r_eci: Position [m]. Shape ``(3,)`` or ``(6,)`` (only the first
            three entries are used).
        field: Zonal field.

    Returns:
        Disturbing potential [m^2/s^2].
    """
    r_eci = jnp.asarray(r_eci, dtype=get_dtype())[:3]
    r = jnp.linalg.norm(r_eci)
    sin_phi = r_eci[2] / r
    q = field.radius / r
    p = _legendre(sin_phi, field.max_degree)

    total = jnp.zeros((), dtype=r.dtype)
    qn = q
    for n in range(2, field.max_degree + 1):
        qn = qn * q
        total = total + field.cn0(n) * qn * p[n]
    return field.gm / r * total


def accel_zonal(r_eci: ArrayLike, field: ZonalHarmonics) -> Array:
    """Acceleration due to the zonal harmonics (central term excluded).

    Obtained as the gradient of :func:`potential_zonal` with ``jax.grad``.

    Args:
        r_eci: Position [m]. Shape ``(3,)`` or ``(6,)``.
        field: Zonal field.

    Returns:
        Acceleration vector [m/s^2], shape ``(3,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        from meanjax.orbit_dynamics import ZonalHarmonics, accel_zonal
        a = accel_zonal(jnp.array([7.0e6, 0.0, 1.0e6]), ZonalHarmonics.eigen5c())
        ```
    """
    r_eci = jnp.asarray(r_eci, dtype=get_dtype())[:3]
    return jax.grad(lambda r: potential_zonal(r, field))(r_eci)


def accel_point_mass(r_eci: ArrayLike, gm: float) -> Array:
    """Two-body acceleration ``-gm r / |r|^3`` [m/s^2]."""
    r_eci = jnp.asarray(r_eci, dtype=get_dtype())[:3]
    r = jnp.linalg.norm(r_eci)
    return -gm * r_eci / r**3
