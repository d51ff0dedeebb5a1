"""First-order J2 mean element theory.

Uses the closed-form Schaub & Junkins mapping of
:func:`meanjax.orbits.transform_koe_j2` in its mean-to-osculating
direction.  Being first order in J2 it is much cheaper than
Brouwer-Lyddane and much less accurate.
"""

from __future__ import annotations

from jax import Array

from meanjax.orbit import OrbitType
from meanjax.orbit_dynamics import ZonalHarmonics
from meanjax.orbits import transform_koe_j2
from meanjax.theories._base import AnalyticalTheory


class J2FirstOrderTheory(AnalyticalTheory):
    """First-order J2 mean element theory (Schaub & Junkins, App. F).

    Mean elements are Keplerian ``[a, e, i, RAAN, omega, M]``.  Secular
    drift is not modelled; this theory is only used for conversions.

    Args:
        field: Zonal field; only ``C20`` is used.
    """

    name = "J2 first order"
    element_type = OrbitType.KEPLERIAN

    def __init__(self, field: ZonalHarmonics | None = None) -> None:
        self.field = field if field is not None else ZonalHarmonics.eigen5c()
        self.j2 = -self.field.cn0(2)
        super().__init__(self.field.radius, self.field.gm)

    def _parameters(self) -> tuple:
        return (self.field,)

    def kernel(self, mean: Array) -> Array:
        return transform_koe_j2(mean, 1.0, self.j2, self.field.radius)
