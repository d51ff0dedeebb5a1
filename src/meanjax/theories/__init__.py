"""Mean element theories.

Each theory maps mean (averaged) elements to the osculating orbit they
describe at the same epoch:

- :class:`BrouwerLyddaneTheory` -- zonal C20..C50, Keplerian elements
- :class:`EcksteinHechlerTheory` -- zonal C20..C60, near-circular orbits
- :class:`DSSTZonalTheory` -- semi-analytical zonal short-periodic terms
- :class:`TLETheory` -- SGP4 mean elements in TEME
- :class:`J2FirstOrderTheory` -- closed form first-order J2
- :class:`KeplerianTheory` -- two-body identity
"""

from .brouwer_lyddane import (
    BrouwerLyddaneTheory,
    brouwer_lyddane_mean,
    brouwer_lyddane_osculating,
)
from .dsst import (
    DSSTZonalTheory,
    dsst_zonal_mean_rates,
    dsst_zonal_osculating,
    dsst_zonal_short_periodic,
)
from .eckstein_hechler import (
    EcksteinHechlerTheory,
    eckstein_hechler_mean,
    eckstein_hechler_osculating,
)
from .j2_first_order import J2FirstOrderTheory
from .keplerian import KeplerianTheory
from ._base import AnalyticalTheory, AveragedElements, MeanOrbit, MeanTheory
from .tle import TEME, TLETheory

__all__ = [
    # Interface
    "AveragedElements",
    "MeanOrbit",
    "MeanTheory",
    "AnalyticalTheory",
    # Theories
    "BrouwerLyddaneTheory",
    "EcksteinHechlerTheory",
    "DSSTZonalTheory",
    "TLETheory",
    "J2FirstOrderTheory",
    "KeplerianTheory",
    "TEME",
    # Kernels
    "brouwer_lyddane_osculating",
    "brouwer_lyddane_mean",
    "eckstein_hechler_osculating",
    "eckstein_hechler_mean",
    "dsst_zonal_osculating",
    "dsst_zonal_mean_rates",
    "dsst_zonal_short_periodic",
]
