"""Analytical and semi-analytical orbit propagators.

- :class:`KeplerianPropagator` -- two-body motion
- :class:`BrouwerLyddanePropagator` -- Brouwer-Lyddane theory with M2 drag
- :class:`EcksteinHechlerPropagator` -- Eckstein-Hechler theory
- :class:`DSSTZonalPropagator` -- integrated mean equations plus
  short-periodic terms

Each propagator is built from an osculating orbit (converted to mean
elements) or directly from mean elements, see :class:`PropagationType`.
"""

from ._base import AnalyticalPropagator, PropagationType
from .brouwer_lyddane import BrouwerLyddanePropagator
from .dsst import DSSTZonalPropagator
from .eckstein_hechler import EcksteinHechlerPropagator
from .keplerian import KeplerianPropagator

__all__ = [
    "PropagationType",
    "AnalyticalPropagator",
    "KeplerianPropagator",
    "BrouwerLyddanePropagator",
    "EcksteinHechlerPropagator",
    "DSSTZonalPropagator",
]
