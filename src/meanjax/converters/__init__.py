"""Osculating-to-mean element converters.

- :class:`FixedPointConverter` -- damped fixed-point iteration
- :class:`LeastSquaresConverter` -- Gauss-Newton with an autodiff or
  finite-difference Jacobian

Both invert any :class:`~meanjax.theories.MeanTheory` and raise
:class:`~meanjax.errors.ConvergenceError` rather than return a
non-converged result.
"""

from ._base import (
    ConversionResult,
    ConverterState,
    MeanElementsConverter,
    equinoctial_residual,
)
from .fixed_point import FixedPointConverter
from .least_squares import LeastSquaresConverter

__all__ = [
    "ConverterState",
    "ConversionResult",
    "MeanElementsConverter",
    "FixedPointConverter",
    "LeastSquaresConverter",
    "equinoctial_residual",
]
