"""Orbital state covariance.

- **Container**: :class:`StateCovariance` with type, frame (inertial <->
  RTN) and Keplerian time shift operations.
- **Interpolation**: Keplerian Hermite interpolation and Tanygin
  blending between tabulated covariances.
- **Propagation**: :class:`StateCovarianceMatrixProvider` carries a
  covariance along an analytical propagator with its state transition
  matrix.
"""

from .interpolation import (
    CovarianceDerivativesFilter,
    StateCovarianceBlender,
    StateCovarianceKeplerianHermiteInterpolator,
    hermite_interpolate,
    quadratic_step,
    smoothstep,
)
from .provider import StateCovarianceMatrixProvider
from .state_covariance import RTN, StateCovariance, keplerian_transition_matrix

__all__ = [
    # Container
    "StateCovariance",
    "RTN",
    "keplerian_transition_matrix",
    # Interpolation
    "CovarianceDerivativesFilter",
    "StateCovarianceKeplerianHermiteInterpolator",
    "StateCovarianceBlender",
    "hermite_interpolate",
    "smoothstep",
    "quadratic_step",
    # Propagation
    "StateCovarianceMatrixProvider",
]
