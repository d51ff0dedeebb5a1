"""
meanjax converts between osculating and mean orbital elements with JAX.
"""

from .constants import (
    GM_EARTH,
    R_EARTH,
    J2_EARTH,
    WGS72_MU,
    WGS72_RADIUS,
)

from .config import (
    set_dtype,
    get_dtype,
    get_epoch_eq_tolerance,
    get_convergence_threshold,
)
from .epoch import Epoch
from .errors import ConvergenceError, OrbitValidityError
from .orbit import Orbit, OrbitType, convert_elements

from .coordinates import (
    state_koe_to_eci,
    state_eci_to_koe,
    state_eqn_to_eci,
    state_eci_to_eqn,
    state_cir_to_eci,
    state_eci_to_cir,
)

from .orbit_dynamics import ZonalHarmonics

from .theories import (
    AveragedElements,
    MeanOrbit,
    MeanTheory,
    BrouwerLyddaneTheory,
    EcksteinHechlerTheory,
    DSSTZonalTheory,
    TLETheory,
    J2FirstOrderTheory,
    KeplerianTheory,
)

from .converters import (
    ConverterState,
    ConversionResult,
    FixedPointConverter,
    LeastSquaresConverter,
)

from .propagators import (
    PropagationType,
    KeplerianPropagator,
    BrouwerLyddanePropagator,
    EcksteinHechlerPropagator,
    DSSTZonalPropagator,
)

from .covariance import (
    StateCovariance,
    StateCovarianceBlender,
    StateCovarianceKeplerianHermiteInterpolator,
    StateCovarianceMatrixProvider,
    CovarianceDerivativesFilter,
)

__all__ = [
    # Constants
    "GM_EARTH",
    "R_EARTH",
    "J2_EARTH",
    "WGS72_MU",
    "WGS72_RADIUS",
    # Config
    "set_dtype",
    "get_dtype",
    "get_epoch_eq_tolerance",
    "get_convergence_threshold",
    # Core types
    "Epoch",
    "Orbit",
    "OrbitType",
    "convert_elements",
    "ConvergenceError",
    "OrbitValidityError",
    # Coordinates
    "state_koe_to_eci",
    "state_eci_to_koe",
    "state_eqn_to_eci",
    "state_eci_to_eqn",
    "state_cir_to_eci",
    "state_eci_to_cir",
    # Gravity
    "ZonalHarmonics",
    # Theories
    "AveragedElements",
    "MeanOrbit",
    "MeanTheory",
    "BrouwerLyddaneTheory",
    "EcksteinHechlerTheory",
    "DSSTZonalTheory",
    "TLETheory",
    "J2FirstOrderTheory",
    "KeplerianTheory",
    # Converters
    "ConverterState",
    "ConversionResult",
    "FixedPointConverter",
    "LeastSquaresConverter",
    # Propagators
    "PropagationType",
    "KeplerianPropagator",
    "BrouwerLyddanePropagator",
    "EcksteinHechlerPropagator",
    "DSSTZonalPropagator",
    # Covariance
    "StateCovariance",
    "StateCovarianceBlender",
    "StateCovarianceKeplerianHermiteInterpolator",
    "StateCovarianceMatrixProvider",
    "CovarianceDerivativesFilter",
]
