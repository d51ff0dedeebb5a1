"""Keplerian orbital mechanics functions.

This sub-module provides:

- **Mean motion and period** for an arbitrary central body, and the
  sensitivity of the mean motion to the semi-major axis.
- **Anomaly conversions** between mean, eccentric, and true anomalies,
  including a JAX-traceable Kepler equation solver.
- **First-order J2 mapping** between mean and osculating Keplerian
  elements (Schaub & Junkins, Appendix F).
"""

from .keplerian import (
    KEPLER_ITERATIONS,
    anomaly_eccentric_to_mean,
    anomaly_eccentric_to_true,
    anomaly_mean_to_eccentric,
    anomaly_mean_to_true,
    anomaly_true_to_eccentric,
    anomaly_true_to_mean,
    mean_motion,
    mean_motion_dot_wrt_a,
    orbital_period,
    semimajor_axis,
)
from .mean_elements import (
    state_koe_mean_to_osc,
    state_koe_osc_to_mean,
    transform_koe_j2,
)

__all__ = [
    "KEPLER_ITERATIONS",
    "mean_motion",
    "mean_motion_dot_wrt_a",
    "orbital_period",
    "semimajor_axis",
    "anomaly_eccentric_to_mean",
    "anomaly_mean_to_eccentric",
    "anomaly_true_to_eccentric",
    "anomaly_eccentric_to_true",
    "anomaly_true_to_mean",
    "anomaly_mean_to_true",
    "state_koe_osc_to_mean",
    "state_koe_mean_to_osc",
    "transform_koe_j2",
]
