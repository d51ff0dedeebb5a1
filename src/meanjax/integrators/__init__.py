"""Numerical integration of the mean element equations.

- :func:`rk4_step` -- one classic 4th-order Runge-Kutta step
- :func:`rk4_integrate` -- fixed-step RK4 between two times
"""

from .rk4 import StepResult, rk4_integrate, rk4_step

__all__ = [
    "StepResult",
    "rk4_step",
    "rk4_integrate",
]
