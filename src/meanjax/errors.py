"""Exceptions raised by the mean element theories and converters.

Both derive from builtin exception types so callers that only care about
the broad category can keep catching ``ValueError`` / ``RuntimeError``.
"""

from __future__ import annotations


class OrbitValidityError(ValueError):
    """An orbit lies outside the validity domain of a mean element theory.

    Args:
        theory: Name of the theory that rejected the orbit.
        message: Description of the violated condition.
    """

    def __init__(self, theory: str, message: str) -> None:
        super().__init__(f"{theory}: {message}")
        self.theory = theory


class ConvergenceError(RuntimeError):
    """A converter did not reach its thresholds within the allowed number
    of iterations.

    Args:
        theory: Name of the mean theory being inverted.
        iterations: Number of iterations performed.
    """

    def __init__(self, theory: str, iterations: int) -> None:
        super().__init__(
            f"Unable to compute {theory} mean parameters after {iterations} iterations"
        )
        self.theory = theory
        self.iterations = iterations
