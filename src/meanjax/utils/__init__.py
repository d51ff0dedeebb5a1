"""Shared utility functions for meanjax."""

from meanjax.utils._angle import from_radians, normalize_angle, to_radians

__all__ = [
    "from_radians",
    "normalize_angle",
    "to_radians",
]
