"""Instants in time.

An :class:`Epoch` holds an integer Julian Day number and the seconds
elapsed since the noon that starts it, in the configured float dtype.
Keeping the day count out of the float is what lets a float64 epoch
resolve sub-microsecond differences decades away from J2000, which the
analytical propagators rely on when they turn elapsed time into mean
angle drift.

Epochs are JAX pytrees, so they pass through ``jax.jit`` and
``jax.vmap``.  There is a single uniform time scale; UTC, TAI and TT are
not distinguished.
"""

from __future__ import annotations

import functools
import math
import re

import jax
import jax.numpy as jnp

from .config import get_dtype, get_epoch_eq_tolerance
from .constants import JD_MJD_OFFSET, SECONDS_PER_DAY

_HALF_DAY = 0.5 * SECONDS_PER_DAY

_ISO_8601 = re.compile(
    r'^(\d{4})-(\d{2})-(\d{2})(?:T(\d{2}):(\d{2}):(\d{2}(?:\.\d+)?)Z?)?$'
)


def _day_number(year: int, month: int, day: int) -> int:
    """Julian Day number of the noon falling on a Gregorian date."""
    shift = (14 - month) // 12
    y = year + 4800 - shift
    m = month + 12 * shift - 3
    return day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


def _gregorian_date(day_number: int) -> tuple[int, int, int]:
    """Gregorian ``(year, month, day)`` of a Julian Day number's noon."""
    a = day_number + 32044
    b = (4 * a + 3) // 146097
    c = a - 146097 * b // 4
    d = (4 * c + 3) // 1461
    e = c - 1461 * d // 4
    m = (5 * e + 2) // 153
    return (
        100 * b + d - 4800 + m // 10,
        m + 3 - 12 * (m // 10),
        e - (153 * m + 2) // 5 + 1,
    )


@functools.total_ordering
@jax.tree_util.register_pytree_node_class
class Epoch:
    """A single instant in time.

    Constructors:
        Epoch(2018, 1, 1)
        Epoch(2018, 1, 1, 12, 0, 0.0)
        Epoch("2018-01-01T12:00:00Z")
        Epoch(other_epoch)

    ``epoch + seconds`` and ``epoch - seconds`` give new epochs,
    ``epoch - epoch`` gives the elapsed seconds.  Equality holds within
    :func:`~meanjax.config.get_epoch_eq_tolerance`.
    """

    __slots__ = ('_jd', '_seconds')

    def __init__(self, *args: int | float | str | Epoch) -> None:
        if len(args) == 1 and isinstance(args[0], Epoch):
            self._jd, self._seconds = args[0]._jd, args[0]._seconds
            return
        if len(args) == 1 and isinstance(args[0], str):
            args = self._parse(args[0])
        elif not 3 <= len(args) <= 6:
            raise ValueError(
                "Epoch takes (year, month, day[, hour, minute, second]), "
                f"an ISO 8601 string or an Epoch, got {args!r}"
            )
        year, month, day, *clock = args
        hour, minute, second = (list(clock) + [0, 0, 0.0][len(clock):])
        # Midnight is half a day after the previous day number's noon
        self._jd = jnp.int32(_day_number(int(year), int(month), int(day)) - 1)
        self._seconds = get_dtype()(_HALF_DAY + hour * 3600.0 + minute * 60.0 + second)
        self._wrap()

    @staticmethod
    def _parse(text: str) -> tuple:
        match = _ISO_8601.match(text)
        if match is None:
            raise ValueError(f'Invalid Epoch string: "{text}" is not ISO 8601 compliant')
        year, month, day, hour, minute, second = match.groups()
        if hour is None:
            return int(year), int(month), int(day)
        return int(year), int(month), int(day), int(hour), int(minute), float(second)

    @classmethod
    def _raw(cls, jd, seconds) -> Epoch:
        out = object.__new__(cls)
        out._jd, out._seconds = jd, seconds
        return out

    def _wrap(self) -> None:
        """Carry whole days from the seconds into the day number."""
        days = jnp.floor(self._seconds / SECONDS_PER_DAY)
        self._seconds = self._seconds - days * SECONDS_PER_DAY
        self._jd = self._jd + days.astype(jnp.int32)

    def tree_flatten(self):
        return (self._jd, self._seconds), None

    @classmethod
    def tree_unflatten(cls, _aux, children):
        return cls._raw(*children)

    # Arithmetic

    def __add__(self, seconds: float) -> Epoch:
        out = Epoch._raw(self._jd, self._seconds + get_dtype()(seconds))
        out._wrap()
        return out

    def __sub__(self, other: Epoch | float) -> Epoch | jax.Array:
        if not isinstance(other, Epoch):
            return self + (-other)
        days = (self._jd - other._jd).astype(get_dtype())
        return days * SECONDS_PER_DAY + (self._seconds - other._seconds)

    def duration_from(self, other: Epoch) -> float:
        """``self - other`` in seconds, as a Python float."""
        return float(self - other)

    # Comparison

    def __eq__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return bool(jnp.abs(self - other) < get_epoch_eq_tolerance())

    def __lt__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return bool(self - other < -get_epoch_eq_tolerance())

    def __hash__(self):
        return hash((int(self._jd), round(float(self._seconds), 3)))

    # Representations

    def caldate(self) -> tuple[int, int, int, int, int, float]:
        """Calendar components ``(year, month, day, hour, minute, second)``.

        Extracted as Python values, so not traceable under ``jax.jit``.
        """
        days, clock = divmod(float(self._seconds) + _HALF_DAY, SECONDS_PER_DAY)
        year, month, day = _gregorian_date(int(self._jd) + int(days))
        hour, clock = divmod(clock, 3600.0)
        minute, second = divmod(clock, 60.0)
        return year, month, day, int(hour), int(minute), second

    def jd(self) -> jax.Array:
        """Julian Date as a single float.

        In float32 this resolves only a fraction of a day; subtract epochs
        for precise intervals.
        """
        return self._jd.astype(get_dtype()) + self._seconds / SECONDS_PER_DAY

    def mjd(self) -> jax.Array:
        """Modified Julian Date as a single float."""
        whole = math.floor(JD_MJD_OFFSET)
        days = (self._jd - jnp.int32(whole)).astype(get_dtype())
        return days - (JD_MJD_OFFSET - whole) + self._seconds / SECONDS_PER_DAY

    def jd_split(self) -> tuple[float, float]:
        """Julian Date as a ``(whole, fraction)`` pair of Python floats,
        the form taken by SGP4 initialisation."""
        return float(self._jd), float(self._seconds) / SECONDS_PER_DAY

    def __str__(self):
        year, month, day, hour, minute, second = self.caldate()
        return f'{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:06.3f}Z'

    def __repr__(self):
        return f'Epoch({self})'
