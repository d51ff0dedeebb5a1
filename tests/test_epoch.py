import jax
import jax.numpy as jnp
import pytest

from meanjax.constants import JD_SGP4_ORIGIN
from meanjax.epoch import Epoch

_SEC_TOL = 1e-6


# ──────────────────────────────────────────────
# Construction
# ──────────────────────────────────────────────


class TestEpochConstruction:
    def test_epoch_from_date(self):
        epc = Epoch(2024, 3, 15, 6, 30, 45.0)
        year, month, day, hour, minute, second = epc.caldate()
        assert (year, month, day, hour, minute) == (2024, 3, 15, 6, 30)
        assert second == pytest.approx(45.0, abs=_SEC_TOL)

    def test_epoch_from_date_defaults(self):
        epc = Epoch(2000, 1, 1)
        assert epc.caldate()[:5] == (2000, 1, 1, 0, 0)

    def test_epoch_from_string(self):
        assert Epoch("2018-01-01T12:00:00Z") == Epoch(2018, 1, 1, 12, 0, 0.0)

    def test_epoch_from_string_fractional(self):
        epc = Epoch("2020-06-15T10:30:15.250Z")
        assert epc.caldate()[5] == pytest.approx(15.25, abs=_SEC_TOL)

    def test_epoch_copy(self):
        epc = Epoch(2024, 1, 1)
        assert Epoch(epc) == epc

    def test_invalid_string_raises(self):
        with pytest.raises(ValueError, match="ISO 8601"):
            Epoch("2024/01/01")

    def test_invalid_args_raises(self):
        with pytest.raises(ValueError):
            Epoch(2024, 1)

    def test_jd_j2000(self):
        assert float(Epoch(2000, 1, 1, 12, 0, 0.0).jd()) == pytest.approx(2451545.0)

    def test_mjd(self):
        assert float(Epoch(2000, 1, 1).mjd()) == pytest.approx(51544.0)


# ──────────────────────────────────────────────
# Arithmetic and comparison
# ──────────────────────────────────────────────


class TestEpochArithmetic:
    def test_add_seconds(self):
        epc = Epoch(2024, 1, 1) + 3600.0
        assert epc.caldate()[3] == 1

    def test_add_crosses_day(self):
        epc = Epoch(2024, 1, 1, 23, 0, 0.0) + 7200.0
        assert epc.caldate()[:4] == (2024, 1, 2, 1)

    def test_subtract_seconds(self):
        epc = Epoch(2024, 1, 1) - 60.0
        assert epc.caldate()[:5] == (2023, 12, 31, 23, 59)

    def test_difference(self):
        t0 = Epoch(2024, 1, 1)
        t1 = Epoch(2024, 1, 2, 0, 0, 30.0)
        assert float(t1 - t0) == pytest.approx(86430.0, abs=_SEC_TOL)

    def test_duration_from_is_float(self):
        t0 = Epoch(2024, 1, 1)
        d = (t0 + 12.5).duration_from(t0)
        assert isinstance(d, float)
        assert d == pytest.approx(12.5, abs=_SEC_TOL)

    def test_ordering(self):
        t0 = Epoch(2024, 1, 1)
        t1 = t0 + 1.0
        assert t0 < t1
        assert t1 > t0
        assert t0 <= t0
        assert t1 >= t0
        assert t0 != t1

    def test_hash_consistent(self):
        assert hash(Epoch(2024, 1, 1)) == hash(Epoch("2024-01-01"))


class TestEpochSgp4Split:
    def test_jd_split_recombines(self):
        epc = Epoch(2024, 2, 29, 18, 0, 0.0)
        whole, fraction = epc.jd_split()
        assert whole + fraction == pytest.approx(float(epc.jd()), abs=1e-9)

    def test_jd_split_sgp4_days(self):
        """SGP4 epochs count days from 1949 December 31 00:00."""
        whole, fraction = Epoch(1950, 1, 1).jd_split()
        assert (whole - JD_SGP4_ORIGIN) + fraction == pytest.approx(1.0)


class TestJAXCompatibility:
    def test_epoch_is_pytree(self):
        epc = Epoch(2024, 1, 1)
        leaves = jax.tree_util.tree_leaves(epc)
        assert len(leaves) == 2

    def test_jit_difference(self):
        t0 = Epoch(2024, 1, 1)

        @jax.jit
        def elapsed(t):
            return t - t0

        assert float(elapsed(t0 + 100.0)) == pytest.approx(100.0, abs=_SEC_TOL)

    def test_seconds_dtype(self):
        assert Epoch(2024, 1, 1)._seconds.dtype == jnp.float64
