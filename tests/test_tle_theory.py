"""Tests for the SGP4 mean element theory against the reference python-sgp4 library."""

import jax.numpy as jnp
import numpy as np
import pytest
from sgp4.api import WGS72 as SGP4_WGS72
from sgp4.api import Satrec

from meanjax.constants import WGS72_MU
from meanjax.converters import FixedPointConverter, LeastSquaresConverter
from meanjax.epoch import Epoch
from meanjax.errors import OrbitValidityError
from meanjax.orbit import Orbit, OrbitType
from meanjax.theories import TEME, AveragedElements, TLETheory

# ISS TLE, near-Earth LEO (period ~92 min)
ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

_POS_TOL = 1e-6    # metres
_VEL_TOL = 1e-9    # m/s


def _reference():
    return Satrec.twoline2rv(ISS_LINE1, ISS_LINE2, SGP4_WGS72)


def _tle_epoch(sat):
    days = (sat.jdsatepoch - 2451545.0) + sat.jdsatepochF
    return Epoch(2000, 1, 1, 12, 0, 0.0) + days * 86400.0


def _tle_mean(sat):
    """Mean Keplerian elements of a satellite record, with the Kozai mean
    motion expressed as a semi-major axis."""
    n = sat.no_kozai / 60.0
    a = (WGS72_MU / (n * n)) ** (1.0 / 3.0)
    return jnp.array([a, sat.ecco, sat.inclo, sat.nodeo, sat.argpo, sat.mo])


@pytest.fixture()
def iss():
    sat = _reference()
    return sat, TLETheory(bstar=sat.bstar, satnum=25544), _tle_mean(sat), _tle_epoch(sat)


class TestTLETheory:
    def test_matches_reference_at_epoch(self, iss):
        sat, theory, mean, epoch = iss
        _, r, v = sat.sgp4_tsince(0.0)
        state = theory.mean_to_osculating(mean, epoch)
        np.testing.assert_allclose(np.asarray(state[:3]), np.asarray(r) * 1e3, atol=_POS_TOL)
        np.testing.assert_allclose(np.asarray(state[3:]), np.asarray(v) * 1e3, atol=_VEL_TOL)

    def test_satellite_record(self, iss):
        sat, theory, mean, epoch = iss
        record = theory.satellite(mean, epoch)
        assert record.satnum == 25544
        assert record.bstar == pytest.approx(sat.bstar)
        assert record.no_kozai == pytest.approx(sat.no_kozai, rel=1e-12)

    def test_osculating_orbit(self, iss):
        _, theory, mean, epoch = iss
        orbit = theory.osculating_from_averaged(
            AveragedElements(mean, OrbitType.KEPLERIAN), epoch, TEME
        )
        assert orbit.orbit_type is OrbitType.CARTESIAN
        assert orbit.frame == TEME
        assert orbit.gm == WGS72_MU

    def test_requires_teme(self, iss):
        _, theory, mean, epoch = iss
        orbit = Orbit(mean, OrbitType.KEPLERIAN, epoch, gm=WGS72_MU)
        with pytest.raises(ValueError, match="TEME"):
            theory.pre_check(orbit)

    def test_rejects_hyperbolic_mean(self):
        with pytest.raises(OrbitValidityError, match="eccentricity"):
            TLETheory().check_elements(jnp.array([7.0e6, 1.1, 1.0, 0.0, 0.0, 0.0]))

    def test_not_differentiable(self, iss):
        _, theory, mean, epoch = iss
        assert not theory.differentiable
        with pytest.raises(NotImplementedError):
            theory.osculating_equinoctial_jacobian(mean, epoch)


# ──────────────────────────────────────────────
# Recovering TLE mean elements
# ──────────────────────────────────────────────


def _assert_recovers(result, mean, gm):
    expected = Orbit(mean, OrbitType.KEPLERIAN, result.epoch, TEME, gm).to_equinoctial().elements
    recovered = result.to_orbit().to_equinoctial().elements
    assert float(recovered[0]) == pytest.approx(float(expected[0]), rel=1e-9)
    assert jnp.allclose(recovered[1:5], expected[1:5], atol=1e-8)
    diff = float(recovered[5] - expected[5])
    assert abs((diff + np.pi) % (2.0 * np.pi) - np.pi) < 1e-8


class TestTLEConversion:
    def test_fixed_point(self, iss):
        _, theory, mean, epoch = iss
        osc = theory.osculating_from_averaged(AveragedElements(mean, OrbitType.KEPLERIAN), epoch, TEME)
        result = FixedPointConverter(theory, epsilon=1e-10).convert_to_mean(osc)
        _assert_recovers(result, mean, theory.mu)

    def test_least_squares_finite_differences(self, iss):
        _, theory, mean, epoch = iss
        osc = theory.osculating_from_averaged(AveragedElements(mean, OrbitType.KEPLERIAN), epoch, TEME)
        result = LeastSquaresConverter(theory, epsilon=1e-10).convert_to_mean(osc)
        _assert_recovers(result, mean, theory.mu)

    def test_gcrf_orbit_rejected(self, iss):
        _, theory, mean, epoch = iss
        orbit = Orbit(mean, OrbitType.KEPLERIAN, epoch)
        with pytest.raises(ValueError, match="TEME"):
            FixedPointConverter(theory).convert_to_mean(orbit)
