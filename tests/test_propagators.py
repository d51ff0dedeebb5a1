"""Tests for the analytical and semi-analytical propagators."""

import math

import jax.numpy as jnp
import pytest

from meanjax.converters import FixedPointConverter, LeastSquaresConverter
from meanjax.epoch import Epoch
from meanjax.errors import OrbitValidityError
from meanjax.integrators import rk4_integrate
from meanjax.orbit import Orbit, OrbitType
from meanjax.orbit_dynamics import ZonalHarmonics, accel_point_mass, accel_zonal
from meanjax.orbits import anomaly_mean_to_true
from meanjax.propagators import (
    BrouwerLyddanePropagator,
    DSSTZonalPropagator,
    EcksteinHechlerPropagator,
    KeplerianPropagator,
    PropagationType,
)
from meanjax.theories import BrouwerLyddaneTheory, EcksteinHechlerTheory

_POS_TOL = 2e-5    # metres
_VEL_TOL = 1e-8    # m/s

_KOE = (1.0e7, 0.1, 1.0, 0.2, 0.3, 0.4)
_KOE_NEAR_CIRCULAR = (7.2e6, 1.0e-3, 1.7, 0.3, 0.1, 0.4)


def _epoch():
    return Epoch(2024, 1, 1)


def _orbit(koe=_KOE, **kwargs):
    return Orbit(jnp.array(koe), OrbitType.KEPLERIAN, _epoch(), **kwargs)


def _numerical_zonal(orbit, field, duration, step):
    """Osculating orbit after *duration* seconds of fixed-step RK4
    integration under the point-mass and zonal accelerations of *field*."""

    def dynamics(t, x):
        acc = accel_point_mass(x[:3], field.gm) + accel_zonal(x[:3], field)
        return jnp.concatenate([x[3:], acc])

    x = rk4_integrate(dynamics, 0.0, orbit.to_cartesian().elements, duration, step)
    return Orbit(x, OrbitType.CARTESIAN, orbit.epoch + duration, orbit.frame, orbit.gm)


def _angle_diff(a, b):
    d = float(a) - float(b)
    return abs((d + math.pi) % (2.0 * math.pi) - math.pi)


def _assert_same_state(a, b, pos_tol=_POS_TOL, vel_tol=_VEL_TOL):
    assert float(jnp.max(jnp.abs(a.position - b.position))) < pos_tol
    assert float(jnp.max(jnp.abs(a.velocity - b.velocity))) < vel_tol


# ──────────────────────────────────────────────
# Keplerian
# ──────────────────────────────────────────────


class TestKeplerianPropagator:
    def test_initial_epoch(self):
        prop = KeplerianPropagator(_orbit())
        assert prop.initial_epoch == _epoch()
        _assert_same_state(prop.propagate(_epoch()), _orbit())

    def test_matches_orbit_shift(self):
        prop = KeplerianPropagator(_orbit())
        target = _epoch() + 3600.0
        _assert_same_state(prop.propagate(target), _orbit().shifted_by(3600.0), 1e-6, 1e-9)

    def test_one_period_returns_to_start(self):
        orbit = _orbit()
        prop = KeplerianPropagator(orbit)
        back = prop.propagate(_epoch() + float(orbit.keplerian_period()))
        _assert_same_state(back, orbit, 1e-4, 1e-7)

    def test_elements_conserved(self):
        prop = KeplerianPropagator(_orbit())
        mean = prop.propagate_mean(_epoch() + 86400.0)
        assert jnp.allclose(mean.elements[:5], prop.initial_mean.elements[:5])

    def test_backward(self):
        prop = KeplerianPropagator(_orbit())
        past = prop.propagate(_epoch() - 600.0)
        assert past.epoch == _epoch() - 600.0
        _assert_same_state(past, _orbit().shifted_by(-600.0), 1e-6, 1e-9)


# ──────────────────────────────────────────────
# Brouwer-Lyddane
# ──────────────────────────────────────────────


class TestBrouwerLyddanePropagator:
    def test_initial_state_reproduced(self):
        prop = BrouwerLyddanePropagator(_orbit())
        _assert_same_state(prop.propagate(_epoch()), _orbit())

    def test_mean_propagation_type(self):
        prop = BrouwerLyddanePropagator(_orbit(), propagation_type=PropagationType.MEAN)
        assert jnp.allclose(prop.initial_mean.elements, jnp.array(_KOE))
        osc = prop.propagate(_epoch())
        expected = BrouwerLyddaneTheory().mean_to_osculating(jnp.array(_KOE))
        assert jnp.allclose(osc.elements, expected)

    def test_custom_converter(self):
        converter = LeastSquaresConverter(BrouwerLyddaneTheory())
        prop = BrouwerLyddanePropagator(_orbit(), converter=converter)
        assert prop.converter is converter
        _assert_same_state(prop.propagate(_epoch()), _orbit())

    def test_rejects_converter_of_other_theory(self):
        converter = FixedPointConverter(EcksteinHechlerTheory())
        with pytest.raises(ValueError, match="Converter inverts"):
            BrouwerLyddanePropagator(_orbit(), converter=converter)

    def test_rejects_converter_with_other_field(self):
        converter = FixedPointConverter(BrouwerLyddaneTheory(ZonalHarmonics.j2_only()))
        with pytest.raises(ValueError, match="Converter inverts"):
            BrouwerLyddanePropagator(_orbit(), converter=converter)

    def test_follows_numerical_zonal_motion(self):
        """Medium orbit over 60000 s against a numerical integration of the
        same degree 5 zonal field."""
        field = ZonalHarmonics.eigen5c().truncated(5)
        koe = (24396159.0, 0.01, math.radians(7.0), math.radians(261.0), math.pi, 0.0)
        orbit = _orbit(koe, gm=field.gm)
        bl = BrouwerLyddanePropagator(orbit, field).propagate(_epoch() + 60000.0)
        reference = _numerical_zonal(orbit, field, 60000.0, 30.0).to_keplerian()

        assert float(bl.elements[0]) == pytest.approx(float(reference.elements[0]), abs=0.175)
        assert float(bl.elements[1]) == pytest.approx(float(reference.elements[1]), abs=3.2e-6)
        assert float(bl.elements[2]) == pytest.approx(float(reference.elements[2]), abs=6.9e-8)
        assert _angle_diff(bl.elements[3], reference.elements[3]) < 1.2e-6
        assert _angle_diff(bl.elements[4], reference.elements[4]) < 0.0053
        nu_bl = anomaly_mean_to_true(bl.elements[5], bl.elements[1])
        nu_ref = anomaly_mean_to_true(reference.elements[5], reference.elements[1])
        assert _angle_diff(nu_bl, nu_ref) < 0.0052

    def test_reset_initial_state(self):
        prop = BrouwerLyddanePropagator(_orbit())
        other = Orbit(jnp.array(_KOE), OrbitType.KEPLERIAN, _epoch() + 60.0)
        prop.reset_initial_state(other)
        assert prop.initial_epoch == _epoch() + 60.0

    def test_secular_node_regression(self):
        prop = BrouwerLyddanePropagator(_orbit())
        day = prop.propagate_mean(_epoch() + 86400.0)
        assert float(day.elements[3]) < float(prop.initial_mean.elements[3])
        assert float(day.elements[0]) == pytest.approx(float(prop.initial_mean.elements[0]))

    def test_stays_close_to_keplerian_over_one_orbit(self):
        """Zonal perturbations displace the orbit by at most a few hundred km per revolution."""
        orbit = _orbit()
        target = _epoch() + float(orbit.keplerian_period())
        bl = BrouwerLyddanePropagator(orbit).propagate(target)
        kep = KeplerianPropagator(orbit).propagate(target)
        gap = float(jnp.linalg.norm(bl.position - kep.position))
        assert 1.0 < gap < 5.0e5


# ──────────────────────────────────────────────
# Eckstein-Hechler
# ──────────────────────────────────────────────


class TestEcksteinHechlerPropagator:
    def test_initial_state_reproduced(self):
        orbit = _orbit(_KOE_NEAR_CIRCULAR)
        prop = EcksteinHechlerPropagator(orbit)
        _assert_same_state(prop.propagate(_epoch()), orbit)

    def test_output_is_circular(self):
        orbit = _orbit(_KOE_NEAR_CIRCULAR)
        out = EcksteinHechlerPropagator(orbit).propagate(_epoch() + 3600.0)
        assert out.orbit_type is OrbitType.CIRCULAR
        assert out.epoch == _epoch() + 3600.0

    def test_rejects_equatorial_mean_orbit(self):
        orbit = _orbit((7.2e6, 1.0e-3, 0.0, 0.0, 0.1, 0.4))
        with pytest.raises(OrbitValidityError, match="equatorial"):
            EcksteinHechlerPropagator(orbit, propagation_type=PropagationType.MEAN)

    def test_follows_numerical_zonal_motion(self):
        """Half a day against a fixed-step integration of the same zonal field."""
        field = ZonalHarmonics.eigen5c()
        orbit = _orbit(_KOE_NEAR_CIRCULAR, gm=field.gm)
        eh = EcksteinHechlerPropagator(orbit, field).propagate(_epoch() + 43200.0)
        reference = _numerical_zonal(orbit, field, 43200.0, 10.0)
        assert float(jnp.linalg.norm(eh.position - reference.position)) < 200.0


# ──────────────────────────────────────────────
# DSST zonal
# ──────────────────────────────────────────────


class TestDSSTZonalPropagator:
    @pytest.fixture()
    def field(self):
        return ZonalHarmonics.eigen5c().truncated(4)

    def test_invalid_step(self, field):
        with pytest.raises(ValueError, match="step"):
            DSSTZonalPropagator(_orbit(), field, step=0.0)

    def test_initial_state_reproduced(self, field):
        prop = DSSTZonalPropagator(_orbit(), field, n_samples=32)
        _assert_same_state(prop.propagate(_epoch()), _orbit())

    def test_mean_semi_major_axis_constant(self, field):
        prop = DSSTZonalPropagator(_orbit(), field, n_samples=32)
        later = prop.propagate_mean(_epoch() + 86400.0)
        assert float(later.elements[0]) == pytest.approx(
            float(prop.initial_mean.elements[0]), abs=1e-3
        )

    def test_agrees_with_brouwer_lyddane(self, field):
        orbit = _orbit()
        target = _epoch() + 21600.0
        dsst = DSSTZonalPropagator(orbit, field, n_samples=32, step=1800.0).propagate(target)
        bl = BrouwerLyddanePropagator(orbit, field).propagate(target)
        assert float(jnp.linalg.norm(dsst.position - bl.position)) < 5.0e3

    def test_output_is_equinoctial(self, field):
        out = DSSTZonalPropagator(_orbit(), field, n_samples=32).propagate(_epoch() + 600.0)
        assert out.orbit_type is OrbitType.EQUINOCTIAL
