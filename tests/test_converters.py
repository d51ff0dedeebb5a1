"""Tests for the osculating-to-mean converters.

Tests cover:
- Round trip mean -> osculating for each analytical theory
- Fixed-point / least-squares agreement
- Single-iteration convergence for the Keplerian theory
- Convergence under float32
- Failure reporting (state machine, ConvergenceError)
- Parameter validation
"""

import logging

import jax.numpy as jnp
import numpy as np
import pytest

from meanjax.config import set_dtype
from meanjax.converters import (
    ConverterState,
    FixedPointConverter,
    LeastSquaresConverter,
    equinoctial_residual,
)
from meanjax.epoch import Epoch
from meanjax.errors import ConvergenceError, OrbitValidityError
from meanjax.orbit import Orbit, OrbitType
from meanjax.orbit_dynamics import ZonalHarmonics
from meanjax.theories import (
    BrouwerLyddaneTheory,
    DSSTZonalTheory,
    EcksteinHechlerTheory,
    J2FirstOrderTheory,
    KeplerianTheory,
)

_POS_TOL = 2e-5    # metres
_VEL_TOL = 1e-8    # m/s
_SMA_REL_TOL = 1e-9

_KOE = (1.0e7, 0.1, 1.0, 0.2, 0.3, 0.4)
_KOE_NEAR_CIRCULAR = (7.2e6, 1.0e-3, 1.7, 0.3, 0.1, 0.4)


def _epoch():
    return Epoch(2024, 1, 1)


def _orbit(koe=_KOE):
    return Orbit(jnp.array(koe), OrbitType.KEPLERIAN, _epoch())


def _assert_rebuilds(osculating, mean, pos_tol=_POS_TOL, vel_tol=_VEL_TOL):
    rebuilt = mean.to_osculating_orbit()
    assert float(jnp.max(jnp.abs(rebuilt.position - osculating.position))) < pos_tol
    assert float(jnp.max(jnp.abs(rebuilt.velocity - osculating.velocity))) < vel_tol


# ──────────────────────────────────────────────
# Brouwer-Lyddane round trips
# ──────────────────────────────────────────────


class TestBrouwerLyddaneConversion:
    def test_fixed_point(self):
        osc = _orbit()
        mean = FixedPointConverter(BrouwerLyddaneTheory()).convert_to_mean(osc)
        assert mean.orbit_type is OrbitType.KEPLERIAN
        assert mean.iterations > 1
        _assert_rebuilds(osc, mean)

    def test_least_squares(self):
        osc = _orbit()
        mean = LeastSquaresConverter(BrouwerLyddaneTheory()).convert_to_mean(osc)
        _assert_rebuilds(osc, mean)

    def test_converters_agree(self):
        theory = BrouwerLyddaneTheory()
        fp = FixedPointConverter(theory).convert_to_mean(_orbit())
        ls = LeastSquaresConverter(theory).convert_to_mean(_orbit())
        assert float(fp.elements[0]) == pytest.approx(float(ls.elements[0]), rel=_SMA_REL_TOL)
        assert jnp.allclose(fp.elements[1:], ls.elements[1:], atol=1e-9)

    def test_least_squares_needs_fewer_iterations(self):
        theory = BrouwerLyddaneTheory()
        fp = FixedPointConverter(theory).convert_to_mean(_orbit())
        ls = LeastSquaresConverter(theory).convert_to_mean(_orbit())
        assert ls.iterations <= fp.iterations

    def test_mean_differs_from_osculating(self):
        mean = FixedPointConverter(BrouwerLyddaneTheory()).convert_to_mean(_orbit())
        assert abs(float(mean.elements[0]) - _KOE[0]) > 1.0

    def test_keeps_epoch_and_frame(self):
        osc = Orbit(jnp.array(_KOE), OrbitType.KEPLERIAN, _epoch(), frame="EME2000")
        mean = FixedPointConverter(BrouwerLyddaneTheory()).convert_to_mean(osc)
        assert mean.epoch == _epoch()
        assert mean.frame == "EME2000"

    def test_cartesian_input(self):
        osc = _orbit().to_cartesian()
        mean = FixedPointConverter(BrouwerLyddaneTheory()).convert_to_mean(osc)
        _assert_rebuilds(osc, mean)

    def test_brillouin_sphere_rejected(self):
        low = _orbit((6.0e6, 0.01, 1.0, 0.0, 0.0, 0.0))
        with pytest.raises(OrbitValidityError):
            FixedPointConverter(BrouwerLyddaneTheory()).convert_to_mean(low)


# ──────────────────────────────────────────────
# Other theories
# ──────────────────────────────────────────────


class TestOtherTheories:
    def test_eckstein_hechler(self):
        osc = _orbit(_KOE_NEAR_CIRCULAR)
        mean = FixedPointConverter(EcksteinHechlerTheory()).convert_to_mean(osc)
        assert mean.orbit_type is OrbitType.CIRCULAR
        _assert_rebuilds(osc, mean)

    def test_eckstein_hechler_least_squares(self):
        osc = _orbit(_KOE_NEAR_CIRCULAR)
        mean = LeastSquaresConverter(EcksteinHechlerTheory()).convert_to_mean(osc)
        _assert_rebuilds(osc, mean)

    def test_j2_first_order(self):
        osc = _orbit()
        mean = FixedPointConverter(J2FirstOrderTheory()).convert_to_mean(osc)
        _assert_rebuilds(osc, mean)

    def test_dsst_zonal(self):
        osc = _orbit()
        theory = DSSTZonalTheory(ZonalHarmonics.eigen5c().truncated(4), n_samples=32)
        mean = FixedPointConverter(theory).convert_to_mean(osc)
        assert mean.orbit_type is OrbitType.EQUINOCTIAL
        _assert_rebuilds(osc, mean)

    def test_keplerian_single_iteration(self):
        osc = _orbit()
        mean = FixedPointConverter(KeplerianTheory()).convert_to_mean(osc)
        assert mean.iterations == 1
        assert jnp.allclose(mean.elements, osc.to_equinoctial().elements, atol=1e-12)

    def test_already_mean_is_idempotent(self):
        """Converting the mean orbit of a Keplerian theory changes nothing."""
        converter = LeastSquaresConverter(KeplerianTheory())
        once = converter.convert_to_mean(_orbit())
        twice = converter.convert_to_mean(once.to_orbit())
        assert jnp.allclose(once.elements, twice.elements, atol=1e-12)


# ──────────────────────────────────────────────
# Single precision
# ──────────────────────────────────────────────


class TestSinglePrecision:
    @pytest.fixture(autouse=True)
    def _float32(self):
        set_dtype(jnp.float32)
        yield
        set_dtype(jnp.float64)

    @pytest.mark.parametrize("converter_cls", [FixedPointConverter, LeastSquaresConverter])
    @pytest.mark.parametrize(
        "theory_cls, koe",
        [(BrouwerLyddaneTheory, _KOE), (EcksteinHechlerTheory, _KOE_NEAR_CIRCULAR)],
    )
    def test_converges(self, converter_cls, theory_cls, koe):
        converter = converter_cls(theory_cls())
        assert converter.epsilon == pytest.approx(1e-6)
        result = converter.convert(_orbit(koe))
        assert result.state is ConverterState.CONVERGED
        assert result.iterations < 20

    def test_least_squares_matches_fixed_point(self):
        theory = BrouwerLyddaneTheory()
        fp = FixedPointConverter(theory).convert_to_mean(_orbit())
        ls = LeastSquaresConverter(theory).convert_to_mean(_orbit())
        assert float(ls.elements[0]) == pytest.approx(float(fp.elements[0]), abs=20.0)
        assert jnp.allclose(ls.elements[1:3], fp.elements[1:3], atol=1e-5)


# ──────────────────────────────────────────────
# Failure reporting
# ──────────────────────────────────────────────


class TestFailure:
    def test_convert_reports_failed_state(self):
        result = FixedPointConverter(BrouwerLyddaneTheory(), max_iterations=1).convert(_orbit())
        assert result.state is ConverterState.FAILED
        assert result.iterations == 1
        assert float(jnp.max(jnp.abs(result.residual))) > 0.0

    def test_convert_reports_converged_state(self):
        result = FixedPointConverter(BrouwerLyddaneTheory()).convert(_orbit())
        assert result.state is ConverterState.CONVERGED
        assert result.mean.iterations == result.iterations

    def test_convert_to_mean_raises(self):
        converter = FixedPointConverter(BrouwerLyddaneTheory(), max_iterations=1)
        with pytest.raises(ConvergenceError, match="after 1 iterations") as exc_info:
            converter.convert_to_mean(_orbit())
        assert exc_info.value.iterations == 1
        assert exc_info.value.theory == "Brouwer-Lyddane"

    def test_failure_is_logged(self, caplog):
        converter = FixedPointConverter(BrouwerLyddaneTheory(), max_iterations=2)
        with caplog.at_level(logging.ERROR, logger="meanjax.converters._base"):
            with pytest.raises(ConvergenceError):
                converter.convert_to_mean(_orbit())
        assert any("conversion failed" in r.getMessage() for r in caplog.records)

    def test_success_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="meanjax.converters._base"):
            FixedPointConverter(KeplerianTheory()).convert_to_mean(_orbit())
        assert any("converged in 1 iterations" in r.getMessage() for r in caplog.records)


# ──────────────────────────────────────────────
# Parameters
# ──────────────────────────────────────────────


class TestParameters:
    def test_default_epsilon(self):
        assert FixedPointConverter(KeplerianTheory()).epsilon == pytest.approx(1e-12)

    @pytest.mark.parametrize("epsilon", [0.0, -1e-10])
    def test_invalid_epsilon(self, epsilon):
        with pytest.raises(ValueError, match="epsilon"):
            FixedPointConverter(KeplerianTheory(), epsilon=epsilon)

    def test_invalid_max_iterations(self):
        with pytest.raises(ValueError, match="max_iterations"):
            LeastSquaresConverter(KeplerianTheory(), max_iterations=0)

    @pytest.mark.parametrize("damping", [0.0, 1.5])
    def test_invalid_damping(self, damping):
        with pytest.raises(ValueError, match="damping"):
            FixedPointConverter(KeplerianTheory(), damping=damping)

    def test_damped_iteration_converges(self):
        theory = BrouwerLyddaneTheory()
        plain = FixedPointConverter(theory).convert_to_mean(_orbit())
        damped = FixedPointConverter(theory, damping=0.5).convert_to_mean(_orbit())
        assert damped.iterations > plain.iterations
        assert float(damped.elements[0]) == pytest.approx(float(plain.elements[0]), rel=_SMA_REL_TOL)

    def test_thresholds(self):
        converter = FixedPointConverter(KeplerianTheory(), epsilon=1e-10)
        target = jnp.array([7.0e6, 0.3, 0.4, 0.0, 0.0, 1.0])
        tol = converter.thresholds(target)
        np.testing.assert_allclose(tol[0], 1e-10 * (1.0 + 7.0e6))
        np.testing.assert_allclose(tol[1], 1e-10 * 1.5)
        np.testing.assert_allclose(tol[3], 1e-10)
        np.testing.assert_allclose(tol[5], 1e-10 * np.pi)

    def test_residual_wraps_longitude(self):
        target = jnp.array([7.0e6, 0.0, 0.0, 0.0, 0.0, 0.1])
        rebuilt = target.at[5].set(2.0 * jnp.pi - 0.1)
        delta = equinoctial_residual(target, rebuilt)
        assert float(delta[5]) == pytest.approx(0.2, abs=1e-12)

    def test_finite_difference_jacobian(self):
        """Finite differences agree with jacfwd on a differentiable theory."""
        theory = BrouwerLyddaneTheory()
        mean_eq = _orbit().to_equinoctial().elements
        ad = LeastSquaresConverter(theory).jacobian(mean_eq, _epoch())
        fd = LeastSquaresConverter(theory, use_autodiff=False).jacobian(mean_eq, _epoch())
        # Express the semi-major axis in units of itself
        scale = jnp.array([1.0e7, 1.0, 1.0, 1.0, 1.0, 1.0])
        normalize = lambda j: j * scale[None, :] / scale[:, None]
        assert jnp.allclose(normalize(fd), normalize(ad), atol=1e-6)
