import jax
import jax.numpy as jnp
import pytest

from meanjax.constants import GM_EARTH, J2_EARTH, R_EARTH
from meanjax.orbits import (
    anomaly_eccentric_to_mean,
    anomaly_mean_to_eccentric,
    anomaly_mean_to_true,
    anomaly_true_to_mean,
    mean_motion,
    mean_motion_dot_wrt_a,
    orbital_period,
    semimajor_axis,
    state_koe_mean_to_osc,
    state_koe_osc_to_mean,
    transform_koe_j2,
)

_ANOMALY_TOL = 1e-12     # radians
_MO_SMA_TOL = 50.0       # metres (first-order mapping is not an exact inverse)
_MO_ECC_TOL = 1e-4
_MO_ANGLE_TOL = 1e-3     # radians

_SMA_500 = R_EARTH + 500e3


def _mean_leo():
    return jnp.array([
        _SMA_500,
        0.01,
        jnp.deg2rad(45.0),
        jnp.deg2rad(30.0),
        jnp.deg2rad(60.0),
        jnp.deg2rad(90.0),
    ])


# ──────────────────────────────────────────────
# Mean motion and period
# ──────────────────────────────────────────────


class TestMeanMotion:
    def test_orbital_period_500km(self):
        """Period of a 500 km LEO orbit matches reference value."""
        T = orbital_period(_SMA_500)
        assert float(T) == pytest.approx(5676.977, abs=1.0)

    def test_period_mean_motion_consistency(self):
        n = mean_motion(_SMA_500)
        assert float(orbital_period(_SMA_500)) == pytest.approx(2.0 * jnp.pi / float(n))

    def test_semimajor_axis_inverse(self):
        n = mean_motion(_SMA_500)
        assert float(semimajor_axis(n)) == pytest.approx(_SMA_500, rel=1e-12)

    def test_degrees(self):
        n_rad = mean_motion(_SMA_500)
        n_deg = mean_motion(_SMA_500, use_degrees=True)
        assert float(n_deg) == pytest.approx(float(jnp.rad2deg(n_rad)))

    def test_custom_gm(self):
        assert float(mean_motion(_SMA_500, gm=4.0 * GM_EARTH)) == pytest.approx(
            2.0 * float(mean_motion(_SMA_500))
        )


class TestMeanMotionDerivative:
    def test_closed_form(self):
        n = float(mean_motion(_SMA_500))
        assert float(mean_motion_dot_wrt_a(_SMA_500)) == pytest.approx(-1.5 * n / _SMA_500)

    def test_matches_autodiff(self):
        grad = jax.grad(lambda a: mean_motion(a))(jnp.float64(_SMA_500))
        assert float(mean_motion_dot_wrt_a(_SMA_500)) == pytest.approx(float(grad), rel=1e-12)


# ──────────────────────────────────────────────
# Anomalies
# ──────────────────────────────────────────────


class TestAnomalies:
    @pytest.mark.parametrize("e", [0.0, 0.1, 0.5, 0.7])
    @pytest.mark.parametrize("M", [0.1, 1.0, 3.0, 5.5])
    def test_mean_eccentric_roundtrip(self, e, M):
        E = anomaly_mean_to_eccentric(M, e)
        assert float(anomaly_eccentric_to_mean(E, e)) == pytest.approx(M, abs=_ANOMALY_TOL)

    @pytest.mark.parametrize("e", [0.0, 0.1, 0.7])
    def test_mean_true_roundtrip(self, e):
        nu = anomaly_mean_to_true(1.3, e)
        assert float(anomaly_true_to_mean(nu, e)) == pytest.approx(1.3, abs=1e-10)

    def test_circular_anomalies_coincide(self):
        assert float(anomaly_mean_to_true(0.8, 0.0)) == pytest.approx(0.8)

    def test_degrees(self):
        E_deg = anomaly_mean_to_eccentric(90.0, 0.1, use_degrees=True)
        E_rad = anomaly_mean_to_eccentric(jnp.pi / 2, 0.1)
        assert float(E_deg) == pytest.approx(float(jnp.rad2deg(E_rad)), abs=1e-9)


# ──────────────────────────────────────────────
# First-order J2 mean <-> osculating mapping
# ──────────────────────────────────────────────


class TestMeanOsculatingJ2:
    def test_mean_to_osc_to_mean(self):
        mean = _mean_leo()
        recovered = state_koe_osc_to_mean(state_koe_mean_to_osc(mean))
        assert abs(float(mean[0] - recovered[0])) < _MO_SMA_TOL
        assert abs(float(mean[1] - recovered[1])) < _MO_ECC_TOL
        for idx in range(2, 6):
            assert abs(float(mean[idx] - recovered[idx])) < _MO_ANGLE_TOL

    def test_degrees(self):
        mean = jnp.array([_SMA_500, 0.01, 45.0, 30.0, 60.0, 90.0])
        osc_deg = state_koe_mean_to_osc(mean, use_degrees=True)
        osc_rad = state_koe_mean_to_osc(_mean_leo())
        assert float(osc_deg[0]) == pytest.approx(float(osc_rad[0]), rel=1e-12)
        assert float(osc_deg[2]) == pytest.approx(float(jnp.rad2deg(osc_rad[2])), rel=1e-10)

    def test_osc_differs_from_mean(self):
        mean = _mean_leo()
        osc = state_koe_mean_to_osc(mean)
        assert abs(float(osc[0] - mean[0])) > 1.0

    def test_zero_j2_is_identity(self):
        mean = _mean_leo()
        osc = transform_koe_j2(mean, 1.0, 0.0, R_EARTH)
        assert jnp.allclose(osc, mean, atol=1e-9)

    def test_sign_reverses_correction(self):
        """The two directions apply opposite first-order corrections."""
        mean = _mean_leo()
        forward = transform_koe_j2(mean, 1.0, J2_EARTH, R_EARTH) - mean
        backward = transform_koe_j2(mean, -1.0, J2_EARTH, R_EARTH) - mean
        assert float(forward[0]) == pytest.approx(-float(backward[0]), rel=1e-6)

    def test_jit(self):
        mean = _mean_leo()
        assert jnp.allclose(jax.jit(state_koe_mean_to_osc)(mean), state_koe_mean_to_osc(mean))
