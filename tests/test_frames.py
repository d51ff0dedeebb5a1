"""Tests for the RTN local orbital frame transforms."""

import jax
import jax.numpy as jnp
import pytest

from meanjax.constants import GM_EARTH, R_EARTH
from meanjax.coordinates import state_koe_to_eci
from meanjax.frames import (
    rotation_eci_to_rtn,
    rotation_rtn_to_eci,
    state_transform_eci_to_rtn,
    state_transform_rtn_to_eci,
)

_SINGLE_TOL = 1e-12


def _circular_state(sma, inc=0.0):
    """Circular orbit at the ascending node, inclined about the x axis."""
    v = float(jnp.sqrt(GM_EARTH / sma))
    return jnp.array([sma, 0.0, 0.0, 0.0, v * jnp.cos(inc), v * jnp.sin(inc)])


def _eccentric_state():
    return state_koe_to_eci(jnp.array([R_EARTH + 900e3, 0.05, 1.1, 0.4, 0.7, 2.0]))


# ──────────────────────────────────────────────
# Rotations
# ──────────────────────────────────────────────


class TestRotation:
    def test_orthonormal(self):
        rot = rotation_rtn_to_eci(_eccentric_state())
        assert jnp.allclose(rot.T @ rot, jnp.eye(3), atol=_SINGLE_TOL)
        assert float(jnp.linalg.det(rot)) == pytest.approx(1.0, abs=_SINGLE_TOL)

    def test_transpose_pair(self):
        x = _eccentric_state()
        assert jnp.allclose(rotation_eci_to_rtn(x), rotation_rtn_to_eci(x).T)

    def test_axes(self):
        """Position maps onto R, angular momentum onto N."""
        x = _eccentric_state()
        rot = rotation_eci_to_rtn(x)
        r_rtn = rot @ x[:3]
        h_rtn = rot @ jnp.cross(x[:3], x[3:])
        assert jnp.allclose(r_rtn[1:], 0.0, atol=1e-6)
        assert float(r_rtn[0]) > 0.0
        assert jnp.allclose(h_rtn[:2], 0.0, atol=1e-3)
        assert float(h_rtn[2]) > 0.0

    def test_circular_velocity_is_transverse(self):
        x = _circular_state(R_EARTH + 700e3, jnp.deg2rad(51.6))
        v_rtn = rotation_eci_to_rtn(x) @ x[3:]
        assert jnp.allclose(v_rtn, jnp.array([0.0, jnp.linalg.norm(x[3:]), 0.0]), atol=1e-9)


# ──────────────────────────────────────────────
# 6x6 state transforms
# ──────────────────────────────────────────────


class TestStateTransform:
    def test_inverse(self):
        x = _eccentric_state()
        product = state_transform_rtn_to_eci(x) @ state_transform_eci_to_rtn(x)
        assert jnp.allclose(product, jnp.eye(6), atol=1e-10)

    def test_position_block_is_rotation(self):
        x = _eccentric_state()
        m = state_transform_eci_to_rtn(x)
        assert jnp.allclose(m[:3, :3], rotation_eci_to_rtn(x))
        assert jnp.allclose(m[:3, 3:], 0.0)

    def test_co_orbiting_neighbour_is_at_rest(self):
        """A neighbour further along the same circular orbit shows no
        relative velocity to first order."""
        sma = R_EARTH + 500e3
        chief = _circular_state(sma)
        n = float(jnp.sqrt(GM_EARTH / sma**3))
        theta = 1e-5
        v = sma * n
        deputy = jnp.array([
            sma * jnp.cos(theta), sma * jnp.sin(theta), 0.0,
            -v * jnp.sin(theta), v * jnp.cos(theta), 0.0,
        ])
        rel = state_transform_eci_to_rtn(chief) @ (deputy - chief)
        assert abs(float(rel[1]) - sma * theta) < 1e-3
        assert jnp.allclose(rel[3:], 0.0, atol=1e-4)

    def test_radial_offset_picks_up_along_track_rate(self):
        chief = _circular_state(R_EARTH + 500e3)
        rel = state_transform_eci_to_rtn(chief) @ jnp.array([100.0, 0.0, 0.0, 0.0, 0.0, 0.0])
        n = float(jnp.linalg.norm(chief[3:]) / chief[0])
        assert float(rel[0]) == pytest.approx(100.0, abs=1e-9)
        assert float(rel[4]) == pytest.approx(-100.0 * n, abs=1e-9)


class TestJAXCompatibility:
    def test_jit(self):
        x = _eccentric_state()
        jitted = jax.jit(state_transform_eci_to_rtn)
        assert jnp.allclose(jitted(x), state_transform_eci_to_rtn(x))

    def test_vmap(self):
        states = jnp.stack([_circular_state(R_EARTH + h) for h in (400e3, 600e3, 800e3)])
        out = jax.vmap(rotation_eci_to_rtn)(states)
        assert out.shape == (3, 3, 3)
