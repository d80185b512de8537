"""Unit tests for the dielectric material.

Tests cover:
- Normal incidence passes straight through, entering and leaving
- Leaving the medium obeys Snell's law
- Total internal reflection when leaving at a grazing angle
- The entering-branch combination of normal and tangential terms
- Material registry validation
"""

import math

import pytest
import taichi as ti


def _scatter(refraction_index, incident, normal):
    from src.spheretrace.materials.dielectric import scatter_direction_dielectric, vec3

    result = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(
        ri: ti.f32,
        ix: ti.f32, iy: ti.f32, iz: ti.f32,
        nx: ti.f32, ny: ti.f32, nz: ti.f32,
    ):
        result[None] = scatter_direction_dielectric(ri, vec3(ix, iy, iz), vec3(nx, ny, nz))

    test_kernel(refraction_index, *incident, *normal)
    r = result[None]
    return r[0], r[1], r[2]


def _unit(v):
    norm = math.sqrt(sum(c * c for c in v))
    return tuple(c / norm for c in v)


class TestDielectricNormalIncidence:
    """Rays along the normal are not bent."""

    @pytest.mark.parametrize("ri", [1.0, 1.5, 2.4])
    def test_entering_along_normal(self, ri):
        """A ray entering head-on keeps its direction."""
        r = _scatter(ri, (0.0, 0.0, -1.0), (0.0, 0.0, 1.0))
        assert abs(r[0]) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2] + 1.0) < 1e-6

    @pytest.mark.parametrize("ri", [1.0, 1.5])
    def test_leaving_along_normal(self, ri):
        """A ray leaving head-on keeps its direction."""
        r = _scatter(ri, (0.0, 0.0, 1.0), (0.0, 0.0, 1.0))
        assert abs(r[2] - 1.0) < 1e-6


class TestDielectricLeaving:
    """Rays travelling from inside the medium outward (d . n > 0)."""

    def test_snell_law(self):
        """sin(theta_out) = refraction_index * sin(theta_in)."""
        d = _unit((0.2, 0.0, 1.0))
        r = _scatter(1.5, d, (0.0, 0.0, 1.0))
        sin_in = d[0]
        assert abs(r[0] - 1.5 * sin_in) < 1e-5
        assert r[2] > 0.0
        assert abs(math.sqrt(sum(c * c for c in r)) - 1.0) < 1e-5

    def test_total_internal_reflection(self):
        """Beyond the critical angle the ray is mirrored back inside."""
        d = _unit((1.0, 0.0, 0.2))
        r = _scatter(1.5, d, (0.0, 0.0, 1.0))
        assert abs(r[0] - d[0]) < 1e-5
        assert abs(r[2] + d[2]) < 1e-5

    def test_index_one_no_tir(self):
        """With index 1 even grazing rays leave unbent."""
        d = _unit((1.0, 0.0, 0.2))
        r = _scatter(1.0, d, (0.0, 0.0, 1.0))
        for i in range(3):
            assert abs(r[i] - d[i]) < 1e-5


class TestDielectricEntering:
    """Rays travelling from outside into the medium (d . n <= 0)."""

    def test_entering_combination(self):
        """Direction is normalize(-cos_t * n + eta * (d + cos_i * n))."""
        d = (0.6, 0.0, -0.8)
        n = (0.0, 0.0, 1.0)
        ri = 1.5
        eta = 1.0 / ri
        cos_i = -0.8
        sin_t = math.sqrt(1.0 - cos_i * cos_i) * eta
        cos_t = math.sqrt(1.0 - sin_t * sin_t)
        expected = _unit(
            tuple(-cos_t * n[i] + eta * (d[i] + cos_i * n[i]) for i in range(3))
        )

        r = _scatter(ri, d, n)
        for i in range(3):
            assert abs(r[i] - expected[i]) < 1e-5
        # Into the sphere and bent toward the normal
        assert r[2] < 0.0
        assert abs(r[0] / r[2]) < abs(d[0] / d[2])

    def test_tir_for_index_below_one(self):
        """Entering an optically thinner medium can totally reflect."""
        d = (0.8, 0.0, -0.6)
        r = _scatter(0.5, d, (0.0, 0.0, 1.0))
        assert abs(r[0] - 0.8) < 1e-5
        assert abs(r[2] - 0.6) < 1e-5


class TestDielectricAttenuation:
    """Tests for the dielectric radiance product."""

    def test_clear_glass_passes_radiance(self):
        """With a white tint the incident radiance is unchanged."""
        from src.spheretrace.materials.dielectric import reflect_dielectric, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect_dielectric(vec3(1.0, 1.0, 1.0), vec3(0.8, 1.0, 1.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.8) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6


class TestDielectricRegistry:
    """Tests for the dielectric material registry."""

    def test_defaults(self):
        """Default refraction index is 1.5 with a white tint."""
        from src.spheretrace.materials.dielectric import (
            add_dielectric_material,
            dielectric_base_colors,
            dielectric_refraction_indices,
            get_dielectric_material_count,
        )

        idx = add_dielectric_material()
        assert get_dielectric_material_count() == 1
        assert abs(dielectric_refraction_indices[idx] - 1.5) < 1e-6
        assert abs(dielectric_base_colors[idx][2] - 1.0) < 1e-6

    @pytest.mark.parametrize("ri", [0.0, -1.5])
    def test_rejects_non_positive_index(self, ri):
        """The refraction index must be positive."""
        from src.spheretrace.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError, match="positive"):
            add_dielectric_material(ri)
