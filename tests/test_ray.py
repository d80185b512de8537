"""Unit tests for the Ray dataclass and vector helpers.

Tests cover:
- Ray construction and evaluation along the ray
- Length, normalization and dot products
- Mirror reflection about a normal
"""

import math

import taichi as ti


class TestRayBasics:
    """Tests for Ray construction and ray_at."""

    def test_make_ray_stores_origin_and_direction(self):
        """make_ray keeps origin and direction unchanged."""
        from src.spheretrace.core.ray import make_ray, vec3

        origin = ti.field(dtype=ti.math.vec3, shape=())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, -1.0))
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        o = origin[None]
        d = direction[None]
        assert (o[0], o[1], o[2]) == (1.0, 2.0, 3.0)
        assert (d[0], d[1], d[2]) == (0.0, 0.0, -1.0)

    def test_ray_at(self):
        """ray_at returns origin + t * direction."""
        from src.spheretrace.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 0.0, 0.0), vec3(0.0, 2.0, 0.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        p = result[None]
        assert abs(p[0] - 1.0) < 1e-6
        assert abs(p[1] - 5.0) < 1e-6
        assert abs(p[2]) < 1e-6


class TestVectorHelpers:
    """Tests for vector helper functions."""

    def test_length_and_length_squared(self):
        """Test length of a 3-4-0 vector."""
        from src.spheretrace.core.ray import length, length_squared, vec3

        len_result = ti.field(dtype=ti.f32, shape=())
        len_sq_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 0.0)
            len_result[None] = length(v)
            len_sq_result[None] = length_squared(v)

        test_kernel()
        assert abs(len_result[None] - 5.0) < 1e-6
        assert abs(len_sq_result[None] - 25.0) < 1e-5

    def test_normalize_gives_unit_vector(self):
        """normalize returns a unit vector in the same direction."""
        from src.spheretrace.core.ray import normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(0.0, 0.0, -7.0))

        test_kernel()
        v = result[None]
        assert abs(v[2] + 1.0) < 1e-6
        assert abs(math.sqrt(v[0] ** 2 + v[1] ** 2 + v[2] ** 2) - 1.0) < 1e-6

    def test_dot(self):
        """Test dot product."""
        from src.spheretrace.core.ray import dot, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))

        test_kernel()
        assert abs(result[None] - 12.0) < 1e-5


class TestReflect:
    """Tests for mirror reflection."""

    def test_reflect_head_on(self):
        """A ray hitting a surface head-on comes straight back."""
        from src.spheretrace.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0))

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2] - 1.0) < 1e-6

    def test_reflect_at_45_degrees(self):
        """The tangential component is kept, the normal one flipped."""
        from src.spheretrace.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6
