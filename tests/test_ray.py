"""Unit tests for the ray module.

Tests cover:
- Ray dataclass, ray_at and make_ray
- Vector utility functions (dot, norm, normalize, reflect, refract)
- Zero-vector normalization and total internal reflection
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from whitted.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(1.0)
        assert r[1] == pytest.approx(2.0)
        assert r[2] == pytest.approx(3.0)

    def test_ray_at_positive_t(self):
        """Test ray_at computes origin + t * direction."""
        from whitted.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 1.0, 0.0), direction=vec3(1.0, 0.0, 0.0))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(5.0)
        assert r[1] == pytest.approx(1.0)
        assert r[2] == pytest.approx(0.0)

    def test_make_ray_normalizes_direction(self):
        """Test make_ray stores a unit direction."""
        from whitted.core.ray import make_ray, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(3.0, 0.0, 4.0))
            result[None] = ray.direction

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(0.6)
        assert r[1] == pytest.approx(0.0)
        assert r[2] == pytest.approx(0.8)


class TestVectorUtilities:
    """Tests for vector utility functions."""

    def test_dot_and_norm(self):
        from whitted.core.ray import dot, norm, vec3

        dot_result = ti.field(dtype=ti.f64, shape=())
        norm_result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            dot_result[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))
            norm_result[None] = norm(vec3(2.0, 3.0, 6.0))

        test_kernel()
        assert dot_result[None] == pytest.approx(12.0)
        assert norm_result[None] == pytest.approx(7.0)

    @pytest.mark.parametrize(
        "v",
        [(1.0, 0.0, 0.0), (3.0, -4.0, 12.0), (1e-8, 2e-8, -3e-8), (1e6, 1e6, 1e6)],
    )
    def test_normalize_gives_unit_length(self, v):
        """Test that a normalized nonzero vector has length 1."""
        from whitted.core.ray import norm, normalize, vec3

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(x: ti.f64, y: ti.f64, z: ti.f64):
            result[None] = norm(normalize(vec3(x, y, z)))

        test_kernel(*v)
        assert result[None] == pytest.approx(1.0, abs=1e-12)

    def test_normalize_zero_vector_returns_zero(self):
        """Test that normalizing a zero vector gives zero instead of NaN."""
        from whitted.core.ray import normalize, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(0.0, 0.0, 0.0))

        test_kernel()
        r = result[None].to_numpy()
        assert not np.isnan(r).any()
        assert np.all(r == 0.0)

    def test_reflect_about_up_normal(self):
        from whitted.core.ray import normalize, reflect, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(1.0, -1.0, 0.0))
            result[None] = reflect(incident, vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        s = 1.0 / math.sqrt(2.0)
        assert r[0] == pytest.approx(s)
        assert r[1] == pytest.approx(s)
        assert r[2] == pytest.approx(0.0)

    def test_reflect_twice_is_identity(self):
        """Test that reflecting twice about the same unit normal is a no-op."""
        from whitted.core.ray import normalize, reflect, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            n = normalize(vec3(0.3, 0.8, -0.5))
            v = vec3(1.5, -2.0, 0.25)
            result[None] = reflect(reflect(v, n), n)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(1.5)
        assert r[1] == pytest.approx(-2.0)
        assert r[2] == pytest.approx(0.25)


class TestRefract:
    """Tests for Snell's law refraction."""

    def test_refract_normal_incidence_passes_straight(self):
        """Test that a ray hitting head-on is not bent."""
        from whitted.core.ray import refract, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = refract(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.5)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(0.0, abs=1e-12)
        assert r[1] == pytest.approx(-1.0)
        assert r[2] == pytest.approx(0.0, abs=1e-12)

    def test_refract_entering_bends_toward_normal(self):
        """Test Snell's law when entering a denser medium."""
        from whitted.core.ray import normalize, refract, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(1.0, -1.0, 0.0))
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), 1.5)

        test_kernel()
        r = result[None]
        sin_t = math.sin(math.pi / 4.0) / 1.5
        assert r[0] == pytest.approx(sin_t)
        assert r[1] == pytest.approx(-math.sqrt(1.0 - sin_t * sin_t))
        assert r[0] ** 2 + r[1] ** 2 + r[2] ** 2 == pytest.approx(1.0)

    def test_refract_exiting_swaps_indices(self):
        """Test that a ray leaving the medium bends away from the normal."""
        from whitted.core.ray import normalize, refract, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            # Travelling along the outward normal: the ray is inside
            incident = normalize(vec3(0.3, 1.0, 0.0))
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), 1.3)

        test_kernel()
        r = result[None]
        sin_i = 0.3 / math.sqrt(1.09)
        assert r[0] == pytest.approx(sin_i * 1.3)
        assert r[1] > 0.0

    def test_total_internal_reflection_returns_zero(self):
        """Test that no transmitted direction exists past the critical angle."""
        from whitted.core.ray import normalize, refract, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(1.0, 0.2, 0.0))
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), 1.5)

        test_kernel()
        assert np.all(result[None].to_numpy() == 0.0)
