"""Tests for the Whitted shading engine.

This module tests the core shading functionality including:
- Depth-0 and escaping rays taking the environment color
- Direct Phong lighting and hard shadows
- Weighted mirror reflection and refraction
- Total internal reflection contributing nothing
- Tone mapping and 8-bit quantization
- Render output shape and orientation

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run, so module-level
imports of modules containing ti.field() declarations would fail.
"""

import numpy as np
import pytest

ENV = (0.2, 0.7, 0.8)


def _material(diffuse=(0.5, 0.5, 0.5), albedo=(1.0, 0.0, 0.0, 0.0), refractive_index=1.0):
    from whitted.materials.phong import Material

    return Material(diffuse, 10.0, albedo, refractive_index=refractive_index)


def _floor_scene(albedo=(1.0, 0.0, 0.0, 0.0)):
    """A diffuse floor at y = -3 under the origin, plus a scene manager."""
    from whitted.scene.manager import SceneManager

    scene = SceneManager()
    mid = scene.add_material(_material(albedo=albedo))
    scene.add_plane(-3.0, (-10.0, 10.0), (-10.0, 10.0), mid)
    scene.set_environment_color(ENV)
    return scene, mid


class TestTerminalRays:
    """Test rays that end in the environment."""

    def test_depth_zero_returns_environment(self):
        """Test that a spent ray ignores the geometry in front of it."""
        from whitted.core.integrator import trace_ray

        scene, mid = _floor_scene()
        scene.add_sphere((0.0, 0.0, -5.0), 1.0, mid)
        scene.add_light((0.0, 10.0, 0.0), 1.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=0)
        assert list(color) == pytest.approx(list(ENV))

    def test_miss_returns_environment(self):
        from whitted.core.integrator import trace_ray

        scene, _ = _floor_scene()
        scene.add_light((0.0, 10.0, 0.0), 1.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=4)
        assert list(color) == pytest.approx(list(ENV))

    def test_miss_samples_environment_map(self):
        from whitted.core.integrator import sample_environment_color, trace_ray
        from whitted.scene.environment import set_environment_map

        image = np.arange(4 * 8 * 3, dtype=np.uint8).reshape(4, 8, 3)
        set_environment_map(image)

        direction = (0.3, 0.4, -0.866)
        assert trace_ray((0.0, 0.0, 0.0), direction, depth=3) == pytest.approx(
            sample_environment_color(direction)
        )


class TestDirectLighting:
    """Test Phong shading and shadows."""

    def test_lit_diffuse_floor(self):
        """Test a light straight above a diffuse point gives full cosine."""
        from whitted.core.integrator import trace_ray

        scene, _ = _floor_scene()
        scene.add_light((0.0, 10.0, 0.0), 1.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), depth=1)
        assert list(color) == pytest.approx([0.5, 0.5, 0.5])

    def test_light_intensities_add(self):
        from whitted.core.integrator import trace_ray

        scene, _ = _floor_scene()
        scene.add_light((0.0, 10.0, 0.0), 1.0)
        scene.add_light((0.0, 20.0, 0.0), 0.5)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), depth=1)
        assert list(color) == pytest.approx([0.75, 0.75, 0.75])

    def test_blocked_light_contributes_nothing(self):
        """Test that a primitive between the point and the light casts a shadow."""
        from whitted.core.integrator import trace_ray

        scene, mid = _floor_scene()
        scene.add_sphere((0.0, 5.0, 0.0), 1.0, mid)
        scene.add_light((0.0, 10.0, 0.0), 1.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), depth=1)
        assert list(color) == [0.0, 0.0, 0.0]

    def test_occluder_beyond_light_does_not_shadow(self):
        from whitted.core.integrator import trace_ray

        scene, mid = _floor_scene()
        scene.add_sphere((0.0, 20.0, 0.0), 1.0, mid)
        scene.add_light((0.0, 10.0, 0.0), 1.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), depth=1)
        assert list(color) == pytest.approx([0.5, 0.5, 0.5])

    def test_light_below_surface_contributes_nothing(self):
        from whitted.core.integrator import trace_ray

        scene, _ = _floor_scene()
        scene.add_light((0.0, -10.0, 0.0), 1.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), depth=1)
        assert list(color) == pytest.approx([0.0, 0.0, 0.0])


class TestSecondaryRays:
    """Test reflection and refraction weighting."""

    @pytest.mark.parametrize("weight", [1.0, 0.5])
    def test_mirror_floor_reflects_environment(self, weight):
        from whitted.core.integrator import trace_ray

        _floor_scene(albedo=(0.0, 0.0, weight, 0.0))

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, -1.0), depth=1)
        assert list(color) == pytest.approx([weight * c for c in ENV])

    def test_reflection_sees_lit_surface(self):
        """Test a mirror ceiling shows the color of the lit floor under it."""
        from whitted.core.integrator import trace_ray
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        floor = scene.add_material(_material())
        mirror = scene.add_material(_material(albedo=(0.0, 0.0, 1.0, 0.0)))
        scene.add_plane(-3.0, (-10.0, 10.0), (-10.0, 10.0), floor)
        scene.add_plane(6.0, (-10.0, 10.0), (-10.0, 10.0), mirror)
        scene.add_light((0.0, 0.0, -2.0), 1.0)

        lit = trace_ray((0.0, 0.0, -2.0), (0.0, -1.0, 0.0), depth=1)
        reflected = trace_ray((0.0, 0.0, -2.0), (0.0, 1.0, 0.0), depth=2)
        assert lit[0] > 0.0
        assert list(reflected) == pytest.approx(list(lit), rel=1e-6)

    def test_index_one_refraction_passes_straight_through(self):
        from whitted.core.integrator import trace_ray
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        clear = scene.add_material(_material(albedo=(0.0, 0.0, 0.0, 1.0)))
        scene.add_sphere((0.0, 0.0, -5.0), 1.0, clear)
        scene.set_environment_color(ENV)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=3)
        assert list(color) == pytest.approx(list(ENV))

    def test_total_internal_reflection_contributes_nothing(self):
        """Test a grazing ray inside a dense sphere gets no transmitted color."""
        from whitted.core.integrator import trace_ray
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        glass = scene.add_material(_material(albedo=(0.0, 0.0, 0.0, 1.0), refractive_index=1.5))
        scene.add_sphere((0.0, 0.0, -5.0), 2.0, glass)

        color = trace_ray((0.0, 1.9, -5.0), (1.0, 0.0, 0.0), depth=2)
        assert list(color) == [0.0, 0.0, 0.0]

    def test_zero_weight_branches_are_free(self):
        """Test that a purely diffuse hit gives the same color at any depth."""
        from whitted.core.integrator import trace_ray

        scene, _ = _floor_scene()
        scene.add_light((3.0, 10.0, 1.0), 1.3)

        shallow = trace_ray((0.0, 0.0, 0.0), (0.2, -1.0, -0.3), depth=1)
        deep = trace_ray((0.0, 0.0, 0.0), (0.2, -1.0, -0.3), depth=8)
        assert shallow == deep

    def test_full_depth_between_parallel_mirrors(self):
        """Test a ray bouncing MAX_DEPTH times keeps every level of the work-list."""
        from whitted.camera.pinhole import MAX_DEPTH
        from whitted.core.integrator import trace_ray
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        mirror = scene.add_material(_material(albedo=(0.0, 0.0, 0.5, 0.0)))
        scene.add_plane(-3.0, (-1000.0, 1000.0), (-1000.0, 1000.0), mirror)
        scene.add_plane(3.0, (-1000.0, 1000.0), (-1000.0, 1000.0), mirror)
        scene.set_environment_color(ENV)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, -0.1), depth=MAX_DEPTH)
        assert list(color) == pytest.approx([0.5**MAX_DEPTH * c for c in ENV], rel=1e-9)

    def test_invalid_arguments(self):
        from whitted.camera.pinhole import MAX_DEPTH
        from whitted.core.integrator import trace_ray

        with pytest.raises(ValueError, match="depth"):
            trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=MAX_DEPTH + 1)
        with pytest.raises(ValueError, match="depth"):
            trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=-1)
        with pytest.raises(ValueError, match="direction"):
            trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), depth=1)


class TestToneMapping:
    def test_bright_color_scaled_by_max_channel(self):
        from whitted.core.integrator import tone_map_color

        assert tone_map_color((2.0, 1.0, 0.5)) == (1.0, 0.5, 0.25)

    def test_in_range_color_unchanged(self):
        from whitted.core.integrator import tone_map_color

        assert tone_map_color((0.2, 1.0, 0.0)) == (0.2, 1.0, 0.0)

    @pytest.mark.parametrize(
        ("color", "expected"),
        [
            ((1.0, 0.5, 0.0), (255, 127, 0)),
            ((0.2, 0.7, 0.8), (51, 178, 204)),
            ((-0.5, 1.5, 0.999), (0, 255, 254)),
        ],
    )
    def test_quantize(self, color, expected):
        from whitted.core.integrator import quantize_color

        assert quantize_color(color) == expected


class TestRenderImage:
    def test_empty_scene_is_environment_color(self):
        from whitted.camera.pinhole import RenderSettings
        from whitted.core.integrator import render_image

        image = render_image(RenderSettings(width=8, height=4, fov=60.0, depth=2))

        assert image.shape == (4, 8, 3)
        assert image.dtype == np.uint8
        assert np.all(image == np.array([51, 178, 204], dtype=np.uint8))

    def test_row_zero_is_top(self):
        """Test that a floor below the camera fills the bottom rows."""
        from whitted.camera.pinhole import RenderSettings
        from whitted.core.integrator import render_image
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        dark = scene.add_material(_material())
        scene.add_plane(-1.0, (-100.0, 100.0), (-100.0, 0.0), dark)

        image = render_image(RenderSettings(width=8, height=8, fov=90.0, depth=1))

        # No lights: the floor is black, the sky is the environment color
        assert np.all(image[-1] == 0)
        assert np.all(image[0] == np.array([51, 178, 204], dtype=np.uint8))

    def test_smaller_render_after_larger(self):
        from whitted.camera.pinhole import RenderSettings
        from whitted.core.integrator import render_image

        render_image(RenderSettings(width=16, height=16, depth=1))
        image = render_image(RenderSettings(width=3, height=5, depth=1))
        assert image.shape == (5, 3, 3)
