"""Default reference scene.

The reference scene used for regression renders:
- An ivory sphere and a red rubber sphere in the back
- Two glass spheres in front
- A mirror sphere in the upper right
- A finite reflective floor at y = -3
- Three white point lights
- A sky-blue environment color (or an equirectangular map, if given)

Rendered from the origin looking down -z at 512x512 with a 90 degree field
of view and recursion depth 6, this scene is the end-to-end oracle for the
renderer: the algorithm is deterministic, so the output is fixed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.scene.default_scene import create_default_scene
    >>> scene = create_default_scene()
    >>> scene.get_primitive_count()
    6
"""

from __future__ import annotations

from pathlib import Path

from whitted.materials.phong import Material
from whitted.scene.manager import SceneManager

# =============================================================================
# Materials
# =============================================================================

IVORY = Material(
    diffuse_color=(0.4, 0.4, 0.3),
    specular_exponent=50.0,
    albedo=(0.6, 0.3, 0.1, 0.0),
    refractive_index=1.0,
)

RED_RUBBER = Material(
    diffuse_color=(0.3, 0.1, 0.1),
    specular_exponent=10.0,
    albedo=(0.9, 0.1, 0.0, 0.0),
    refractive_index=1.0,
)

MIRROR = Material(
    diffuse_color=(1.0, 1.0, 1.0),
    specular_exponent=1425.0,
    albedo=(0.0, 10.0, 0.8, 0.0),
    refractive_index=1.0,
)

GLASS = Material(
    diffuse_color=(0.6, 0.7, 0.8),
    specular_exponent=125.0,
    albedo=(0.0, 0.5, 0.1, 0.9),
    refractive_index=1.3,
)

FLOOR = Material(
    diffuse_color=(0.2, 0.2, 0.2),
    specular_exponent=100.0,
    albedo=(0.6, 0.3, 0.2, 0.0),
    refractive_index=1.0,
)

# =============================================================================
# Geometry and Lights
# =============================================================================

# (center, radius, material name)
SPHERES = (
    ((-3.0, 0.0, -16.0), 6.0, "ivory"),
    ((-1.0, -1.5, -8.0), 2.0, "glass"),
    ((5.0, -3.0, -8.0), 2.0, "glass"),
    ((1.5, -0.5, -18.0), 3.0, "red_rubber"),
    ((7.0, 5.0, -18.0), 4.0, "mirror"),
)

FLOOR_Y = -3.0
FLOOR_X_RANGE = (-10.0, 10.0)
FLOOR_Z_RANGE = (-100.0, -5.0)

# (position, intensity)
LIGHTS = (
    ((-20.0, 20.0, 20.0), 1.5),
    ((30.0, 50.0, -25.0), 1.8),
    ((30.0, 20.0, 30.0), 1.7),
)

ENVIRONMENT_COLOR = (0.2, 0.7, 0.8)


def create_default_scene(environment_map: str | Path | None = None) -> SceneManager:
    """Create the default reference scene.

    Args:
        environment_map: Optional path to an equirectangular texture. Without
            it, escaping rays get ENVIRONMENT_COLOR.

    Returns:
        The populated SceneManager.
    """
    scene = SceneManager()

    material_ids = {
        "ivory": scene.add_material(IVORY),
        "red_rubber": scene.add_material(RED_RUBBER),
        "mirror": scene.add_material(MIRROR),
        "glass": scene.add_material(GLASS),
        "floor": scene.add_material(FLOOR),
    }

    for center, radius, material_name in SPHERES:
        scene.add_sphere(center, radius, material_ids[material_name])

    scene.add_plane(FLOOR_Y, FLOOR_X_RANGE, FLOOR_Z_RANGE, material_ids["floor"])

    for position, intensity in LIGHTS:
        scene.add_light(position, intensity)

    scene.set_environment_color(ENVIRONMENT_COLOR)
    if environment_map is not None:
        scene.load_environment_map(environment_map)

    return scene
