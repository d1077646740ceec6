"""Point light storage.

Lights are points with a scalar intensity. There is no falloff with
distance: a light either reaches a surface point at full intensity or is
blocked by another primitive.
"""

import taichi as ti

from whitted.core.ray import vec3

# Maximum number of point lights in the scene
MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f64, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def add_light(position: tuple[float, float, float], intensity: float) -> int:
    """Add a point light to the scene.

    Args:
        position: Light position as (x, y, z).
        intensity: Light intensity.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = list(position)
    light_intensities[idx] = intensity
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_light_position(idx: ti.i32) -> vec3:
    return light_positions[idx]


@ti.func
def get_light_intensity(idx: ti.i32) -> ti.f64:
    return light_intensities[idx]
