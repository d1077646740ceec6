"""Environment lighting for rays that leave the scene.

A ray that hits nothing, or that runs out of recursion depth, takes its color
from the environment. The environment is either a flat color or an
equirectangular RGB8 texture looked up by ray direction:

    m = 2 * |d|
    u = -d.z / m + 0.5
    v = -d.y / m + 0.5
    texel = (clamp(floor(u * W), 0, W - 1), clamp(floor(v * H), 0, H - 1))

Lookups are clamped to the texture bounds and never wrap around.

The texture is stored in a preallocated uint8 field so that switching maps
never triggers kernel recompilation.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.scene.environment import set_environment_color
    >>> set_environment_color((0.2, 0.7, 0.8))
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

from whitted.core.ray import norm, vec3

# Flat color used when no texture is set
DEFAULT_ENVIRONMENT_COLOR = (0.2, 0.7, 0.8)

# Maximum supported texture size (preallocated to avoid kernel recompilation)
MAX_ENV_WIDTH = 4096
MAX_ENV_HEIGHT = 2048

_environment_color = ti.Vector.field(3, dtype=ti.f64, shape=())
_environment_map = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_ENV_WIDTH, MAX_ENV_HEIGHT))
_environment_map_enabled = ti.field(dtype=ti.i32, shape=())
_environment_map_width = ti.field(dtype=ti.i32, shape=())
_environment_map_height = ti.field(dtype=ti.i32, shape=())


def set_environment_color(color: tuple[float, float, float]) -> None:
    """Set the flat environment color.

    Args:
        color: RGB color returned for escaping rays when no texture is set.
    """
    _environment_color[None] = list(color)


def get_environment_color() -> tuple[float, float, float]:
    """Get the flat environment color."""
    c = _environment_color[None]
    return (float(c[0]), float(c[1]), float(c[2]))


def set_environment_map(image: npt.NDArray[np.uint8]) -> None:
    """Use an equirectangular texture as the environment.

    Args:
        image: RGB8 image of shape (height, width, 3), first row at the top.

    Raises:
        ValueError: If the image is not (H, W, 3) uint8 or exceeds the
            maximum supported size.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Environment map must have shape (H, W, 3), got {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Environment map must be uint8, got {image.dtype}")

    height, width = image.shape[0], image.shape[1]
    if width == 0 or height == 0:
        raise ValueError("Environment map must not be empty")
    if width > MAX_ENV_WIDTH or height > MAX_ENV_HEIGHT:
        raise ValueError(
            f"Environment map dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_ENV_WIDTH}x{MAX_ENV_HEIGHT})"
        )

    # Field is indexed [x, y]; pad to the preallocated size
    padded = np.zeros((MAX_ENV_WIDTH, MAX_ENV_HEIGHT, 3), dtype=np.uint8)
    padded[:width, :height, :] = np.transpose(image, (1, 0, 2))
    _environment_map.from_numpy(padded)

    _environment_map_width[None] = width
    _environment_map_height[None] = height
    _environment_map_enabled[None] = 1


def clear_environment_map() -> None:
    """Stop using the texture; escaping rays get the flat color again."""
    _environment_map_enabled[None] = 0


def has_environment_map() -> bool:
    """Check if an environment texture is in use."""
    return bool(_environment_map_enabled[None])


def reset_environment() -> None:
    """Restore the default flat color and drop any texture."""
    set_environment_color(DEFAULT_ENVIRONMENT_COLOR)
    clear_environment_map()


@ti.func
def sample_environment(direction: vec3) -> vec3:
    """Environment color seen along a direction.

    Args:
        direction: Ray direction. Need not be normalized.

    Returns:
        The texel color in [0, 1] when a texture is set, otherwise the flat
        environment color.
    """
    color = _environment_color[None]

    if _environment_map_enabled[None] == 1:
        width = _environment_map_width[None]
        height = _environment_map_height[None]

        m = norm(direction) * 2.0
        u = 0.5
        v = 0.5
        if m > 0.0:
            u = -direction.z / m + 0.5
            v = -direction.y / m + 0.5

        px = ti.min(ti.max(ti.cast(ti.floor(u * width), ti.i32), 0), width - 1)
        py = ti.min(ti.max(ti.cast(ti.floor(v * height), ti.i32), 0), height - 1)

        texel = _environment_map[px, py]
        color = vec3(
            ti.cast(texel[0], ti.f64),
            ti.cast(texel[1], ti.f64),
            ti.cast(texel[2], ti.f64),
        ) / 255.0

    return color
