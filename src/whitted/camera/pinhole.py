"""Pinhole camera and render settings.

The camera sits at the origin and looks down the -z axis with +y up. Each
pixel (x, y), with y = 0 at the top row, gets exactly one primary ray through
its center on an image plane at z = -1:

    fx = (2 * (x + 0.5) / width - 1) * tan(fov / 2) * width / height
    fy = (2 * ((height - y) + 0.5) / height - 1) * tan(fov / 2)
    direction = normalize((fx, fy, -1))

RenderSettings carries the four numbers the renderer needs and validates them
before any rendering work starts.

Example:
    >>> from whitted.camera.pinhole import RenderSettings
    >>> settings = RenderSettings(width=256, height=256, fov=90.0, depth=6)
    >>> settings.aspect_ratio
    1.0
"""

import math
from dataclasses import dataclass

import taichi as ti

from whitted.core.ray import Ray, make_ray, vec3

# Maximum supported image dimensions (output buffer is preallocated)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Maximum recursion depth (bounds the shading work-list)
MAX_DEPTH = 16

DEFAULT_WIDTH = 512
DEFAULT_HEIGHT = 512
DEFAULT_FOV = 90.0
DEFAULT_DEPTH = 6


@dataclass(frozen=True)
class RenderSettings:
    """Camera and render parameters.

    Attributes:
        width: Image width in pixels, in [1, MAX_IMAGE_WIDTH].
        height: Image height in pixels, in [1, MAX_IMAGE_HEIGHT].
        fov: Vertical field of view in degrees, in (0, 360].
        depth: Recursion depth for reflection/refraction, in [1, MAX_DEPTH].

    Raises:
        ValueError: If any parameter is out of range.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    fov: float = DEFAULT_FOV
    depth: int = DEFAULT_DEPTH

    def __post_init__(self) -> None:
        if not 1 <= self.width <= MAX_IMAGE_WIDTH:
            raise ValueError(f"width must be in [1, {MAX_IMAGE_WIDTH}], got {self.width}")
        if not 1 <= self.height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"height must be in [1, {MAX_IMAGE_HEIGHT}], got {self.height}"
            )
        if not 0.0 < self.fov <= 360.0:
            raise ValueError(f"fov must be in (0, 360] degrees, got {self.fov}")
        if not 1 <= self.depth <= MAX_DEPTH:
            raise ValueError(f"depth must be in [1, {MAX_DEPTH}], got {self.depth}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @property
    def fov_radians(self) -> float:
        """Field of view in radians."""
        return math.radians(self.fov)


@ti.func
def get_ray(
    x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32, fov_radians: ti.f64
) -> Ray:
    """Generate the primary ray through the center of pixel (x, y).

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        fov_radians: Field of view in radians.

    Returns:
        A ray from the origin with unit direction.
    """
    w = ti.cast(width, ti.f64)
    h = ti.cast(height, ti.f64)
    half_fov = ti.tan(fov_radians / 2.0)

    fx = (2.0 * (ti.cast(x, ti.f64) + 0.5) / w - 1.0) * half_fov * w / h
    fy = (2.0 * (ti.cast(height - y, ti.f64) + 0.5) / h - 1.0) * half_fov

    return make_ray(vec3(0.0, 0.0, 0.0), vec3(fx, fy, -1.0))
