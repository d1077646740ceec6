"""Camera module for render settings and primary ray generation.

Components:
    pinhole: Fixed pinhole camera at the origin looking down -z, and the
        validated RenderSettings (width, height, fov, depth)

One primary ray is generated through the center of every pixel; there is no
jitter or supersampling.
"""

from .pinhole import (
    DEFAULT_DEPTH,
    DEFAULT_FOV,
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    MAX_DEPTH,
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    RenderSettings,
    get_ray,
)

__all__ = [
    "RenderSettings",
    "get_ray",
    "MAX_DEPTH",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_FOV",
    "DEFAULT_DEPTH",
]
