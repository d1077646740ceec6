"""Scene module for scene management and ray-scene queries.

This module handles scene representation and ray-scene queries:

Components:
    intersection: Primitive tables and the nearest-hit query
    lights: Point light storage
    environment: Flat color or equirectangular environment lookup
    manager: Scene manager coordinating primitives, materials and lights
    default_scene: The reference scene used for regression renders

Scene data lives in module-level Taichi fields, organized for the render
kernel:
    - Structure-of-Arrays layout per primitive kind
    - An insertion-ordered primitive table tagging each primitive's kind
    - Material ids referencing the shared material table

Importing this package declares fields, so call ti.init() first.
"""

from .default_scene import create_default_scene
from .environment import (
    DEFAULT_ENVIRONMENT_COLOR,
    MAX_ENV_HEIGHT,
    MAX_ENV_WIDTH,
    clear_environment_map,
    has_environment_map,
    reset_environment,
    sample_environment,
    set_environment_color,
    set_environment_map,
)
from .intersection import (
    MAX_DISTANCE,
    MAX_PLANES,
    MAX_PRIMITIVES,
    MAX_SPHERES,
    PrimitiveKind,
    SceneHitRecord,
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_primitive_count,
    get_sphere_count,
    intersect_primitive,
    intersect_scene,
    primitive_normal,
)
from .lights import MAX_LIGHTS, add_light, clear_lights, get_light_count
from .manager import LightInfo, PlaneInfo, SceneConfig, SceneManager, SphereInfo

__all__ = [
    # Intersection module
    "PrimitiveKind",
    "SceneHitRecord",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_sphere_count",
    "get_plane_count",
    "get_primitive_count",
    "intersect_primitive",
    "intersect_scene",
    "primitive_normal",
    "MAX_SPHERES",
    "MAX_PLANES",
    "MAX_PRIMITIVES",
    "MAX_DISTANCE",
    # Lights module
    "add_light",
    "clear_lights",
    "get_light_count",
    "MAX_LIGHTS",
    # Environment module
    "sample_environment",
    "set_environment_color",
    "set_environment_map",
    "clear_environment_map",
    "has_environment_map",
    "reset_environment",
    "DEFAULT_ENVIRONMENT_COLOR",
    "MAX_ENV_WIDTH",
    "MAX_ENV_HEIGHT",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "SphereInfo",
    "PlaneInfo",
    "LightInfo",
    # Default scene
    "create_default_scene",
]
