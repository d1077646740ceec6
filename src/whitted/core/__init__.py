"""Core rendering module.

This module contains the fundamental building blocks of the ray tracer:

Components:
    ray: Ray data structure and double-precision vector utilities
    integrator: Recursive Whitted shading (cast_ray), tone mapping and the
        parallel render driver

Only the ray module is imported here. The integrator declares Taichi fields
and must be imported after ti.init():

    from whitted.core.integrator import render_image
"""

from .ray import (
    Ray,
    dot,
    make_ray,
    norm,
    normalize,
    ray_at,
    reflect,
    refract,
    vec3,
)

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "norm",
    "normalize",
    "reflect",
    "refract",
]
