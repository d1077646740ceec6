"""Sphere primitive with geometric ray-sphere intersection.

This module provides a Sphere dataclass, the Hit record shared by all
primitives, and the sphere intersection and normal functions.

The intersection uses the geometric construction: project the vector from
the ray origin to the sphere center onto the ray (tca), compare the squared
distance from the center to the ray (d2) with the squared radius, and step
back and forth by the half chord (thc).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.geometry.sphere import Sphere, intersect_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -5), radius=1.0)
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti

from whitted.core.ray import Ray, dot, normalize, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f64


@ti.dataclass
class Hit:
    """Result of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 otherwise.
        t: Distance along the ray to the nearest hit. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f64


@ti.func
def intersect_sphere(ray: Ray, sphere: Sphere) -> Hit:
    """Find the nearest non-negative hit distance of a ray with a sphere.

    When the ray origin is inside the sphere the near root is negative and
    the far root (the exit point) is returned instead. A tangent ray has
    thc == 0 and hits once at tca.

    Args:
        ray: The ray to test. Its direction must be unit length.
        sphere: The sphere to test against.

    Returns:
        A Hit with the nearest distance, or a miss when the ray passes the
        sphere or the sphere lies entirely behind the ray.
    """
    to_center = sphere.center - ray.origin
    tca = dot(to_center, ray.direction)
    d2 = dot(to_center, to_center) - tca * tca
    radius2 = sphere.radius * sphere.radius

    did_hit = 0
    hit_t = 0.0

    if d2 <= radius2:
        thc = ti.sqrt(radius2 - d2)
        t0 = tca - thc
        t1 = tca + thc
        if t0 < 0.0:
            t0 = t1
        if t0 >= 0.0:
            did_hit = 1
            hit_t = t0

    return Hit(hit=did_hit, t=hit_t)


@ti.func
def sphere_normal(sphere: Sphere, point: vec3) -> vec3:
    """Outward unit normal of a sphere at a surface point."""
    return normalize(point - sphere.center)


@ti.func
def make_sphere(center: vec3, radius: ti.f64) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
