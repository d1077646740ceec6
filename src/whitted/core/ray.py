"""Ray data structure and vector utilities for the ray tracer.

This module provides the Ray dataclass and the small vector algebra the
renderer is built on. Everything is double precision and designed to run
inside Taichi kernels.

A ray's direction is normalized exactly once, when it is built with
make_ray(). The renderer never builds rays any other way.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.core.ray import make_ray, ray_at, vec3
    >>> @ti.kernel
    ... def point_on_ray() -> vec3:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -2.0))
    ...     return ray_at(ray, 5.0)  # (0, 0, -5)
"""

import taichi as ti

# 3D vectors are always double precision
vec3 = ti.types.vector(3, ti.f64)


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Unit length when the ray
            was built with make_ray().
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Extend the ray by distance t.

    Args:
        ray: The ray to evaluate.
        t: The distance along the ray. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray, normalizing its direction.

    Args:
        origin: The starting point of the ray.
        direction: Any direction vector. A zero vector stays zero.

    Returns:
        A new Ray with unit direction.
    """
    return Ray(origin=origin, direction=normalize(direction))


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product of two vectors."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def norm(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v. A zero-length input returns
        the zero vector instead of NaNs.
    """
    length = norm(v)
    result = vec3(0.0, 0.0, 0.0)
    if length > 0.0:
        result = v / length
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Reflecting twice about the same unit normal returns the original vector.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, refractive_index: ti.f64) -> vec3:
    """Refract an incident vector through a surface using Snell's law.

    The normal is the outward surface normal. A ray travelling against it
    enters the medium (indices 1 -> refractive_index); a ray travelling along
    it is inside and leaves the medium, so the indices are swapped and the
    normal flipped.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The outward surface normal (should be normalized).
        refractive_index: Refractive index of the medium behind the surface.

    Returns:
        The refracted direction vector, or a zero vector on total internal
        reflection.
    """
    cos_i = ti.min(ti.max(dot(incident, normal), -1.0), 1.0)
    eta_i = 1.0
    eta_t = refractive_index
    n = normal
    if cos_i < 0.0:
        cos_i = -cos_i
    else:
        eta_i = refractive_index
        eta_t = 1.0
        n = -normal

    eta = eta_i / eta_t
    k = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    result = vec3(0.0, 0.0, 0.0)
    if k >= 0.0:
        result = eta * incident + (eta * cos_i - ti.sqrt(k)) * n
    return result
