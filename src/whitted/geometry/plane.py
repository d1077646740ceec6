"""Bounded horizontal plane primitive.

A plane here is a finite axis-aligned rectangle lying at a fixed height y,
spanning [x_min, x_max] x [z_min, z_max]. It is used as the floor of the
reference scene. The plane is one-sided in orientation: its normal is always
(0, 1, 0), whatever the point or the side the ray comes from.

Ray-plane intersection:
1. Reject rays parallel to the plane (direction.y == 0)
2. Solve origin.y + t * direction.y = y for t and reject t <= 0
3. Accept the hit only if the point lies inside the rectangle bounds

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.geometry.plane import Plane, intersect_plane
    >>> floor = Plane(y=-3.0, x_min=-10.0, x_max=10.0, z_min=-100.0, z_max=-5.0)
    >>> # Use intersect_plane within a Taichi kernel
"""

import taichi as ti

from whitted.core.ray import Ray, ray_at, vec3

from .sphere import Hit


@ti.dataclass
class Plane:
    """A finite horizontal rectangle.

    Attributes:
        y: Height of the plane.
        x_min: Lower x bound (inclusive).
        x_max: Upper x bound (inclusive).
        z_min: Lower z bound (inclusive).
        z_max: Upper z bound (inclusive).
    """

    y: ti.f64
    x_min: ti.f64
    x_max: ti.f64
    z_min: ti.f64
    z_max: ti.f64


@ti.func
def intersect_plane(ray: Ray, plane: Plane) -> Hit:
    """Test for ray-plane intersection.

    Args:
        ray: The ray to test. Its direction must be unit length.
        plane: The plane to test against.

    Returns:
        A Hit with the distance to the plane, or a miss if the ray is
        parallel to the plane, points away from it, or crosses it outside
        the rectangle.
    """
    did_hit = 0
    hit_t = 0.0

    if ray.direction.y != 0.0:
        d = -(ray.origin.y - plane.y) / ray.direction.y
        if d > 0.0:
            point = ray_at(ray, d)
            if (
                point.x >= plane.x_min
                and point.x <= plane.x_max
                and point.z >= plane.z_min
                and point.z <= plane.z_max
            ):
                did_hit = 1
                hit_t = d

    return Hit(hit=did_hit, t=hit_t)


@ti.func
def plane_normal(plane: Plane, point: vec3) -> vec3:
    """Unit normal of a plane. Always points up."""
    return vec3(0.0, 1.0, 0.0)


@ti.func
def make_plane(
    y: ti.f64, x_min: ti.f64, x_max: ti.f64, z_min: ti.f64, z_max: ti.f64
) -> Plane:
    """Create a plane inside a Taichi kernel."""
    return Plane(y=y, x_min=x_min, x_max=x_max, z_min=z_min, z_max=z_max)
