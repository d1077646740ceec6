"""Scene-level primitive intersection testing.

This module stores the scene's primitives in Taichi fields and answers the
nearest-hit query the shading engine is built on.

Primitives are a closed tagged variant. Each kind keeps its geometry in a
Structure-of-Arrays table, and a shared primitive table records, in insertion
order, the kind of every primitive and its index in the kind's table. The
scene query walks that table linearly and dispatches on the kind, so the
first-inserted primitive wins exact distance ties whatever its kind.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from whitted.scene.intersection import add_plane, add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -5.0), 1.0, material_id=0)
    >>> add_plane(-1.0, (-10.0, 10.0), (-20.0, 0.0), material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti

from whitted.core.ray import Ray, normalize, vec3
from whitted.geometry.plane import Plane, intersect_plane, plane_normal
from whitted.geometry.sphere import Hit, Sphere, intersect_sphere, sphere_normal


class PrimitiveKind(IntEnum):
    """Tag of a primitive in the primitive table."""

    SPHERE = 0
    PLANE = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if any primitive was hit, 0 otherwise.
        t: Distance to the nearest hit. Only valid if hit == 1.
        primitive_id: Index of the hit primitive in insertion order, or -1.
        material_id: Material id of the hit primitive, or -1.
    """

    hit: ti.i32
    t: ti.f64
    primitive_id: ti.i32
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 256
MAX_PLANES = 64
MAX_PRIMITIVES = MAX_SPHERES + MAX_PLANES

# Distance reported for a miss
MAX_DISTANCE = 1.0e30

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage: height and the (min, max) rectangle bounds
plane_heights = ti.field(dtype=ti.f64, shape=MAX_PLANES)
plane_x_ranges = ti.Vector.field(2, dtype=ti.f64, shape=MAX_PLANES)
plane_z_ranges = ti.Vector.field(2, dtype=ti.f64, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())

# Primitive table in insertion order
primitive_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_indices = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_material_ids = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive counts to zero. The field data is overwritten when
    new primitives are added.
    """
    num_spheres[None] = 0
    num_planes[None] = 0
    num_primitives[None] = 0


def _register_primitive(kind: PrimitiveKind, index: int, material_id: int) -> int:
    """Append a primitive to the insertion-ordered primitive table."""
    primitive_id = num_primitives[None]
    primitive_kinds[primitive_id] = int(kind)
    primitive_indices[primitive_id] = index
    primitive_material_ids[primitive_id] = material_id
    num_primitives[None] = primitive_id + 1
    return primitive_id


def add_sphere(
    center: tuple[float, float, float], radius: float, material_id: int = 0
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius of the sphere.
        material_id: The material id to associate with this sphere.

    Returns:
        The primitive id of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = list(center)
    sphere_radii[idx] = radius
    num_spheres[None] = idx + 1
    return _register_primitive(PrimitiveKind.SPHERE, idx, material_id)


def add_plane(
    y: float,
    x_range: tuple[float, float],
    z_range: tuple[float, float],
    material_id: int = 0,
) -> int:
    """Add a bounded horizontal plane to the scene.

    Args:
        y: Height of the plane.
        x_range: (x_min, x_max) bounds of the rectangle.
        z_range: (z_min, z_max) bounds of the rectangle.
        material_id: The material id to associate with this plane.

    Returns:
        The primitive id of the added plane.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_heights[idx] = y
    plane_x_ranges[idx] = list(x_range)
    plane_z_ranges[idx] = list(z_range)
    num_planes[None] = idx + 1
    return _register_primitive(PrimitiveKind.PLANE, idx, material_id)


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


def get_primitive_count() -> int:
    """Get the total number of primitives in the scene."""
    return int(num_primitives[None])


@ti.func
def _get_sphere(idx: ti.i32) -> Sphere:
    return Sphere(center=sphere_centers[idx], radius=sphere_radii[idx])


@ti.func
def _get_plane(idx: ti.i32) -> Plane:
    x_range = plane_x_ranges[idx]
    z_range = plane_z_ranges[idx]
    return Plane(
        y=plane_heights[idx],
        x_min=x_range[0],
        x_max=x_range[1],
        z_min=z_range[0],
        z_max=z_range[1],
    )


@ti.func
def intersect_primitive(ray: Ray, primitive_id: ti.i32) -> Hit:
    """Intersect a ray with one primitive, dispatching on its kind.

    Args:
        ray: The ray to test.
        primitive_id: Index of the primitive in insertion order.

    Returns:
        The primitive's Hit record.
    """
    kind = primitive_kinds[primitive_id]
    idx = primitive_indices[primitive_id]
    result = Hit(hit=0, t=0.0)
    if kind == int(PrimitiveKind.SPHERE):
        result = intersect_sphere(ray, _get_sphere(idx))
    elif kind == int(PrimitiveKind.PLANE):
        result = intersect_plane(ray, _get_plane(idx))
    return result


@ti.func
def primitive_normal(primitive_id: ti.i32, point: vec3) -> vec3:
    """Unit surface normal of a primitive at a point on its surface.

    Args:
        primitive_id: Index of the primitive in insertion order.
        point: A point on the primitive's surface.

    Returns:
        The normalized surface normal.
    """
    kind = primitive_kinds[primitive_id]
    idx = primitive_indices[primitive_id]
    normal = vec3(0.0, 0.0, 0.0)
    if kind == int(PrimitiveKind.SPHERE):
        normal = sphere_normal(_get_sphere(idx), point)
    elif kind == int(PrimitiveKind.PLANE):
        normal = plane_normal(_get_plane(idx), point)
    return normalize(normal)


@ti.func
def intersect_scene(ray: Ray) -> SceneHitRecord:
    """Find the nearest primitive hit by a ray.

    Tests every primitive in insertion order and keeps the smallest hit
    distance. Ties keep the earlier primitive.

    Args:
        ray: The ray to test. Its direction must be unit length.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record with
        t == MAX_DISTANCE.
    """
    closest_t = MAX_DISTANCE
    hit_primitive = -1

    for i in range(num_primitives[None]):
        rec = intersect_primitive(ray, i)
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            hit_primitive = i

    result = SceneHitRecord(hit=0, t=closest_t, primitive_id=-1, material_id=-1)
    if hit_primitive >= 0:
        result = SceneHitRecord(
            hit=1,
            t=closest_t,
            primitive_id=hit_primitive,
            material_id=primitive_material_ids[hit_primitive],
        )
    return result
