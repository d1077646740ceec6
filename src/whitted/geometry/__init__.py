"""Geometry module for shape primitives.

This module provides the two primitive kinds the renderer supports:

Components:
    sphere: Sphere primitive with ray-sphere intersection
    plane: Finite horizontal plane (floor) primitive

All intersection routines are Taichi functions (@ti.func). Every primitive
answers the same three questions:
    intersect_<kind>(ray, prim) -> Hit(hit, t)
    <kind>_normal(prim, point) -> unit normal
    material -> stored next to the primitive in the scene tables

There is no acceleration structure; the scene tests every primitive.
"""

from .plane import Plane, intersect_plane, make_plane, plane_normal
from .sphere import Hit, Sphere, intersect_sphere, make_sphere, sphere_normal

__all__ = [
    "Hit",
    "Sphere",
    "intersect_sphere",
    "make_sphere",
    "sphere_normal",
    "Plane",
    "intersect_plane",
    "make_plane",
    "plane_normal",
]
