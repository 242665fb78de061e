"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection
    plane: Infinite plane primitive
    cylinder: Finite cylinder (lateral surface only) with an arbitrary axis
    primitive: Tagged variant over all shapes and kind-based dispatch

All intersection routines are Taichi functions (@ti.func) and follow the
pattern:
    count, t1, t2 = shape_intersections(ray_origin, ray_direction, shape)
with missing roots reported as NO_INTERSECTION.
"""

from .cylinder import Cylinder, cylinder_intersections, cylinder_normal, intersect_cylinder
from .plane import Plane, intersect_plane, plane_intersections, plane_normal
from .primitive import (
    Primitive,
    PrimitiveKind,
    intersect_primitive,
    primitive_color,
    primitive_intersections,
    primitive_normal,
)
from .sphere import Sphere, intersect_sphere, make_sphere, sphere_intersections, sphere_normal

__all__ = [
    "Sphere",
    "sphere_intersections",
    "intersect_sphere",
    "sphere_normal",
    "make_sphere",
    "Plane",
    "plane_intersections",
    "intersect_plane",
    "plane_normal",
    "Cylinder",
    "cylinder_intersections",
    "intersect_cylinder",
    "cylinder_normal",
    "Primitive",
    "PrimitiveKind",
    "primitive_intersections",
    "intersect_primitive",
    "primitive_normal",
    "primitive_color",
]
