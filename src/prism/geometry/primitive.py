"""Tagged primitive variant and kind-based dispatch.

Scenes mix spheres, planes and cylinders in a single insertion-ordered
array. Each entry is a Primitive whose ``kind`` selects which shape
routine interprets the shared geometric slots:

    kind      center   axis     radius   height   dist
    SPHERE    center   -        radius   -        -
    PLANE     -        normal   -        -        dist
    CYLINDER  center   axis     radius   height   -

Every primitive also carries a surface color (albedo) and a
reflectivity in [0, 1], which the shading code reads through
primitive_color() and the ``reflectivity`` field.
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.prism.core.ray import NO_INTERSECTION
from src.prism.geometry.cylinder import Cylinder, cylinder_intersections, cylinder_normal
from src.prism.geometry.plane import Plane, plane_intersections, plane_normal
from src.prism.geometry.sphere import make_sphere, sphere_intersections, sphere_normal

# Type alias for 3D vectors
vec3 = tm.vec3


class PrimitiveKind(IntEnum):
    """Enumeration of supported primitive shapes."""

    SPHERE = 0
    PLANE = 1
    CYLINDER = 2


@ti.dataclass
class Primitive:
    """A scene primitive of any supported kind.

    Attributes:
        kind: The PrimitiveKind value.
        center: Sphere/cylinder center.
        axis: Plane normal or cylinder axis (unit length).
        radius: Sphere/cylinder radius.
        height: Cylinder height.
        dist: Plane distance term.
        color: Surface color (albedo), each channel in [0, 1].
        reflectivity: Fraction of shaded color taken from the mirror
            reflection, in [0, 1].
    """

    kind: ti.i32
    center: vec3
    axis: vec3
    radius: ti.f32
    height: ti.f32
    dist: ti.f32
    color: vec3
    reflectivity: ti.f32


@ti.func
def primitive_intersections(ray_origin: vec3, ray_direction: vec3, prim: Primitive):
    """Dispatch to the shape's intersection routine.

    Returns:
        A tuple (count, t1, t2). Planes report at most one hit. An unknown
        kind reports no hits.
    """
    count = 0
    t1 = NO_INTERSECTION
    t2 = NO_INTERSECTION

    if prim.kind == int(PrimitiveKind.SPHERE):
        count, t1, t2 = sphere_intersections(
            ray_origin, ray_direction, make_sphere(prim.center, prim.radius)
        )
    elif prim.kind == int(PrimitiveKind.PLANE):
        count, t1, t2 = plane_intersections(
            ray_origin, ray_direction, Plane(normal=prim.axis, dist=prim.dist)
        )
    elif prim.kind == int(PrimitiveKind.CYLINDER):
        count, t1, t2 = cylinder_intersections(
            ray_origin,
            ray_direction,
            Cylinder(center=prim.center, axis=prim.axis, radius=prim.radius, height=prim.height),
        )

    return count, t1, t2


@ti.func
def intersect_primitive(ray_origin: vec3, ray_direction: vec3, prim: Primitive) -> ti.f32:
    """Nearest non-negative hit distance on a primitive, or NO_INTERSECTION."""
    count, t1, t2 = primitive_intersections(ray_origin, ray_direction, prim)
    return t1


@ti.func
def primitive_normal(prim: Primitive, point: vec3) -> vec3:
    """Unit surface normal of a primitive at a point on its surface."""
    normal = vec3(0.0, 0.0, 0.0)

    if prim.kind == int(PrimitiveKind.SPHERE):
        normal = sphere_normal(make_sphere(prim.center, prim.radius), point)
    elif prim.kind == int(PrimitiveKind.PLANE):
        normal = plane_normal(Plane(normal=prim.axis, dist=prim.dist), point)
    elif prim.kind == int(PrimitiveKind.CYLINDER):
        normal = cylinder_normal(
            Cylinder(center=prim.center, axis=prim.axis, radius=prim.radius, height=prim.height),
            point,
        )

    return normal


@ti.func
def primitive_color(prim: Primitive, point: vec3) -> vec3:
    """Surface color at a point. Every shape currently uses a constant albedo."""
    return prim.color
