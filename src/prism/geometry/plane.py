"""Infinite plane primitive.

A plane is described by a unit normal N and a signed distance d such that
every point X on the plane satisfies N.X + d = 0. For a ray O + t*D:

    t = -(N.O + d) / (N.D)

A ray parallel to the plane (N.D == 0) either lies in it, reported as a
hit at t = 0, or never meets it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.prism.geometry.plane import Plane, intersect_plane
    >>> ground = Plane(normal=ti.math.vec3(0, 1, 0), dist=0.0)
"""

import taichi as ti
import taichi.math as tm

from src.prism.core.ray import NO_INTERSECTION, dot

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        normal: Unit surface normal (normalized when the plane is added to
            a scene).
        dist: Signed distance term d in N.X + d = 0.
    """

    normal: vec3
    dist: ti.f32


@ti.func
def intersect_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> ti.f32:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction.
        plane: The plane to test against.

    Returns:
        The non-negative hit distance, 0 for a ray lying in the plane, or
        NO_INTERSECTION.
    """
    numerator = dot(ray_origin, plane.normal) + plane.dist
    denominator = dot(ray_direction, plane.normal)

    result = NO_INTERSECTION

    if denominator == 0.0:
        if numerator == 0.0:
            # (0/0) ray starts on the plane
            result = 0.0
    else:
        t = -numerator / denominator
        if t >= 0.0:
            result = t

    return result


@ti.func
def plane_intersections(ray_origin: vec3, ray_direction: vec3, plane: Plane):
    """Return (count, t1, t2) for a plane, which has at most one hit."""
    t1 = intersect_plane(ray_origin, ray_direction, plane)
    t2 = NO_INTERSECTION
    count = 0
    if t1 >= 0.0:
        count = 1
    return count, t1, t2


@ti.func
def plane_normal(plane: Plane, point: vec3) -> vec3:
    """The normal is constant over an infinite plane."""
    return plane.normal
