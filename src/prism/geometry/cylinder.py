"""Finite cylinder primitive with an arbitrary axis.

The infinite-cylinder test is reduced to a circle test by removing the
component along the cylinder axis A from every vector involved. The
circle test is itself a sphere test on the projected problem:

    sphere center = C - (C.A)A
    ray origin    = O - (O.A)A
    ray direction = D - (D.A)A      (left unnormalized)

Leaving the projected direction unnormalized keeps the parametric t of
each root valid on the original ray. Roots whose axial offset from the
cylinder center exceeds height/2 fall outside the finite cylinder and are
dropped.

Only the curved lateral surface is modelled. The end caps are never
intersected, so a ray parallel to the axis always misses.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.prism.geometry.cylinder import Cylinder, cylinder_intersections
    >>> cyl = Cylinder(center=ti.math.vec3(0, 0, 0), axis=ti.math.vec3(0, 1, 0),
    ...                radius=1.0, height=2.0)
"""

import taichi as ti
import taichi.math as tm

from src.prism.core.ray import NO_INTERSECTION, length, length_squared, normalize, project
from src.prism.geometry.sphere import make_sphere, sphere_intersections

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Cylinder:
    """A finite cylinder without end caps.

    Attributes:
        center: Midpoint of the cylinder's axis segment.
        axis: Unit direction of the long axis.
        radius: Radius of the lateral surface.
        height: Full length along the axis; the surface spans
            [-height/2, height/2] around the center.
    """

    center: vec3
    axis: vec3
    radius: ti.f32
    height: ti.f32


@ti.func
def cylinder_intersections(ray_origin: vec3, ray_direction: vec3, cylinder: Cylinder):
    """Find all (up to 2) intersections of a ray with a finite cylinder.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction.
        cylinder: The cylinder to test against.

    Returns:
        A tuple (count, t1, t2) with the same conventions as
        sphere_intersections().
    """
    axis = cylinder.axis
    c_par = project(cylinder.center, axis)
    p_par = project(ray_origin, axis)
    d_par = project(ray_direction, axis)

    count = 0
    t1 = NO_INTERSECTION
    t2 = NO_INTERSECTION

    d_perp = ray_direction - d_par
    # A ray parallel to the axis can only reach the (unmodelled) caps
    if length_squared(d_perp) != 0.0:
        circle = make_sphere(cylinder.center - c_par, cylinder.radius)
        count, t1, t2 = sphere_intersections(ray_origin - p_par, d_perp, circle)

        half_height = cylinder.height / 2.0

        if count == 2:
            if length(p_par - c_par + d_par * t2) > half_height:
                t2 = NO_INTERSECTION
                count -= 1

        if count >= 1:
            if length(p_par - c_par + d_par * t1) > half_height:
                t1 = t2
                t2 = NO_INTERSECTION
                count -= 1

    return count, t1, t2


@ti.func
def intersect_cylinder(ray_origin: vec3, ray_direction: vec3, cylinder: Cylinder) -> ti.f32:
    """Return the nearest hit distance on the lateral surface, or NO_INTERSECTION."""
    count, t1, t2 = cylinder_intersections(ray_origin, ray_direction, cylinder)
    return t1


@ti.func
def cylinder_normal(cylinder: Cylinder, point: vec3) -> vec3:
    """Get the outward unit normal at a point on the lateral surface.

    Args:
        cylinder: The cylinder.
        point: A point assumed to lie on the curved surface (not a cap).

    Returns:
        The offset from the center with its axial component removed,
        normalized.
    """
    offset = point - cylinder.center
    return normalize(offset - project(offset, cylinder.axis))
