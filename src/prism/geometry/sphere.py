"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection solves the quadratic

    a*t^2 + b*t + c = 0

obtained by substituting the ray O + t*D into |X - C|^2 = r^2:

    a = |D|^2
    b = 2 * (D.O - D.C)
    c = |O|^2 + |C|^2 - 2 * (O.C) - r^2

Negative roots lie behind the ray origin and are discarded, so a ray
starting inside the sphere reports a single hit and a ray pointing away
from it reports none. The direction does not have to be unit length,
which lets the cylinder test reuse this routine on a projected ray.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.prism.geometry.sphere import Sphere, sphere_intersections
    >>> sphere = Sphere(center=ti.math.vec3(2, 0, 0), radius=1.0)
    >>> # Use sphere_intersections within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.prism.core.ray import NO_INTERSECTION, dot, normalize

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (non-negative float).
    """

    center: vec3
    radius: ti.f32


@ti.func
def sphere_intersections(ray_origin: vec3, ray_direction: vec3, sphere: Sphere):
    """Find all (up to 2) intersections of a ray with a sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction. Need not be normalized; t values
            are expressed in units of this vector's length.
        sphere: The sphere to test against.

    Returns:
        A tuple (count, t1, t2) where count is the number of hits in
        [0, 2], t1 is the nearest non-negative root (if count >= 1) and
        t2 the farther one (if count == 2). Unused slots hold
        NO_INTERSECTION.
    """
    a = dot(ray_direction, ray_direction)
    b = 2.0 * (dot(ray_origin, ray_direction) - dot(ray_direction, sphere.center))
    c = (
        dot(ray_origin, ray_origin)
        + dot(sphere.center, sphere.center)
        - 2.0 * dot(ray_origin, sphere.center)
        - sphere.radius * sphere.radius
    )

    disc = b * b - 4.0 * a * c

    count = 0
    t1 = NO_INTERSECTION
    t2 = NO_INTERSECTION

    if disc > 0.0:
        sqrt_disc = ti.sqrt(disc)
        near = (-b - sqrt_disc) / (2.0 * a)
        far = (-b + sqrt_disc) / (2.0 * a)

        if far >= 0.0:
            if near < 0.0:
                # Origin is inside the sphere; only the exit point is ahead
                count = 1
                t1 = far
            else:
                count = 2
                t1 = near
                t2 = far
    elif disc == 0.0:
        # Tangent ray. a > 0, so the root is non-negative iff b <= 0.
        if b <= 0.0:
            count = 1
            t1 = -b / (2.0 * a)

    return count, t1, t2


@ti.func
def intersect_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> ti.f32:
    """Return the nearest non-negative hit distance, or NO_INTERSECTION."""
    count, t1, t2 = sphere_intersections(ray_origin, ray_direction, sphere)
    return t1


@ti.func
def sphere_normal(sphere: Sphere, point: vec3) -> vec3:
    """Get the outward unit normal at a point on the sphere surface.

    Args:
        sphere: The sphere.
        point: A point assumed to lie on the sphere's surface.

    Returns:
        normalize(point - center).
    """
    return normalize(point - sphere.center)


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
