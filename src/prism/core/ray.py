"""Ray data structure and vector utilities for ray tracing.

This module provides the fundamental Ray dataclass, the "no intersection"
sentinel shared by every primitive, and the vector helpers used by the
intersection and shading code. Taichi-scope helpers are ``@ti.func`` and
are meant to be called from within kernels; ``check_direction`` and
``normalize_vector`` are Python-side and guard the entry points where
rays and axes enter the renderer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import math
from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Returned by every intersection routine when the ray misses. Valid
# distances are always >= 0, so a ray starting on a surface (t == 0)
# is never confused with a miss.
NO_INTERSECTION = -1.0


class GeometryError(ValueError):
    """Raised when geometric input violates a precondition.

    Zero-length ray directions and zero-length plane normals or cylinder
    axes cannot be normalized and indicate malformed input upstream.
    """


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Primary and
            reflected rays are unit length; the projected ray used by the
            cylinder test is deliberately left unnormalized so its
            parametric t values match the original ray.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Valid hits are always >= 0.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray with a normalized direction.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector (must be nonzero).

    Returns:
        A new Ray instance with unit direction.
    """
    return Ray(origin=origin, direction=normalize(direction))


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the length (magnitude) of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Used wherever only a zero test or a comparison is needed, as it avoids
    the square root.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def project(v: vec3, axis: vec3) -> vec3:
    """Project a vector onto a unit axis.

    Returns the component of v parallel to the axis, (v . axis) axis. The
    axis must already be normalized.

    Args:
        v: The vector to project.
        axis: Unit-length axis direction.

    Returns:
        The axial component of v.
    """
    return dot(v, axis) * axis


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident direction about a surface normal.

    Computes D + 2 project(-D, n). The result has the same length as the
    incident vector; the normal must be unit length.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        The reflected direction vector.
    """
    return incident + 2.0 * project(-incident, normal)


@ti.func
def clamp01(c: vec3) -> vec3:
    """Clamp every channel of a color to [0, 1]."""
    return tm.clamp(c, 0.0, 1.0)


# =============================================================================
# Python-side Validation
# =============================================================================


def check_direction(direction: Sequence[float], name: str = "direction") -> tuple[float, float, float]:
    """Validate that a direction vector is nonzero and finite.

    Args:
        direction: The (x, y, z) components.
        name: Name used in the error message.

    Returns:
        The direction as a tuple of floats.

    Raises:
        GeometryError: If the vector has zero (or non-finite) length.
    """
    if len(direction) != 3:
        raise GeometryError(f"{name} must have 3 components, got {len(direction)}")
    x, y, z = (float(direction[0]), float(direction[1]), float(direction[2]))
    norm = math.sqrt(x * x + y * y + z * z)
    if norm == 0.0 or not math.isfinite(norm):
        raise GeometryError(f"{name} must be a nonzero vector, got ({x}, {y}, {z})")
    return (x, y, z)


def normalize_vector(v: Sequence[float], name: str = "vector") -> tuple[float, float, float]:
    """Normalize a Python-side vector, rejecting zero-length input.

    Args:
        v: The (x, y, z) components.
        name: Name used in the error message.

    Returns:
        The unit-length vector as a tuple of floats.

    Raises:
        GeometryError: If the vector has zero length.
    """
    x, y, z = check_direction(v, name)
    norm = math.sqrt(x * x + y * y + z * z)
    return (x / norm, y / norm, z / norm)
