"""Scene-level primitive storage and closest-hit search.

Primitives of every kind live in one insertion-ordered set of Taichi
fields (Structure of Arrays), so the closest-hit scan visits them in the
order they were added and resolves equal distances in favour of the
earlier primitive. Point lights are stored the same way.

Python-side helpers (add_*, clear_scene, closest_hit, ...) write and query
the fields; find_closest_object() is the Taichi function used by the
tracer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.prism.scene.intersection import (
    ...     add_sphere, add_plane, add_light, closest_hit, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere((0, 0, -3), 1.0)
    >>> add_plane(1.0, (0, 1, 0))
    >>> index, t = closest_hit((0, 0, 0), (0, 0, -1))
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from src.prism.core.ray import NO_INTERSECTION, check_direction
from src.prism.geometry.primitive import (
    Primitive,
    PrimitiveKind,
    intersect_primitive,
    primitive_intersections,
    primitive_normal,
)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Default albedo for primitives created without an explicit color
DEFAULT_SURFACE_COLOR = (0.5, 0.5, 0.5)


@ti.dataclass
class ClosestHit:
    """Result of a closest-hit query.

    Attributes:
        index: Index of the nearest primitive, or -1 on a miss.
        t: Distance along the ray to the hit, or NO_INTERSECTION on a miss.
    """

    index: ti.i32
    t: ti.f32


# Maximum number of primitives and lights supported in the scene
MAX_PRIMITIVES = 1024
MAX_LIGHTS = 64

# Primitive storage: Structure of Arrays layout, one slot per primitive
prim_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
prim_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
prim_axes = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
prim_radii = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
prim_heights = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
prim_dists = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
prim_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
prim_reflectivity = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())

# Point light storage
light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

# Scratch fields for Python-side queries
_query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_index = ti.field(dtype=ti.i32, shape=())
_query_count = ti.field(dtype=ti.i32, shape=())
_query_t1 = ti.field(dtype=ti.f32, shape=())
_query_t2 = ti.field(dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())


def clear_scene() -> None:
    """Remove all primitives and lights from the scene.

    Resets the counts to zero. The field data is overwritten when new
    primitives are added.
    """
    num_primitives[None] = 0
    num_lights[None] = 0


def _next_primitive_slot() -> int:
    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")
    return idx


def _store_primitive(
    idx: int,
    kind: PrimitiveKind,
    *,
    center: Sequence[float] = (0.0, 0.0, 0.0),
    axis: Sequence[float] = (0.0, 0.0, 0.0),
    radius: float = 0.0,
    height: float = 0.0,
    dist: float = 0.0,
    color: Sequence[float] = DEFAULT_SURFACE_COLOR,
    reflectivity: float = 0.0,
) -> int:
    prim_kinds[idx] = int(kind)
    prim_centers[idx] = [center[0], center[1], center[2]]
    prim_axes[idx] = [axis[0], axis[1], axis[2]]
    prim_radii[idx] = radius
    prim_heights[idx] = height
    prim_dists[idx] = dist
    prim_colors[idx] = [color[0], color[1], color[2]]
    prim_reflectivity[idx] = reflectivity
    num_primitives[None] = idx + 1
    return idx


def add_sphere(
    center: Sequence[float],
    radius: float,
    color: Sequence[float] = DEFAULT_SURFACE_COLOR,
    reflectivity: float = 0.0,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        color: Surface albedo (R, G, B).
        reflectivity: Mirror reflectivity in [0, 1].

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    idx = _next_primitive_slot()
    return _store_primitive(
        idx,
        PrimitiveKind.SPHERE,
        center=center,
        radius=radius,
        color=color,
        reflectivity=reflectivity,
    )


def add_plane(
    dist: float,
    normal: Sequence[float],
    color: Sequence[float] = DEFAULT_SURFACE_COLOR,
    reflectivity: float = 0.0,
) -> int:
    """Add an infinite plane N.X + dist = 0 to the scene.

    The normal is stored as given; callers pass a unit vector (the
    SceneManager normalizes and validates it).

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    idx = _next_primitive_slot()
    return _store_primitive(
        idx,
        PrimitiveKind.PLANE,
        axis=normal,
        dist=dist,
        color=color,
        reflectivity=reflectivity,
    )


def add_cylinder(
    center: Sequence[float],
    axis: Sequence[float],
    radius: float,
    height: float,
    color: Sequence[float] = DEFAULT_SURFACE_COLOR,
    reflectivity: float = 0.0,
) -> int:
    """Add a finite cylinder to the scene.

    The axis is stored as given; callers pass a unit vector (the
    SceneManager normalizes and validates it).

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    idx = _next_primitive_slot()
    return _store_primitive(
        idx,
        PrimitiveKind.CYLINDER,
        center=center,
        axis=axis,
        radius=radius,
        height=height,
        color=color,
        reflectivity=reflectivity,
    )


def add_light(position: Sequence[float], color: Sequence[float] = (1.0, 1.0, 1.0)) -> int:
    """Add a point light to the scene.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = [position[0], position[1], position[2]]
    light_colors[idx] = [color[0], color[1], color[2]]
    num_lights[None] = idx + 1
    return idx


def get_primitive_count() -> int:
    """Get the number of primitives in the scene."""
    return int(num_primitives[None])


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


# =============================================================================
# Taichi-scope Access
# =============================================================================


@ti.func
def load_primitive(i: ti.i32) -> Primitive:
    """Assemble the Primitive stored at index i."""
    return Primitive(
        kind=prim_kinds[i],
        center=prim_centers[i],
        axis=prim_axes[i],
        radius=prim_radii[i],
        height=prim_heights[i],
        dist=prim_dists[i],
        color=prim_colors[i],
        reflectivity=prim_reflectivity[i],
    )


@ti.func
def find_closest_object(ray_origin: vec3, ray_direction: vec3) -> ClosestHit:
    """Find the nearest primitive hit by a ray.

    Scans every primitive in insertion order and keeps the smallest
    non-negative distance. Comparison is strict, so among primitives hit
    at exactly the same distance the first one added wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        A ClosestHit with the primitive index and distance, or index -1
        and t = NO_INTERSECTION if nothing was hit.
    """
    closest_index = -1
    closest_t = NO_INTERSECTION

    for i in range(num_primitives[None]):
        t = intersect_primitive(ray_origin, ray_direction, load_primitive(i))
        if t >= 0.0:
            if closest_index == -1 or t < closest_t:
                closest_index = i
                closest_t = t

    return ClosestHit(index=closest_index, t=closest_t)


# =============================================================================
# Python-side Queries
# =============================================================================


@ti.kernel
def _closest_hit_kernel():
    # Single-iteration outer loop keeps the primitive scan serial
    for _ in range(1):
        hit = find_closest_object(_query_origin[None], _query_direction[None])
        _query_index[None] = hit.index
        _query_t1[None] = hit.t


@ti.kernel
def _intersections_kernel(i: ti.i32):
    count, t1, t2 = primitive_intersections(
        _query_origin[None], _query_direction[None], load_primitive(i)
    )
    _query_count[None] = count
    _query_t1[None] = t1
    _query_t2[None] = t2


@ti.kernel
def _normal_kernel(i: ti.i32):
    _query_normal[None] = primitive_normal(load_primitive(i), _query_point[None])


def _set_query_ray(origin: Sequence[float], direction: Sequence[float], normalize: bool) -> None:
    d = check_direction(direction)
    if normalize:
        norm = (d[0] * d[0] + d[1] * d[1] + d[2] * d[2]) ** 0.5
        d = (d[0] / norm, d[1] / norm, d[2] / norm)
    _query_origin[None] = [origin[0], origin[1], origin[2]]
    _query_direction[None] = [d[0], d[1], d[2]]


def _check_index(index: int) -> None:
    if not 0 <= index < num_primitives[None]:
        raise IndexError(f"Primitive index {index} out of range")


def closest_hit(
    origin: Sequence[float],
    direction: Sequence[float],
    normalize: bool = True,
) -> tuple[int, float]:
    """Find the closest primitive along a ray (Python-callable).

    Args:
        origin: Ray origin.
        direction: Ray direction (must be nonzero).
        normalize: Normalize the direction first (default True), so the
            returned t is a Euclidean distance.

    Returns:
        Tuple (index, t); (-1, NO_INTERSECTION) on a miss.

    Raises:
        GeometryError: If the direction is zero-length.
    """
    _set_query_ray(origin, direction, normalize)
    _closest_hit_kernel()
    return int(_query_index[None]), float(_query_t1[None])


def get_intersections(
    index: int,
    origin: Sequence[float],
    direction: Sequence[float],
    normalize: bool = True,
) -> tuple[int, float, float]:
    """Intersect a ray with a single stored primitive (Python-callable).

    Returns:
        Tuple (count, t1, t2) as produced by primitive_intersections().

    Raises:
        GeometryError: If the direction is zero-length.
        IndexError: If the index does not name a stored primitive.
    """
    _check_index(index)
    _set_query_ray(origin, direction, normalize)
    _intersections_kernel(index)
    return int(_query_count[None]), float(_query_t1[None]), float(_query_t2[None])


def get_normal(index: int, point: Sequence[float]) -> tuple[float, float, float]:
    """Surface normal of a stored primitive at a point (Python-callable)."""
    _check_index(index)
    _query_point[None] = [point[0], point[1], point[2]]
    _normal_kernel(index)
    n = _query_normal[None]
    return (float(n[0]), float(n[1]), float(n[2]))
