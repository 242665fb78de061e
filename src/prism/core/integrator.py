"""Whitted-style shading integrator and render target.

This module implements the per-ray shading model and the kernels that fill
the render target. A ray is traced through the scene; at the nearest hit
the surface is lit by every point light with a clamped Lambertian term,
and reflective surfaces blend that direct color with the color seen along
the mirrored ray:

    color = reflectivity * reflected + (1 - reflectivity) * direct

Reflection is followed for at most ``max_depth`` bounces. Rays that leave
the scene return the background color (black).

The recursion is evaluated as a loop carrying a running weight: each level
adds ``weight * (1 - reflectivity) * direct`` and multiplies the weight by
the reflectivity before following the mirrored ray. The last level (no
reflectivity or no remaining depth) adds ``weight * direct``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.prism.core.integrator import render_image, setup_render_target
    >>> from src.prism.scene.demo import create_demo_scene
    >>> from src.prism.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_demo_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(256)
    >>> render_image(max_depth=6)
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from src.prism.camera.pinhole import InvalidCameraError, get_ray_for_pixel, is_camera_ready
from src.prism.core.ray import clamp01, dot, normalize, normalize_vector, reflect
from src.prism.geometry.primitive import primitive_color, primitive_normal
from src.prism.scene.intersection import (
    find_closest_object,
    light_colors,
    light_positions,
    load_primitive,
    num_lights,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default number of reflection bounces
MAX_DEPTH = 6

# Reflected rays start this far along their direction to avoid self-hits
REFLECTION_EPSILON = 1e-4

# Color returned for rays that hit nothing
BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Default and maximum image edge length; images are square
DEFAULT_IMAGE_SIZE = 500
MAX_IMAGE_SIZE = 2048

# Active image size
_image_size = ti.field(dtype=ti.i32, shape=())

# Color buffer indexed [x, y] with y = 0 at the top (preallocated to max size)
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_SIZE, MAX_IMAGE_SIZE))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Scratch fields for single-ray queries from Python
_trace_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_trace_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_trace_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_render_target(size: int = DEFAULT_IMAGE_SIZE) -> None:
    """Initialize the render target for a size x size image.

    The buffer is preallocated to MAX_IMAGE_SIZE x MAX_IMAGE_SIZE to avoid
    Taichi kernel recompilation when the size changes.

    Args:
        size: Image width and height in pixels.

    Raises:
        ValueError: If size is smaller than 2 or exceeds MAX_IMAGE_SIZE.
    """
    if size < 2:
        raise ValueError(f"Image size must be at least 2, got {size}")
    if size > MAX_IMAGE_SIZE:
        raise ValueError(f"Image size ({size}) exceeds maximum supported ({MAX_IMAGE_SIZE})")

    _image_size[None] = size
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to black."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Mark the render target as not set up."""
    _render_target_initialized[None] = 0
    _image_size[None] = 0


def get_image_size() -> int:
    """Get the current render target edge length in pixels."""
    return int(_image_size[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def _check_depth(max_depth: int) -> None:
    if max_depth < 0:
        raise ValueError(f"Reflection depth must be non-negative, got {max_depth}")


# =============================================================================
# Shading
# =============================================================================


@ti.func
def shade_direct(point: vec3, normal: vec3, surface_color: vec3) -> vec3:
    """Sum the clamped Lambertian contribution of every point light.

    No shadow rays are cast, so lights reach every surface facing them.

    Args:
        point: The shaded surface point.
        normal: Unit surface normal at the point.
        surface_color: Albedo at the point.

    Returns:
        The direct color, clamped to [0, 1] per channel.
    """
    total = vec3(0.0, 0.0, 0.0)

    for i in range(num_lights[None]):
        to_light = normalize(light_positions[i] - point)
        cos_theta = tm.max(0.0, dot(normal, to_light))
        total += light_colors[i] * surface_color * cos_theta

    return clamp01(total)


@ti.func
def trace_ray(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Compute the color seen along a ray.

    Args:
        origin: The starting point of the ray.
        direction: Unit ray direction.
        max_depth: Number of reflection bounces still allowed.

    Returns:
        The shaded color. Each channel stays in [0, 1] since it is a convex
        blend of clamped direct terms and black.
    """
    color = vec3(0.0, 0.0, 0.0)
    weight = 1.0
    ray_origin = origin
    ray_direction = direction

    # Taichi has no early return from a loop; track liveness instead
    active = 1

    for level in range(max_depth + 1):
        if active == 1:
            hit = find_closest_object(ray_origin, ray_direction)

            if hit.index == -1:
                color += weight * BACKGROUND_COLOR
                active = 0
            else:
                prim = load_primitive(hit.index)
                point = ray_origin + hit.t * ray_direction
                normal = primitive_normal(prim, point)
                direct = shade_direct(point, normal, primitive_color(prim, point))
                reflectivity = prim.reflectivity

                if reflectivity == 0.0 or level == max_depth:
                    color += weight * direct
                    active = 0
                else:
                    color += weight * (1.0 - reflectivity) * direct
                    weight *= reflectivity

                    ray_direction = normalize(reflect(ray_direction, normal))
                    ray_origin = point + REFLECTION_EPSILON * ray_direction

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(size: ti.i32, max_depth: ti.i32, row_start: ti.i32, row_end: ti.i32):
    """Trace one primary ray for every pixel in rows [row_start, row_end)."""
    for x, y in ti.ndrange(size, (row_start, row_end)):
        ray = get_ray_for_pixel(x, y, size)
        _color_buffer[x, y] = trace_ray(ray.origin, ray.direction, max_depth)


@ti.kernel
def _render_single_pixel(x: ti.i32, y: ti.i32, size: ti.i32, max_depth: ti.i32):
    """Trace the primary ray of a single pixel. Used for testing."""
    # Single-iteration outer loop keeps the tracer's inner loops serial
    for _ in range(1):
        ray = get_ray_for_pixel(x, y, size)
        _trace_color[None] = trace_ray(ray.origin, ray.direction, max_depth)


@ti.kernel
def _trace_kernel(max_depth: ti.i32):
    for _ in range(1):
        _trace_color[None] = trace_ray(_trace_origin[None], _trace_direction[None], max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_camera_ready() -> None:
    if not is_camera_ready():
        raise InvalidCameraError("No valid camera set up. Call setup_camera() first.")


def _read_trace_color() -> tuple[float, float, float]:
    color = _trace_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def trace(
    origin: Sequence[float],
    direction: Sequence[float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Trace a single ray through the current scene (Python-callable).

    Args:
        origin: Ray origin.
        direction: Ray direction; normalized here.
        max_depth: Reflection bounce budget.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        GeometryError: If the direction is zero-length.
        ValueError: If max_depth is negative.
    """
    _check_depth(max_depth)
    d = normalize_vector(direction, "direction")
    _trace_origin[None] = [origin[0], origin[1], origin[2]]
    _trace_direction[None] = list(d)
    _trace_kernel(max_depth)
    return _read_trace_color()


def render_pixel(x: int, y: int, max_depth: int = MAX_DEPTH) -> tuple[float, float, float]:
    """Render a single pixel of the current render target.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Raises:
        RuntimeError: If render target has not been set up.
        InvalidCameraError: If no valid camera has been set up.
        ValueError: If max_depth is negative.
    """
    _check_render_target_initialized()
    _check_camera_ready()
    _check_depth(max_depth)

    _render_single_pixel(x, y, get_image_size(), max_depth)
    return _read_trace_color()


def render_rows(row_start: int, row_end: int, max_depth: int = MAX_DEPTH) -> None:
    """Render the scanlines [row_start, row_end) into the color buffer.

    Raises:
        RuntimeError: If render target has not been set up.
        InvalidCameraError: If no valid camera has been set up.
        ValueError: If max_depth is negative or the row range is invalid.
    """
    _check_render_target_initialized()
    _check_camera_ready()
    _check_depth(max_depth)

    size = get_image_size()
    if not 0 <= row_start <= row_end <= size:
        raise ValueError(f"Row range [{row_start}, {row_end}) outside image of size {size}")
    if row_start == row_end:
        return

    _render_rows(size, max_depth, row_start, row_end)


def render_image(max_depth: int = MAX_DEPTH) -> None:
    """Render every pixel of the render target.

    Raises:
        RuntimeError: If render target has not been set up.
        InvalidCameraError: If no valid camera has been set up.
        ValueError: If max_depth is negative.
    """
    _check_render_target_initialized()
    render_rows(0, get_image_size(), max_depth)


def get_normalized_image_numpy():
    """Get the rendered image as a NumPy array.

    Returns the color buffer with values in [0, 1] range (clamped).
    The array shape is (size, size, 3) with dtype float32, row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    import numpy as np

    _check_render_target_initialized()

    size = get_image_size()

    # Extract active region and transpose from [x, y] to [row, column]
    image = _color_buffer.to_numpy()[:size, :size, :]
    image = np.transpose(image, (1, 0, 2))

    image = np.clip(image, 0.0, 1.0)

    return image.astype(np.float32)
