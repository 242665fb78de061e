"""Core rendering module.

Components:
    ray: Ray data structure, vector utilities and direction checks
    integrator: Whitted-style shading and the render target
    renderer: Scanline-batched rendering with progress reporting

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    NO_INTERSECTION,
    GeometryError,
    Ray,
    check_direction,
    clamp01,
    dot,
    length,
    length_squared,
    make_ray,
    normalize,
    normalize_vector,
    project,
    ray_at,
    reflect,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.prism.core.integrator or src.prism.core.renderer when needed.

__all__ = [
    "NO_INTERSECTION",
    "GeometryError",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "project",
    "reflect",
    "clamp01",
    "check_direction",
    "normalize_vector",
]
