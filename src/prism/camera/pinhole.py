"""Pinhole camera model for primary ray generation.

This module implements a look-at pinhole camera for square images. The
camera is described by a position, a target point it looks at, an
approximate up vector and a field of view in degrees. From these it
derives an orthonormal frame:

- direction: unit vector from the position toward the target
- right: direction x up, normalized
- up: right x direction, normalized (the corrected up vector)

The image plane sits at ``distance = 0.5 / tan(fov / 2)`` in front of the
camera and spans one unit in each direction, so pixel (x, y) of a
size x size image maps to

    distance * direction + (0.5 - y / (size - 1)) * up + (x / (size - 1) - 0.5) * right

Pixel (0, 0) is the top-left corner of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.prism.camera.pinhole import PinholeCamera, setup_camera, get_ray_for_pixel
    >>>
    >>> camera = PinholeCamera(
    ...     position=(0.0, 1.0, 5.0),
    ...     target=(0.0, 1.0, 0.0),
    ...     up=(0.0, 1.0, 0.0),
    ...     fov=60.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray_for_pixel(0, 0, 500)  # Ray through the top-left pixel
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from src.prism.core.ray import Ray, make_ray

# Default field of view in degrees
DEFAULT_FOV = 60.0


class InvalidCameraError(ValueError):
    """Raised when a camera cannot produce a usable view."""


# =============================================================================
# Camera Data Structures
# =============================================================================


def _unit_or_zero(v: np.ndarray) -> np.ndarray:
    """Normalize v, or return the zero vector if v has no usable length."""
    norm = float(np.linalg.norm(v))
    if norm == 0.0 or not math.isfinite(norm):
        return np.zeros(3, dtype=np.float64)
    return v / norm


@dataclass(frozen=True)
class CameraBasis:
    """The derived camera frame.

    Attributes:
        position: Camera position in world space.
        direction: Unit view direction.
        right: Unit right vector in the image plane.
        up: Corrected unit up vector in the image plane.
        distance: Distance from the position to the image plane.
        fov: Field of view in degrees the basis was built from.
    """

    position: tuple[float, float, float]
    direction: tuple[float, float, float]
    right: tuple[float, float, float]
    up: tuple[float, float, float]
    distance: float
    fov: float

    @property
    def valid(self) -> bool:
        """True when the frame is non-degenerate and the view distance usable."""
        up_length = math.sqrt(sum(c * c for c in self.up))
        return (
            up_length > 0.0
            and 0.0 < self.fov < 360.0
            and math.isfinite(self.distance)
            and self.distance != 0.0
        )

    def ray_for_pixel(
        self, x: float, y: float, size: int
    ) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Compute the primary ray through pixel (x, y) of a size x size image.

        Returns:
            Tuple (origin, direction) with a unit direction.

        Raises:
            InvalidCameraError: If the basis is not valid.
            ValueError: If size is smaller than 2.
        """
        if not self.valid:
            raise InvalidCameraError("Camera basis is degenerate")
        if size < 2:
            raise ValueError(f"Image size must be at least 2, got {size}")

        span = float(size - 1)
        d = (
            self.distance * np.asarray(self.direction)
            + (0.5 - y / span) * np.asarray(self.up)
            + (x / span - 0.5) * np.asarray(self.right)
        )
        d = d / np.linalg.norm(d)
        return self.position, (float(d[0]), float(d[1]), float(d[2]))


@dataclass
class PinholeCamera:
    """Configuration for a look-at pinhole camera.

    Attributes:
        position: Camera position in world space (x, y, z).
        target: Point the camera looks at (x, y, z).
        up: Approximate up direction; corrected to be orthogonal to the
            view direction.
        fov: Field of view in degrees, in (0, 360).
    """

    position: tuple[float, float, float]
    target: tuple[float, float, float]
    up: tuple[float, float, float]
    fov: float = DEFAULT_FOV

    def basis(self) -> CameraBasis:
        """Derive the camera frame. Degenerate input yields an invalid basis."""
        position = np.array(self.position, dtype=np.float64)
        target = np.array(self.target, dtype=np.float64)
        up = np.array(self.up, dtype=np.float64)

        direction = _unit_or_zero(target - position)
        right = _unit_or_zero(np.cross(direction, up))
        true_up = _unit_or_zero(np.cross(right, direction))

        distance = math.nan
        if math.isfinite(self.fov):
            half_angle_tan = math.tan(math.radians(self.fov) / 2.0)
            distance = 0.5 / half_angle_tan if half_angle_tan != 0.0 else math.inf

        return CameraBasis(
            position=tuple(float(c) for c in position),
            direction=tuple(float(c) for c in direction),
            right=tuple(float(c) for c in right),
            up=tuple(float(c) for c in true_up),
            distance=float(distance),
            fov=float(self.fov),
        )

    @property
    def valid(self) -> bool:
        """True if the camera can produce a view."""
        return self.basis().valid

    def ray_for_pixel(self, x: float, y: float, size: int):
        """Compute the primary ray through pixel (x, y). See CameraBasis.ray_for_pixel."""
        return self.basis().ray_for_pixel(x, y, size)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_distance = ti.field(dtype=ti.f32, shape=())

# Set to 1 once a valid camera has been written to the fields above
_camera_ready = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> CameraBasis:
    """Initialize camera state from configuration.

    Computes the camera frame and stores it in Taichi fields for use by
    the render kernels. Must be called before rendering.

    Args:
        camera: Camera configuration.

    Returns:
        The computed CameraBasis.

    Raises:
        InvalidCameraError: If the camera is degenerate (position equal to
            target, up parallel to the view direction) or the field of view
            is outside (0, 360).
    """
    basis = camera.basis()
    if not basis.valid:
        _camera_ready[None] = 0
        raise InvalidCameraError(
            f"Invalid camera: position={camera.position}, target={camera.target}, "
            f"up={camera.up}, fov={camera.fov}"
        )

    _camera_position[None] = list(basis.position)
    _camera_direction[None] = list(basis.direction)
    _camera_right[None] = list(basis.right)
    _camera_up[None] = list(basis.up)
    _camera_distance[None] = basis.distance
    _camera_ready[None] = 1
    return basis


def clear_camera() -> None:
    """Forget the current camera; rendering requires a new setup_camera()."""
    _camera_ready[None] = 0


def is_camera_ready() -> bool:
    """Check whether a valid camera has been set up."""
    return bool(_camera_ready[None])


# =============================================================================
# Ray Generation (Taichi-scope)
# =============================================================================


@ti.func
def get_ray_for_pixel(x: ti.i32, y: ti.i32, size: ti.i32) -> Ray:
    """Generate the primary ray through pixel (x, y).

    Args:
        x: Column, 0 is the left edge.
        y: Row, 0 is the top edge.
        size: Image width and height in pixels (at least 2).

    Returns:
        A Ray from the camera position with a unit direction.
    """
    span = ti.cast(size - 1, ti.f32)
    u = ti.cast(x, ti.f32) / span - 0.5
    v = 0.5 - ti.cast(y, ti.f32) / span

    direction = (
        _camera_distance[None] * _camera_direction[None]
        + v * _camera_up[None]
        + u * _camera_right[None]
    )
    return make_ray(_camera_position[None], direction)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, object]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with position, direction, right, up, distance and ready.
    """

    def as_tuple(field) -> tuple[float, float, float]:
        v = field[None]
        return (float(v[0]), float(v[1]), float(v[2]))

    return {
        "position": as_tuple(_camera_position),
        "direction": as_tuple(_camera_direction),
        "right": as_tuple(_camera_right),
        "up": as_tuple(_camera_up),
        "distance": float(_camera_distance[None]),
        "ready": is_camera_ready(),
    }
