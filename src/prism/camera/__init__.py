"""Camera module for view and primary ray generation.

Components:
    pinhole: Look-at pinhole camera for square images

Pixel coordinates are integer (x, y) with (0, 0) at the top-left corner;
the camera maps them onto a unit image plane in front of the eye.
"""

from .pinhole import (
    DEFAULT_FOV,
    CameraBasis,
    InvalidCameraError,
    PinholeCamera,
    clear_camera,
    get_camera_info,
    get_ray_for_pixel,
    is_camera_ready,
    setup_camera,
)

__all__ = [
    "DEFAULT_FOV",
    "CameraBasis",
    "InvalidCameraError",
    "PinholeCamera",
    "setup_camera",
    "clear_camera",
    "is_camera_ready",
    "get_ray_for_pixel",
    "get_camera_info",
]
