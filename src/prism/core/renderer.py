"""Scanline renderer driving the integrator.

This module provides a convenient wrapper around the core integrator that supports:
- Rendering in batches of scanlines
- Progress callbacks and a generator form for UI updates
- Image retrieval as float or 8-bit NumPy arrays
- Saving to PPM or PNG

The Renderer class owns the render target size and delegates the actual
work to the global integrator buffers (which are Taichi fields).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.prism.core.renderer import Renderer
    >>> from src.prism.scene.demo import create_demo_scene
    >>> from src.prism.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_demo_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(500)
    >>> renderer.render(max_depth=6)
    >>> renderer.save_image("output.ppm")
"""

import logging
import os
import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from src.prism.core.integrator import (
    DEFAULT_IMAGE_SIZE,
    MAX_DEPTH,
    clear_render_target,
    get_normalized_image_numpy,
    render_rows,
    setup_render_target,
)
from src.prism.preview.export import image_to_uint8, save_image

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# Default number of scanlines rendered per kernel launch
DEFAULT_ROWS_PER_BATCH = 32


class Renderer:
    """A renderer for square images that works in batches of scanlines.

    Attributes:
        size: Image width and height in pixels.
        rows_rendered: Number of scanlines completed in the current render.
    """

    def __init__(self, size: int = DEFAULT_IMAGE_SIZE) -> None:
        """Initialize the renderer.

        Args:
            size: Image width and height in pixels (2 to MAX_IMAGE_SIZE).

        Raises:
            ValueError: If size is out of range.
        """
        setup_render_target(size)
        self._size = size
        self._rows_rendered = 0

    @property
    def size(self) -> int:
        """Get the image edge length."""
        return self._size

    @property
    def rows_rendered(self) -> int:
        """Get the number of scanlines completed in the current render."""
        return self._rows_rendered

    def reset(self) -> None:
        """Clear the image to black without changing its size."""
        clear_render_target()
        self._rows_rendered = 0

    def resize(self, size: int) -> None:
        """Resize the render target and clear it.

        Raises:
            ValueError: If size is out of range.
        """
        setup_render_target(size)
        self._size = size
        self._rows_rendered = 0

    def render_progressive(
        self,
        max_depth: int = MAX_DEPTH,
        rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image, yielding progress after each batch of scanlines.

        Args:
            max_depth: Reflection bounce budget.
            rows_per_batch: Number of scanlines rendered before each yield.

        Yields:
            Tuple of (rows_done, total_rows).

        Raises:
            InvalidCameraError: If no valid camera has been set up.
            ValueError: If max_depth is negative or rows_per_batch < 1.

        Example:
            >>> for done, total in renderer.render_progressive(rows_per_batch=50):
            ...     print(f"Progress: {done}/{total} rows")
        """
        if rows_per_batch < 1:
            raise ValueError(f"rows_per_batch must be at least 1, got {rows_per_batch}")

        logger.info("Rendering %dx%d image, depth %d", self._size, self._size, max_depth)
        start = time.perf_counter()

        self._rows_rendered = 0
        while self._rows_rendered < self._size:
            row_end = min(self._rows_rendered + rows_per_batch, self._size)
            render_rows(self._rows_rendered, row_end, max_depth)
            self._rows_rendered = row_end
            yield (self._rows_rendered, self._size)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)

    def render(
        self,
        max_depth: int = MAX_DEPTH,
        rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the whole image with an optional progress callback.

        Args:
            max_depth: Reflection bounce budget.
            rows_per_batch: Number of scanlines rendered before each callback.
            callback: Optional callback called after each batch with
                (rows_done, total_rows).

        Raises:
            InvalidCameraError: If no valid camera has been set up.
            ValueError: If max_depth is negative or rows_per_batch < 1.
        """
        for done, total in self.render_progressive(max_depth, rows_per_batch):
            if callback is not None:
                callback(done, total)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the rendered image as a float array of shape (size, size, 3) in [0, 1]."""
        return get_normalized_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image quantized to 8 bits per channel."""
        return image_to_uint8(self.get_image_numpy())

    def save_image(self, filepath: str | os.PathLike) -> None:
        """Save the rendered image; ``.png`` goes through Pillow, anything else is PPM."""
        save_image(self.get_image_numpy(), filepath)
        logger.info("Saved image to %s", filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return f"Renderer(size={self._size}, rows_rendered={self._rows_rendered})"
