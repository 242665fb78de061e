"""Image export utilities for rendered images.

This module serializes rendered images, given as float arrays of shape
(H, W, 3) with row 0 at the top.

Supported formats:
    - PPM (plain-text ``P3``, 8 bits per channel)
    - PNG (8-bit via Pillow)

Every format quantizes channels the same way:
``floor(clamp(c, 0, 1) * 255 + 0.5)``.

Example:
    >>> from src.prism.preview.export import save_ppm
    >>> from src.prism.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(256)
    >>> renderer.render()
    >>> save_ppm(renderer.get_image_numpy(), "output.ppm")
"""

from __future__ import annotations

import os
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Largest channel value written to PPM files
PPM_MAX_VALUE = 255


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize a float image in [0, 1] to 8 bits, rounding half up.

    Values outside [0, 1] are clamped first.

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    clamped = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)
    return np.floor(clamped * PPM_MAX_VALUE + 0.5).astype(np.uint8)


def _check_image_shape(image: npt.NDArray) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def write_ppm(image: npt.NDArray[np.floating], stream: TextIO) -> None:
    """Write an image to a text stream as a plain PPM (P3).

    The output is the header ``P3``, ``width height`` and ``255`` on
    separate lines, then one ``r g b`` triplet per line in row-major order
    starting with the top row.

    Args:
        image: Float image of shape (H, W, 3) in [0, 1].
        stream: Writable text stream.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    image = np.asarray(image)
    _check_image_shape(image)
    height, width, _ = image.shape

    pixels = image_to_uint8(image).reshape(-1, 3)

    stream.write(f"P3\n{width} {height}\n{PPM_MAX_VALUE}\n")
    stream.writelines(f"{r} {g} {b}\n" for r, g, b in pixels.tolist())


def save_ppm(image: npt.NDArray[np.floating], filepath: str | os.PathLike) -> None:
    """Save an image as a plain PPM (P3) file.

    Args:
        image: Float image of shape (H, W, 3) in [0, 1].
        filepath: Output file path (should end in .ppm).
    """
    with open(filepath, "w", encoding="ascii", newline="\n") as f:
        write_ppm(image, f)


def save_png(image: npt.NDArray[np.floating], filepath: str | os.PathLike) -> None:
    """Save an image as an 8-bit PNG file.

    Args:
        image: Float image of shape (H, W, 3) in [0, 1].
        filepath: Output file path (should end in .png).
    """
    image = np.asarray(image)
    _check_image_shape(image)

    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath)


def save_image(image: npt.NDArray[np.floating], filepath: str | os.PathLike) -> None:
    """Save an image, picking the format from the file extension.

    ``.png`` files are written through Pillow; every other extension is
    written as plain PPM.
    """
    if os.fspath(filepath).lower().endswith(".png"):
        save_png(image, filepath)
    else:
        save_ppm(image, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
