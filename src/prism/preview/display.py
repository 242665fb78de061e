"""Matplotlib-based preview display for rendered images.

Example:
    >>> from src.prism.preview.display import show_preview
    >>> from src.prism.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(256)
    >>> renderer.render()
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.prism.core.renderer import Renderer

ImageSource = Union["Renderer", npt.NDArray[np.floating]]


def _as_display_image(source: ImageSource) -> npt.NDArray[np.float32]:
    """Fetch a clamped (H, W, 3) float image from a renderer or an array."""
    if hasattr(source, "get_image_numpy"):
        image = source.get_image_numpy()
    else:
        image = np.asarray(source)
    return np.clip(image, 0.0, 1.0).astype(np.float32)


def show_preview(
    source: ImageSource,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display a render as a Matplotlib figure.

    Args:
        source: A Renderer or an image array of shape (H, W, 3).
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = _as_display_image(source)

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        height, width = display_image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
