"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: PPM and PNG image export

Example:
    >>> from src.prism.preview import show_preview, save_ppm
    >>> from src.prism.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(256)
    >>> renderer.render()
    >>> save_ppm(renderer.get_image_numpy(), "output.ppm")
    >>> show_preview(renderer)
"""

from src.prism.preview.display import show_preview
from src.prism.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_image,
    save_png,
    save_ppm,
    write_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    # Export functions
    "write_ppm",
    "save_ppm",
    "save_png",
    "save_image",
    "image_to_uint8",
    "compute_rmse",
]
