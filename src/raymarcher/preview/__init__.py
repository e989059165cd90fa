"""Preview module for output and visualization.

This module hands a finished ``Image`` to the outside world:

Components:
    export: PPM (plain-text P3) and PNG export
    display: Matplotlib preview and a Taichi GGUI window

Neither component feeds anything back into rendering; both only read the
image buffer.

Example:
    >>> from src.raymarcher.preview import RenderWindow, save_image
    >>> save_image(image, "image.ppm")
    >>> RenderWindow(image).run()
"""

from src.raymarcher.preview.display import (
    RenderWindow,
    is_display_available,
    show_preview,
    to_canvas_array,
)
from src.raymarcher.preview.export import (
    PPM_MAX_VALUE,
    format_ppm,
    save_image,
    save_png,
    save_ppm,
)

__all__ = [
    # Display
    "RenderWindow",
    "show_preview",
    "to_canvas_array",
    "is_display_available",
    # Export
    "format_ppm",
    "save_ppm",
    "save_png",
    "save_image",
    "PPM_MAX_VALUE",
]
