"""Display utilities for rendered images.

Two ways to look at a render:

- ``show_preview``: a static Matplotlib figure.
- ``RenderWindow``: a Taichi GGUI window that stays open until the user
  presses Escape or closes it.

Taichi canvases index pixels as (x, y) with the origin at the bottom-left,
while ``Image`` stores rows top to bottom, so images are flipped and
transposed before upload (see ``to_canvas_array``).

Example:
    >>> from src.raymarcher.preview.display import RenderWindow
    >>> window = RenderWindow(image, title="Render")
    >>> window.run()  # Blocks until Escape
"""

from __future__ import annotations

import os

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.raymarcher.core.image import Image


def to_canvas_array(image: Image) -> npt.NDArray[np.float32]:
    """Convert an image to Taichi canvas layout.

    Args:
        image: The image to convert.

    Returns:
        Float32 array of shape (width, height, 3) in [0, 1], with index
        [x, 0] on the bottom row.
    """
    return np.ascontiguousarray(np.transpose(np.flipud(image.to_float()), (1, 0, 2)))


def show_preview(
    image: Image,
    *,
    title: str = "Render",
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display an image as a Matplotlib figure.

    Args:
        image: The image to display.
        title: Figure title.
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image.pixels)
    ax.axis("off")
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def is_display_available() -> bool:
    """Check if a display is available for GUI windows.

    Returns:
        True if a display is available, False for headless environments.
    """
    display = os.environ.get("DISPLAY")
    wayland = os.environ.get("WAYLAND_DISPLAY")

    # On macOS, display is always available if not in SSH
    if os.uname().sysname == "Darwin":
        ssh_connection = os.environ.get("SSH_CONNECTION")
        if ssh_connection and not display:
            return False
        return True

    return bool(display or wayland)


class RenderWindow:
    """Taichi GGUI window showing a single rendered image.

    The window is created lazily on ``run()`` so the object can be built in
    headless environments.

    Attributes:
        width: Window width in pixels (image width).
        height: Window height in pixels (image height).
        display_image: Taichi field holding the image in canvas layout.
    """

    def __init__(self, image: Image, *, title: str = "Render") -> None:
        self.width = image.width
        self.height = image.height
        self._title = title
        self._window: ti.ui.Window | None = None

        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(image.width, image.height)
        )
        self.display_image.from_numpy(to_canvas_array(image))

    def _initialize_window(self) -> ti.ui.Window:
        if self._window is None:
            try:
                self._window = ti.ui.Window(
                    name=self._title,
                    res=(self.width, self.height),
                    vsync=True,
                )
            except Exception as e:
                raise RuntimeError(f"Could not open window: {e}") from e
        return self._window

    def run(self) -> None:
        """Show the image until Escape is pressed or the window is closed.

        Raises:
            RuntimeError: If the window cannot be opened.
        """
        window = self._initialize_window()
        canvas = window.get_canvas()

        while window.running:
            if window.get_event(ti.ui.PRESS) and window.event.key == ti.ui.ESCAPE:
                break
            canvas.set_image(self.display_image)
            window.show()

        self.close()

    def close(self) -> None:
        """Close the window if it is open."""
        if self._window is not None:
            self._window.running = False
            self._window = None
