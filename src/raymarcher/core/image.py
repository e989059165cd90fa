"""Image buffer produced by a render.

An ``Image`` holds a dense, read-only grid of 8-bit RGB pixels laid out
row-major with the top scanline first. This matches the scan order of the
camera's ray generator, so the flat sequence of per-ray colors maps directly
onto rows without any flipping.

The image is the only artifact handed to output and display collaborators.

Example:
    >>> from src.raymarcher.core.image import create_test_image
    >>> image = create_test_image(4, 3)
    >>> len(image.to_bytes())
    36
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

# 8-bit RGB triple
Color = tuple[int, int, int]


@dataclass(frozen=True)
class Image:
    """A rendered RGB image.

    Attributes:
        pixels: Array of shape (height, width, 3) with dtype uint8. Row 0 is
            the top of the image. The array is read-only.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    pixels: npt.NDArray[np.uint8]
    width: int
    height: int

    def __post_init__(self) -> None:
        expected_shape = (self.height, self.width, 3)
        if self.pixels.shape != expected_shape:
            raise ValueError(
                f"Pixel array shape {self.pixels.shape} doesn't match expected {expected_shape}"
            )
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Pixel array must be uint8, got {self.pixels.dtype}")

        pixels = np.array(self.pixels, dtype=np.uint8, copy=True)
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @classmethod
    def from_colors(
        cls,
        colors: npt.ArrayLike | Sequence[Color],
        width: int,
        height: int,
    ) -> Image:
        """Build an image from a flat, scan-ordered sequence of colors.

        Args:
            colors: ``width * height`` RGB triples, top row first, each row
                left to right.
            width: Image width in pixels.
            height: Image height in pixels.

        Raises:
            ValueError: If the number of colors doesn't match the dimensions.
        """
        flat = np.asarray(colors, dtype=np.uint8)
        if flat.shape != (width * height, 3):
            raise ValueError(
                f"Expected {width * height} RGB colors for a {width}x{height} image, "
                f"got array of shape {flat.shape}"
            )
        return cls(pixels=flat.reshape(height, width, 3), width=width, height=height)

    def pixel(self, x: int, row: int) -> Color:
        """Get the color at column x of the given row (row 0 is the top)."""
        r, g, b = self.pixels[row, x]
        return (int(r), int(g), int(b))

    def rows(self) -> Iterator[npt.NDArray[np.uint8]]:
        """Iterate over scanlines from top to bottom."""
        yield from self.pixels

    def to_bytes(self) -> bytes:
        """Flatten the image to interleaved r, g, b bytes (top row first)."""
        return self.pixels.tobytes()

    def to_float(self) -> npt.NDArray[np.float32]:
        """Get the image as float32 values in [0, 1] for display."""
        return self.pixels.astype(np.float32) / 255.0


def create_test_image(width: int, height: int) -> Image:
    """Create a gradient test pattern.

    Red increases left to right, green increases bottom to top and blue is
    constant. Useful for checking that output collaborators keep the
    orientation of the image intact.

    Args:
        width: Image width in pixels (at least 2).
        height: Image height in pixels (at least 2).

    Raises:
        ValueError: If either dimension is smaller than 2.
    """
    if width < 2 or height < 2:
        raise ValueError(f"Test image needs at least 2x2 pixels, got {width}x{height}")

    xs = np.arange(width, dtype=np.float64) / (width - 1)
    # Top row corresponds to y = height - 1
    ys = np.arange(height - 1, -1, -1, dtype=np.float64) / (height - 1)

    pixels = np.empty((height, width, 3), dtype=np.float64)
    pixels[:, :, 0] = xs[np.newaxis, :]
    pixels[:, :, 1] = ys[:, np.newaxis]
    pixels[:, :, 2] = 0.25

    return Image(pixels=(pixels * 255.999).astype(np.uint8), width=width, height=height)
