"""Image export utilities for rendered images.

This module writes an ``Image`` to disk.

Supported formats:
    - PPM (plain-text P3, one line per scanline)
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from src.raymarcher.preview.export import save_image
    >>> save_image(image, "renders/image.ppm")
    >>> save_image(image, "renders/image.png")
"""

from __future__ import annotations

from pathlib import Path

from PIL import Image as PILImage

from src.raymarcher.core.image import Image

# Maximum channel value written to PPM headers
PPM_MAX_VALUE = 255


def format_ppm(image: Image) -> str:
    """Serialize an image as plain-text PPM (P3).

    The header is ``P3``, ``<width> <height>`` and ``255`` on separate
    lines, followed by one line per scanline from top to bottom with each
    pixel written as ``r g b`` and pixels separated by spaces.

    Args:
        image: The image to serialize.

    Returns:
        The PPM text, ending with a newline.
    """
    lines = ["P3", f"{image.width} {image.height}", str(PPM_MAX_VALUE)]
    for row in image.rows():
        lines.append(" ".join(f"{r} {g} {b}" for r, g, b in row))
    return "\n".join(lines) + "\n"


def save_ppm(image: Image, filepath: str | Path) -> None:
    """Save an image as a plain-text PPM file.

    Args:
        image: The image to save.
        filepath: Output file path (should end in .ppm). Existing files are
            overwritten.
    """
    Path(filepath).write_text(format_ppm(image), encoding="ascii")


def save_png(image: Image, filepath: str | Path) -> None:
    """Save an image as an 8-bit RGB PNG file.

    Args:
        image: The image to save.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(image.pixels)
    pil_image.save(filepath)


def save_image(image: Image, filepath: str | Path) -> Path:
    """Save an image, choosing the format from the file extension.

    Args:
        image: The image to save.
        filepath: Output path ending in .ppm or .png.

    Returns:
        The path written to.

    Raises:
        ValueError: If the extension is not supported.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()

    if suffix == ".ppm":
        save_ppm(image, path)
    elif suffix == ".png":
        save_png(image, path)
    else:
        raise ValueError(f"Unsupported image format: {suffix!r} (expected .ppm or .png)")

    return path
