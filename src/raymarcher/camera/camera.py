"""Pinhole camera and per-pixel ray direction generation.

The camera looks down the -z axis from its center. A virtual viewport of
``viewport_width`` by ``viewport_height`` sits ``focal_length`` in front of
the camera, and one ray is cast through each pixel position on it:

- horizontal = (viewport_width, 0, 0)
- vertical = (0, viewport_height, 0)
- lower_left_corner = center - (0, 0, focal_length) - horizontal/2 - vertical/2

Pixel coordinates are normalized by (dimension - 1), so images need at
least two pixels in each direction.

The ``RayGenerator`` walks the image top row first (y = height - 1 down to
0), each row left to right. This order defines how the flat pixel buffer
maps onto image rows and must not change.

Example:
    >>> from src.raymarcher.camera.camera import Camera
    >>> camera = Camera()
    >>> directions = list(camera.ray_generator(4, 3))
    >>> len(directions)
    12
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from src.raymarcher.core.vector import Vector3, as_vec3, normalize, vec3

# Default viewport aspect ratio (width / height)
DEFAULT_ASPECT_RATIO = 16.0 / 9.0

# Default viewport height at the focal plane
DEFAULT_VIEWPORT_HEIGHT = 2.0


@dataclass(frozen=True)
class Camera:
    """Configuration for a pinhole camera looking down -z.

    Attributes:
        center: Camera position in world space (x, y, z).
        viewport_width: Width of the virtual viewport (positive).
        viewport_height: Height of the virtual viewport (positive).
        focal_length: Distance from the center to the viewport (positive).
    """

    center: tuple[float, float, float] = (0.0, 0.0, 0.0)
    viewport_width: float = DEFAULT_VIEWPORT_HEIGHT * DEFAULT_ASPECT_RATIO
    viewport_height: float = DEFAULT_VIEWPORT_HEIGHT
    focal_length: float = 1.0

    def __post_init__(self) -> None:
        if len(self.center) != 3:
            raise ValueError(f"Camera center must have 3 components, got {self.center!r}")
        for name in ("viewport_width", "viewport_height", "focal_length"):
            value = getattr(self, name)
            if not value > 0.0:
                raise ValueError(f"Camera {name} must be positive, got {value}")

    @classmethod
    def from_aspect_ratio(
        cls,
        aspect_ratio: float,
        *,
        center: tuple[float, float, float] = (0.0, 0.0, 0.0),
        viewport_height: float = DEFAULT_VIEWPORT_HEIGHT,
        focal_length: float = 1.0,
    ) -> Camera:
        """Create a camera whose viewport matches an image aspect ratio.

        Args:
            aspect_ratio: Image width divided by image height.
            center: Camera position in world space.
            viewport_height: Height of the viewport; width is derived.
            focal_length: Distance from the center to the viewport.
        """
        return cls(
            center=center,
            viewport_width=viewport_height * aspect_ratio,
            viewport_height=viewport_height,
            focal_length=focal_length,
        )

    @property
    def origin(self) -> Vector3:
        """The camera center as a vector."""
        return as_vec3(self.center)

    def ray_generator(self, image_width: int, image_height: int) -> RayGenerator:
        """Create a single-pass generator of ray directions for an image.

        Args:
            image_width: Image width in pixels (at least 2).
            image_height: Image height in pixels (at least 2).
        """
        return RayGenerator(self, image_width, image_height)


class RayGenerator:
    """Iterator over normalized ray directions, one per pixel.

    Directions are produced lazily in scan order: for y from height - 1 down
    to 0, x from 0 to width - 1. The cursor is consumed as directions are
    produced; once exhausted the generator yields nothing further.

    Attributes:
        origin: Ray origin (the camera center).
        horizontal: Viewport basis vector spanning its full width.
        vertical: Viewport basis vector spanning its full height.
        lower_left_corner: World position of the viewport's lower-left corner.
        image_width: Image width in pixels.
        image_height: Image height in pixels.
    """

    def __init__(self, camera: Camera, image_width: int, image_height: int) -> None:
        if image_width < 2 or image_height < 2:
            raise ValueError(
                f"Image dimensions must be at least 2x2, got {image_width}x{image_height}"
            )

        self.image_width = image_width
        self.image_height = image_height

        self.origin = camera.origin
        self.horizontal = vec3(camera.viewport_width, 0.0, 0.0)
        self.vertical = vec3(0.0, camera.viewport_height, 0.0)
        self.lower_left_corner = (
            self.origin
            - vec3(0.0, 0.0, camera.focal_length)
            - self.horizontal / 2.0
            - self.vertical / 2.0
        )

        self._x = 0
        self._y = image_height - 1
        self._remaining = image_width * image_height

    @property
    def remaining(self) -> int:
        """Number of directions not yet produced."""
        return self._remaining

    def direction_at(self, x: int, y: int) -> Vector3:
        """Compute the normalized direction through pixel (x, y).

        Args:
            x: Pixel column, 0 at the left edge.
            y: Pixel row, 0 at the bottom edge.
        """
        u = x / (self.image_width - 1)
        v = y / (self.image_height - 1)
        point = self.lower_left_corner + self.horizontal * u + self.vertical * v
        return normalize(point - self.origin)

    def __iter__(self) -> Iterator[Vector3]:
        return self

    def __next__(self) -> Vector3:
        if self._remaining == 0:
            raise StopIteration

        direction = self.direction_at(self._x, self._y)

        self._remaining -= 1
        self._x += 1
        if self._x >= self.image_width and self._y > 0:
            self._x = 0
            self._y -= 1

        return direction

    def __length_hint__(self) -> int:
        return self._remaining
