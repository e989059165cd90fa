"""Camera module for view and ray generation.

This module provides the camera model used to cast primary rays:

Components:
    camera: Pinhole camera looking down -z and its per-pixel ray generator

Ray generation uses normalized viewport coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image

Rays are produced top row first, each row left to right, which is the
order the image buffer stores its pixels in.
"""

from .camera import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_VIEWPORT_HEIGHT,
    Camera,
    RayGenerator,
)

__all__ = [
    "Camera",
    "RayGenerator",
    "DEFAULT_ASPECT_RATIO",
    "DEFAULT_VIEWPORT_HEIGHT",
]
