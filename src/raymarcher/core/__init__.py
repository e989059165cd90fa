"""Core rendering module.

This module contains the fundamental building blocks for sphere tracing:

Components:
    vector: 3D vector utilities (NumPy-side) and the f64 Taichi vector type
    image: Image buffer handed to output and display collaborators
    marcher: Sphere tracing integrator, shading modes and render()
    kernels: Taichi backend that integrates every ray in one kernel

Rendering a frame is a pure function of (scene, camera, config): each
ray's march depends only on the read-only scene and its own direction.
"""

from .image import Color, Image, create_test_image
from .vector import (
    Vector3,
    as_vec3,
    dot,
    length,
    length_squared,
    normalize,
    vec3,
    vec3d,
)

# Note: marcher and kernels are NOT imported here to avoid circular imports.
# Import directly from src.raymarcher.core.marcher when needed:
#   from src.raymarcher.core.marcher import RayMarcherConfig, render

__all__ = [
    "Color",
    "Image",
    "create_test_image",
    "Vector3",
    "vec3",
    "vec3d",
    "as_vec3",
    "dot",
    "length",
    "length_squared",
    "normalize",
]
