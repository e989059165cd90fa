"""Signed distance field ray marcher built on Taichi.

This package renders still images of scenes described by signed distance
functions using sphere tracing, with support for:
- Spheres, boolean subtraction and a Sierpinski fractal
- Depth visualization and Lambertian key-light shading
- A Taichi kernel backend and a pure Python reference backend
- PPM/PNG export and preview windows

Subpackages:
    core: Vector utilities, image buffer, marcher and Taichi kernels
    camera: Pinhole camera and per-pixel ray generation
    geometry: Signed distance primitives and combinators
    scene: Scene composition, kernel node tables and presets
    preview: File export and display utilities
"""

__version__ = "0.1.0"
