"""Geometry module for signed distance primitives.

This module provides the distance-field objects a scene is built from:

Components:
    sdf: Sphere, ExclusionObject (A minus B) and Sierpinski fractal,
        plus matching Taichi distance functions

Every object follows the same contract:
    distance = obj.sdf(point)    # negative inside, positive outside
    color = obj.get_color()

Kernel-side distance functions (@ti.func) mirror the Python classes so the
Taichi backend and the reference marcher agree.
"""

from .sdf import (
    EXCLUSION_COLOR,
    SIERPINSKI_DISTANCE_FACTOR,
    SIERPINSKI_ITERATIONS,
    SIERPINSKI_SCALE,
    SIERPINSKI_VERTICES,
    SPHERE_RADIUS,
    ExclusionObject,
    SceneObject,
    Sierpinski,
    Sphere,
    sdf_exclusion,
    sdf_sierpinski,
    sdf_sphere,
)

__all__ = [
    "SceneObject",
    "Sphere",
    "ExclusionObject",
    "Sierpinski",
    "sdf_sphere",
    "sdf_exclusion",
    "sdf_sierpinski",
    "SPHERE_RADIUS",
    "EXCLUSION_COLOR",
    "SIERPINSKI_SCALE",
    "SIERPINSKI_ITERATIONS",
    "SIERPINSKI_VERTICES",
    "SIERPINSKI_DISTANCE_FACTOR",
]
