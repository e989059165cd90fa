"""Scene module for composing signed distance objects.

Components:
    scene: Scene container with nearest-surface union (sdf, sdf_with_color)
    compiled: Flattening of scene object trees into a tagged node table
        for Taichi kernels
    presets: Ready-made scenes (Sierpinski, exclusion, single sphere)

Example:
    >>> from src.raymarcher.scene import Scene
    >>> from src.raymarcher.geometry import Sphere
    >>> scene = Scene()
    >>> scene.add(Sphere(center=(0.0, 0.0, -5.0), color=(200, 0, 0)))
    >>> distance, color = scene.sdf_with_color((0.0, 0.0, 0.0))
"""

from .compiled import NO_CHILD, NodeKind, NodeTable, compile_scene
from .presets import (
    SCENE_PRESETS,
    ScenePresetParams,
    create_exclusion_scene,
    create_scene,
    create_sierpinski_scene,
    create_sphere_scene,
)
from .scene import Scene

__all__ = [
    "Scene",
    "NodeKind",
    "NodeTable",
    "NO_CHILD",
    "compile_scene",
    "ScenePresetParams",
    "SCENE_PRESETS",
    "create_scene",
    "create_sierpinski_scene",
    "create_exclusion_scene",
    "create_sphere_scene",
]
