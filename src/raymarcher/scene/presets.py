"""Ready-made scenes for rendering and testing.

Presets:
    sierpinski: A red Sierpinski tetrahedron viewed from z = 3. With
        the default epsilon and step budget the distance estimate never
        converges, so every ray misses: depth shading fails fast and lit
        shading shows only background.
    exclusion: A sphere at (0, 0, -5) with a second sphere at
        (0, 1.5, -4) carved out of it. This is the default render.
    sphere: A single sphere at (0, 0, -5) seen from the origin.

Each factory returns a ``(Scene, Camera)`` pair. The camera's viewport
aspect ratio comes from the params so it can match the marcher's image
aspect ratio.

Example:
    >>> from src.raymarcher.scene.presets import create_scene
    >>> scene, camera = create_scene("sierpinski")
    >>> camera.center
    (0.0, 0.0, 3.0)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from src.raymarcher.camera.camera import DEFAULT_ASPECT_RATIO, Camera
from src.raymarcher.core.image import Color
from src.raymarcher.geometry.sdf import ExclusionObject, Sierpinski, Sphere
from src.raymarcher.scene.scene import Scene

# =============================================================================
# Preset Parameters
# =============================================================================

# Primary object color in all presets
DEFAULT_OBJECT_COLOR: Color = (200, 0, 0)

# Sphere placement shared by the sphere and exclusion presets
SPHERE_CENTER = (0.0, 0.0, -5.0)

# Sphere carved out of the main sphere in the exclusion preset
CARVING_SPHERE_CENTER = (0.0, 1.5, -4.0)

# The Sierpinski tetrahedron sits at the origin, so the camera backs off
SIERPINSKI_CAMERA_CENTER = (0.0, 0.0, 3.0)


@dataclass
class ScenePresetParams:
    """Parameters shared by the scene presets.

    Attributes:
        object_color: Color of the main object.
        background_color: Scene background color (used by lit shading).
        aspect_ratio: Viewport aspect ratio for the returned camera.
        camera_center: Camera position override. None uses the preset's
            own placement.
    """

    object_color: Color = DEFAULT_OBJECT_COLOR
    background_color: Color = (0, 0, 0)
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    camera_center: tuple[float, float, float] | None = None

    def make_camera(self, default_center: tuple[float, float, float]) -> Camera:
        center = self.camera_center if self.camera_center is not None else default_center
        return Camera.from_aspect_ratio(self.aspect_ratio, center=center)


# =============================================================================
# Scene Factories
# =============================================================================


def create_sierpinski_scene(
    params: ScenePresetParams | None = None,
) -> tuple[Scene, Camera]:
    """Create the Sierpinski tetrahedron scene."""
    if params is None:
        params = ScenePresetParams()

    scene = Scene(background_color=params.background_color)
    scene.add(Sierpinski(color=params.object_color))

    return scene, params.make_camera(SIERPINSKI_CAMERA_CENTER)


def create_exclusion_scene(
    params: ScenePresetParams | None = None,
) -> tuple[Scene, Camera]:
    """Create a sphere with a smaller region carved out of its upper front."""
    if params is None:
        params = ScenePresetParams()

    scene = Scene(background_color=params.background_color)
    scene.add(
        ExclusionObject(
            a=Sphere(center=SPHERE_CENTER, color=params.object_color),
            b=Sphere(center=CARVING_SPHERE_CENTER, color=params.object_color),
        )
    )

    return scene, params.make_camera((0.0, 0.0, 0.0))


def create_sphere_scene(
    params: ScenePresetParams | None = None,
) -> tuple[Scene, Camera]:
    """Create a single sphere in front of the camera."""
    if params is None:
        params = ScenePresetParams()

    scene = Scene(background_color=params.background_color)
    scene.add(Sphere(center=SPHERE_CENTER, color=params.object_color))

    return scene, params.make_camera((0.0, 0.0, 0.0))


SCENE_PRESETS: dict[str, Callable[[ScenePresetParams | None], tuple[Scene, Camera]]] = {
    "sierpinski": create_sierpinski_scene,
    "exclusion": create_exclusion_scene,
    "sphere": create_sphere_scene,
}


def create_scene(
    name: str,
    params: ScenePresetParams | None = None,
) -> tuple[Scene, Camera]:
    """Create a preset scene by name.

    Raises:
        ValueError: If the name is not a known preset.
    """
    try:
        factory = SCENE_PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown scene preset: {name!r} (expected one of {sorted(SCENE_PRESETS)})"
        ) from None
    return factory(params)
