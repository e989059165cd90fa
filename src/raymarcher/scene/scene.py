"""Scene composition by nearest-surface union.

A ``Scene`` owns an ordered list of scene objects and combines them into a
single signed distance function by taking the minimum distance over all
members, which is the union operator for distance fields. The winning
object's color travels with the distance; on exact ties the first object in
list order wins.

Example:
    >>> from src.raymarcher.scene.scene import Scene
    >>> from src.raymarcher.geometry.sdf import Sphere
    >>> scene = Scene()
    >>> _ = scene.add(Sphere(center=(0.0, 0.0, -5.0), color=(200, 0, 0)))
    >>> scene.sdf((0.0, 0.0, 0.0))
    3.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy.typing as npt

from src.raymarcher.core.image import Color
from src.raymarcher.geometry.sdf import SceneObject


@dataclass
class Scene:
    """Collection of scene objects plus a background color.

    Attributes:
        objects: Scene objects in insertion order. Order only matters for
            breaking exact distance ties.
        background_color: Color for rays that miss everything (used by lit
            shading; depth shading always renders misses black).
    """

    objects: list[SceneObject] = field(default_factory=list)
    background_color: Color = (0, 0, 0)

    def add(self, obj: SceneObject) -> SceneObject:
        """Append an object to the scene and return it."""
        self.objects.append(obj)
        return obj

    def __len__(self) -> int:
        return len(self.objects)

    def _check_not_empty(self) -> None:
        if not self.objects:
            raise ValueError("Scene should not be empty")

    def sdf(self, point: npt.ArrayLike) -> float:
        """Signed distance from the point to the nearest surface.

        Raises:
            ValueError: If the scene is empty or a distance is NaN.
        """
        distance, _ = self.sdf_with_color(point)
        return distance

    def sdf_with_color(self, point: npt.ArrayLike) -> tuple[float, Color]:
        """Signed distance and color of the nearest object.

        Args:
            point: World-space query point.

        Returns:
            (distance, color) of the first object with minimal distance.

        Raises:
            ValueError: If the scene is empty or a distance is NaN.
        """
        self._check_not_empty()

        best_distance = math.inf
        best_color = self.background_color
        for obj in self.objects:
            distance, color = obj.evaluate(point)
            if math.isnan(distance):
                raise ValueError(f"NaN distance from {obj!r} at {point!r}")
            if distance < best_distance:
                best_distance = distance
                best_color = color

        return best_distance, best_color
