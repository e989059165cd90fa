"""Signed distance primitives and combinators.

Every scene object answers two questions about a world-space point: how
far away its surface is (negative inside, zero on the surface, positive
outside) and what its intrinsic color is.

Variants:
    Sphere: exact distance to a sphere surface.
    ExclusionObject: boolean subtraction A minus B via max(d_A, -d_B).
        Always reports a neutral gray, whichever operand is nearer.
    Sierpinski: iterated function system estimator for a Sierpinski
        tetrahedron, folding toward the nearest of four fixed vertices.

Each variant has a Python implementation (used by the reference marcher and
by tests) and a matching ``@ti.func`` used inside Taichi kernels. Both use
double precision and the same constants.

Example:
    >>> from src.raymarcher.geometry.sdf import Sphere
    >>> sphere = Sphere(center=(0.0, 0.0, 0.0), color=(200, 0, 0))
    >>> sphere.sdf((0.0, 0.0, 5.0))
    3.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.raymarcher.core.image import Color
from src.raymarcher.core.vector import Vector3, as_vec3, length, vec3d

# =============================================================================
# Constants
# =============================================================================

# Default sphere radius
SPHERE_RADIUS = 2.0

# Color reported by exclusion objects regardless of operand colors
EXCLUSION_COLOR: Color = (100, 100, 100)

# Sierpinski IFS parameters
SIERPINSKI_SCALE = 1.85
SIERPINSKI_ITERATIONS = 10

# Fold targets, searched in this order (first strictly nearer vertex wins)
SIERPINSKI_VERTICES = (
    (1.0, 1.0, 1.0),
    (-1.0, -1.0, 1.0),
    (1.0, -1.0, -1.0),
    (-1.0, 1.0, -1.0),
)

# SCALE^(-ITERATIONS), applied to the length of the final folded point
SIERPINSKI_DISTANCE_FACTOR = SIERPINSKI_SCALE ** (-SIERPINSKI_ITERATIONS)

_SIERPINSKI_VERTEX_ARRAYS = tuple(np.array(v, dtype=np.float64) for v in SIERPINSKI_VERTICES)


# =============================================================================
# Scene Objects (Python-side)
# =============================================================================


class SceneObject(ABC):
    """Base class for anything that can be placed in a scene."""

    @abstractmethod
    def sdf(self, point: npt.ArrayLike) -> float:
        """Signed distance from the point to this object's surface."""

    @abstractmethod
    def get_color(self) -> Color:
        """Intrinsic color of this object."""

    def evaluate(self, point: npt.ArrayLike) -> tuple[float, Color]:
        """Get the signed distance and color at a point in one call."""
        return self.sdf(point), self.get_color()


@dataclass
class Sphere(SceneObject):
    """A sphere with exact signed distance.

    Attributes:
        center: Center of the sphere in world space (x, y, z).
        color: Intrinsic RGB color.
        radius: Sphere radius (positive, default 2.0).
    """

    center: tuple[float, float, float]
    color: Color
    radius: float = SPHERE_RADIUS
    _center: Vector3 = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        self._center = as_vec3(self.center)

    def sdf(self, point: npt.ArrayLike) -> float:
        return length(self._center - np.asarray(point, dtype=np.float64)) - self.radius

    def get_color(self) -> Color:
        return self.color


@dataclass
class ExclusionObject(SceneObject):
    """Boolean subtraction of one object from another (A minus B).

    The distance ``max(d_A, -d_B)`` is exact only near the surfaces, which
    is enough for sphere tracing at image resolution.

    Attributes:
        a: The object being carved.
        b: The object carved out of ``a``.
    """

    a: SceneObject
    b: SceneObject

    def sdf(self, point: npt.ArrayLike) -> float:
        return max(self.a.sdf(point), -self.b.sdf(point))

    def get_color(self) -> Color:
        return EXCLUSION_COLOR


@dataclass
class Sierpinski(SceneObject):
    """Sierpinski tetrahedron from an iterated function system.

    At each of ``SIERPINSKI_ITERATIONS`` steps the point is pulled toward the
    nearest vertex and scaled: ``z = z * SCALE - nearest * (SCALE - 1)``.
    The distance estimate is ``|z| * SCALE^(-ITERATIONS)``.

    Attributes:
        color: Intrinsic RGB color.
    """

    color: Color

    def sdf(self, point: npt.ArrayLike) -> float:
        z = np.asarray(point, dtype=np.float64)
        for _ in range(SIERPINSKI_ITERATIONS):
            nearest = _SIERPINSKI_VERTEX_ARRAYS[0]
            nearest_dist = length(z - nearest)
            for vertex in _SIERPINSKI_VERTEX_ARRAYS[1:]:
                d = length(z - vertex)
                if d < nearest_dist:
                    nearest = vertex
                    nearest_dist = d
            z = z * SIERPINSKI_SCALE - nearest * (SIERPINSKI_SCALE - 1.0)

        return length(z) * SIERPINSKI_DISTANCE_FACTOR

    def get_color(self) -> Color:
        return self.color


# =============================================================================
# Distance Functions (Taichi-compatible)
# =============================================================================


@ti.func
def sdf_sphere(p: vec3d, center: vec3d, radius: ti.f64) -> ti.f64:
    """Signed distance from p to a sphere."""
    return tm.length(center - p) - radius


@ti.func
def sdf_exclusion(dist_a: ti.f64, dist_b: ti.f64) -> ti.f64:
    """Combine operand distances into A minus B."""
    return ti.max(dist_a, -dist_b)


@ti.func
def sdf_sierpinski(p: vec3d) -> ti.f64:
    """Distance estimate to the Sierpinski tetrahedron.

    Mirrors ``Sierpinski.sdf``; the fold loop is unrolled at compile time.
    """
    a1 = vec3d(1.0, 1.0, 1.0)
    a2 = vec3d(-1.0, -1.0, 1.0)
    a3 = vec3d(1.0, -1.0, -1.0)
    a4 = vec3d(-1.0, 1.0, -1.0)

    z = p
    for _ in ti.static(range(SIERPINSKI_ITERATIONS)):
        nearest = a1
        nearest_dist = tm.length(z - a1)
        d = tm.length(z - a2)
        if d < nearest_dist:
            nearest = a2
            nearest_dist = d
        d = tm.length(z - a3)
        if d < nearest_dist:
            nearest = a3
            nearest_dist = d
        d = tm.length(z - a4)
        if d < nearest_dist:
            nearest = a4
            nearest_dist = d
        z = z * SIERPINSKI_SCALE - nearest * (SIERPINSKI_SCALE - 1.0)

    return tm.length(z) * SIERPINSKI_DISTANCE_FACTOR
