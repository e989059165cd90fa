"""Flattening of a scene into a tagged node table for Taichi kernels.

Taichi kernels cannot dispatch on Python classes or recurse, so the scene's
object trees are flattened into parallel arrays of tagged nodes. Nodes are
stored in post-order: both operands of an exclusion appear before the
exclusion itself, and each top-level object's subtree appears before the
next top-level object. A kernel can therefore evaluate every node in a
single forward pass, reading operand distances already computed for the
same point, and take the minimum over root nodes in scene order.

Example:
    >>> from src.raymarcher.scene.compiled import compile_scene
    >>> table = compile_scene(scene)
    >>> table.num_nodes
    3
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import numpy.typing as npt

from src.raymarcher.geometry.sdf import ExclusionObject, SceneObject, Sierpinski, Sphere
from src.raymarcher.scene.scene import Scene


class NodeKind(IntEnum):
    """Variant tag for flattened scene nodes."""

    SPHERE = 0
    EXCLUSION = 1
    SIERPINSKI = 2


# Child index for nodes without operands
NO_CHILD = -1


@dataclass(frozen=True)
class NodeTable:
    """Scene objects flattened into post-order arrays.

    Attributes:
        kind: NodeKind per node, shape (n,), int32.
        center: Sphere centers, shape (n, 3), float64 (zero for other kinds).
        radius: Sphere radii, shape (n,), float64 (zero for other kinds).
        color: Node colors, shape (n, 3), float64 in [0, 255].
        child_a: Index of the carved operand for exclusions, else NO_CHILD.
        child_b: Index of the carving operand for exclusions, else NO_CHILD.
        is_root: 1 for top-level scene objects, 0 for operands, int32.
    """

    kind: npt.NDArray[np.int32]
    center: npt.NDArray[np.float64]
    radius: npt.NDArray[np.float64]
    color: npt.NDArray[np.float64]
    child_a: npt.NDArray[np.int32]
    child_b: npt.NDArray[np.int32]
    is_root: npt.NDArray[np.int32]

    @property
    def num_nodes(self) -> int:
        """Total number of nodes, operands included."""
        return int(self.kind.shape[0])

    @property
    def num_roots(self) -> int:
        """Number of top-level scene objects."""
        return int(self.is_root.sum())


class _TableBuilder:
    """Accumulates nodes while walking object trees."""

    def __init__(self) -> None:
        self.kind: list[int] = []
        self.center: list[tuple[float, float, float]] = []
        self.radius: list[float] = []
        self.color: list[tuple[int, int, int]] = []
        self.child_a: list[int] = []
        self.child_b: list[int] = []
        self.is_root: list[int] = []

    def _append(
        self,
        kind: NodeKind,
        color,
        *,
        center=(0.0, 0.0, 0.0),
        radius: float = 0.0,
        child_a: int = NO_CHILD,
        child_b: int = NO_CHILD,
    ) -> int:
        self.kind.append(int(kind))
        self.center.append(tuple(center))
        self.radius.append(float(radius))
        self.color.append(tuple(color))
        self.child_a.append(child_a)
        self.child_b.append(child_b)
        self.is_root.append(0)
        return len(self.kind) - 1

    def add(self, obj: SceneObject) -> int:
        """Add an object and its operands, returning the object's index."""
        if isinstance(obj, Sphere):
            return self._append(
                NodeKind.SPHERE, obj.get_color(), center=obj.center, radius=obj.radius
            )
        if isinstance(obj, ExclusionObject):
            index_a = self.add(obj.a)
            index_b = self.add(obj.b)
            return self._append(
                NodeKind.EXCLUSION, obj.get_color(), child_a=index_a, child_b=index_b
            )
        if isinstance(obj, Sierpinski):
            return self._append(NodeKind.SIERPINSKI, obj.get_color())

        raise TypeError(
            f"Scene object type {type(obj).__name__} is not supported by the Taichi backend"
        )

    def build(self) -> NodeTable:
        return NodeTable(
            kind=np.array(self.kind, dtype=np.int32),
            center=np.array(self.center, dtype=np.float64).reshape(-1, 3),
            radius=np.array(self.radius, dtype=np.float64),
            color=np.array(self.color, dtype=np.float64).reshape(-1, 3),
            child_a=np.array(self.child_a, dtype=np.int32),
            child_b=np.array(self.child_b, dtype=np.int32),
            is_root=np.array(self.is_root, dtype=np.int32),
        )


def compile_scene(scene: Scene) -> NodeTable:
    """Flatten a scene into a post-order node table.

    Args:
        scene: The scene to flatten. Must contain at least one object.

    Returns:
        A NodeTable whose root nodes appear in scene order.

    Raises:
        ValueError: If the scene is empty or a sphere has a non-finite
            center or radius.
        TypeError: If the scene contains an object kind with no kernel
            implementation.
    """
    if not scene.objects:
        raise ValueError("Scene should not be empty")

    builder = _TableBuilder()
    for obj in scene.objects:
        root = builder.add(obj)
        builder.is_root[root] = 1

    table = builder.build()
    if not (np.isfinite(table.center).all() and np.isfinite(table.radius).all()):
        raise ValueError("Scene geometry must be finite (NaN or infinite sphere center or radius)")
    return table
