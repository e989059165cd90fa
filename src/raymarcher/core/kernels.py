"""Taichi backend for the sphere tracing integrator.

This module runs the per-ray march of ``core.marcher`` inside a single
Taichi kernel. Each ray is independent and the scene is read-only during a
render, so the outer loop over rays is parallel while everything a ray
needs (depth, step count, operand distances) stays local to it.

The scene arrives as a post-order ``NodeTable`` (see ``scene.compiled``).
For every query point the kernel evaluates all nodes in table order,
storing each node's distance in a per-ray scratch row so exclusion nodes can
read their operands, and keeps the first root node with the smallest
distance.

All fields of a frame live in one SNode tree built with
``ti.FieldsBuilder``; the tree is destroyed as soon as the results have been
copied out, so repeated renders do not accumulate device memory.

All fields are double precision, and Taichi must be initialised with
``default_fp=ti.f64`` so that literals and constants match the Python
reference path. ``ensure_taichi()`` does this on first use if the caller
has not initialised Taichi.

Example:
    >>> from src.raymarcher.core.kernels import init_taichi
    >>> init_taichi()
    >>> from src.raymarcher.core.marcher import RayMarcherConfig, render
    >>> image = render(scene, camera, RayMarcherConfig(backend="taichi"))
"""

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm
from taichi.lang import impl
from taichi.lang.exception import TaichiRuntimeError

from src.raymarcher.core.marcher import (
    AMBIENT_COLOR,
    AMBIENT_WEIGHT,
    KEY_LIGHT,
    KEY_LIGHT_COLOR,
    MISS_DEPTH,
)
from src.raymarcher.core.vector import vec3d
from src.raymarcher.geometry.sdf import sdf_exclusion, sdf_sierpinski, sdf_sphere
from src.raymarcher.scene.compiled import NodeKind

if TYPE_CHECKING:
    from src.raymarcher.core.image import Color
    from src.raymarcher.core.marcher import RayMarcherConfig
    from src.raymarcher.scene.compiled import NodeTable

# Node tags as plain ints for kernel comparisons
_SPHERE = int(NodeKind.SPHERE)
_EXCLUSION = int(NodeKind.EXCLUSION)
_SIERPINSKI = int(NodeKind.SIERPINSKI)

# Error codes reported by the kernel (highest code wins)
_OK = 0
_ZERO_NORMAL = 1
_NAN_DISTANCE = 2


def init_taichi(arch=None) -> None:
    """Initialise Taichi for double precision rendering.

    Args:
        arch: Taichi backend (default ti.cpu). The backend must support f64.
    """
    ti.init(arch=arch if arch is not None else ti.cpu, default_fp=ti.f64)


def is_taichi_initialized() -> bool:
    """Check whether ti.init() has been called in this process."""
    try:
        impl.get_runtime().prog
    except TaichiRuntimeError:
        return False
    return True


def ensure_taichi() -> None:
    """Initialise Taichi on the CPU unless the caller already did."""
    if not is_taichi_initialized():
        init_taichi()


@ti.data_oriented
class TaichiMarcher:
    """Sphere tracer for one frame, backed by Taichi fields.

    Fields are sized for the given scene and ray count on construction and
    released by ``run()``, so each render builds its own instance and runs
    it once.

    Attributes:
        num_nodes: Number of scene nodes, operands included.
        num_rays: Number of rays (pixels) in the frame.
        depth: Per-ray hit depth, MISS_DEPTH for misses.
        shaded: Per-ray lit color (float, unclamped).
    """

    def __init__(
        self,
        table: "NodeTable",
        directions: npt.NDArray[np.float64],
        *,
        origin: tuple[float, float, float],
        background_color: "Color",
        config: "RayMarcherConfig",
    ) -> None:
        """Allocate fields and upload the scene and ray directions.

        Args:
            table: Flattened scene.
            directions: Normalized ray directions in scan order, shape (n, 3).
            origin: Shared origin of all rays (the camera center).
            background_color: Lit color for missed rays.
            config: Marcher configuration; epsilons and the step budget are
                compiled into the kernel.

        Raises:
            ValueError: If the table or direction array is empty or
                malformed.
        """
        if table.num_nodes == 0:
            raise ValueError("Scene should not be empty")
        directions = np.ascontiguousarray(directions, dtype=np.float64)
        if directions.ndim != 2 or directions.shape[1] != 3 or directions.shape[0] == 0:
            raise ValueError(f"Expected ray directions of shape (n, 3), got {directions.shape}")

        self.num_nodes = table.num_nodes
        self.num_rays = int(directions.shape[0])

        self.ray_dist_epsilon = float(config.ray_dist_epsilon)
        self.normal_estimation_epsilon = float(config.normal_estimation_epsilon)
        self.max_steps = int(config.max_steps)

        self._origin = vec3d(*(float(c) for c in origin))
        self._background = vec3d(*(float(c) for c in background_color))

        # Scene nodes
        self.kind = ti.field(dtype=ti.i32)
        self.radius = ti.field(dtype=ti.f64)
        self.child_a = ti.field(dtype=ti.i32)
        self.child_b = ti.field(dtype=ti.i32)
        self.is_root = ti.field(dtype=ti.i32)
        self.center = ti.Vector.field(3, dtype=ti.f64)
        self.color = ti.Vector.field(3, dtype=ti.f64)

        # Per-ray operand distances for the current query point
        self.scratch = ti.field(dtype=ti.f64)

        # Rays and results
        self.directions = ti.Vector.field(3, dtype=ti.f64)
        self.depth = ti.field(dtype=ti.f64)
        self.shaded = ti.Vector.field(3, dtype=ti.f64)
        self.error = ti.field(dtype=ti.i32)

        builder = ti.FieldsBuilder()
        builder.dense(ti.i, self.num_nodes).place(
            self.kind, self.radius, self.child_a, self.child_b, self.is_root
        )
        builder.dense(ti.i, self.num_nodes).place(self.center, self.color)
        builder.dense(ti.ij, (self.num_rays, self.num_nodes)).place(self.scratch)
        builder.dense(ti.i, self.num_rays).place(self.directions, self.depth, self.shaded)
        builder.dense(ti.i, 1).place(self.error)
        self._tree = builder.finalize()

        try:
            self.kind.from_numpy(table.kind.astype(np.int32))
            self.radius.from_numpy(table.radius.astype(np.float64))
            self.child_a.from_numpy(table.child_a.astype(np.int32))
            self.child_b.from_numpy(table.child_b.astype(np.int32))
            self.is_root.from_numpy(table.is_root.astype(np.int32))
            self.center.from_numpy(table.center.astype(np.float64))
            self.color.from_numpy(table.color.astype(np.float64))
            self.directions.from_numpy(directions)
        except Exception:
            self._release()
            raise

    def _release(self) -> None:
        if self._tree is not None:
            self._tree.destroy()
            self._tree = None

    # =========================================================================
    # Scene Evaluation
    # =========================================================================

    @ti.func
    def _scene_sdf_with_color(self, ray: ti.i32, p: vec3d):
        """Nearest root distance and its color at p.

        Returns:
            A tuple (distance, color). Exact ties keep the earlier root.
        """
        best = tm.inf
        best_color = vec3d(0.0, 0.0, 0.0)

        for n in range(self.num_nodes):
            kind = self.kind[n]
            d = 0.0
            if kind == _SPHERE:
                d = sdf_sphere(p, self.center[n], self.radius[n])
            elif kind == _EXCLUSION:
                d = sdf_exclusion(
                    self.scratch[ray, self.child_a[n]],
                    self.scratch[ray, self.child_b[n]],
                )
            else:
                d = sdf_sierpinski(p)
            self.scratch[ray, n] = d

            if tm.isnan(d):
                ti.atomic_max(self.error[0], _NAN_DISTANCE)

            if self.is_root[n] == 1:
                if d < best:
                    best = d
                    best_color = self.color[n]

        return best, best_color

    @ti.func
    def _scene_sdf(self, ray: ti.i32, p: vec3d) -> ti.f64:
        d, _ = self._scene_sdf_with_color(ray, p)
        return d

    @ti.func
    def _get_normal(self, ray: ti.i32, p: vec3d) -> vec3d:
        """Central-difference normal, as in RayMarcher.get_normal."""
        e = self.normal_estimation_epsilon
        dx = vec3d(e, 0.0, 0.0)
        dy = vec3d(0.0, e, 0.0)
        dz = vec3d(0.0, 0.0, e)
        gradient = vec3d(
            self._scene_sdf(ray, p + dx) - self._scene_sdf(ray, p - dx),
            self._scene_sdf(ray, p + dy) - self._scene_sdf(ray, p - dy),
            self._scene_sdf(ray, p + dz) - self._scene_sdf(ray, p - dz),
        )

        normal = vec3d(0.0, 0.0, 0.0)
        if tm.dot(gradient, gradient) == 0.0:
            ti.atomic_max(self.error[0], _ZERO_NORMAL)
        else:
            normal = tm.normalize(gradient)
        return normal

    @ti.func
    def _apply_lighting(self, ray: ti.i32, p: vec3d, color: vec3d) -> vec3d:
        """Key light shading, as in RayMarcher.apply_lighting."""
        light = vec3d(KEY_LIGHT[0], KEY_LIGHT[1], KEY_LIGHT[2])
        light_color = vec3d(KEY_LIGHT_COLOR[0], KEY_LIGHT_COLOR[1], KEY_LIGHT_COLOR[2])
        ambient = vec3d(AMBIENT_COLOR[0], AMBIENT_COLOR[1], AMBIENT_COLOR[2])

        normal = self._get_normal(ray, p)
        diffuse_strength = ti.max(0.0, tm.dot(light, normal))
        lighting = ambient * AMBIENT_WEIGHT + light_color * diffuse_strength

        return color * lighting

    # =========================================================================
    # Sphere Tracing
    # =========================================================================

    @ti.func
    def _march(self, ray: ti.i32, origin: vec3d, direction: vec3d):
        """Integrate one ray.

        Returns:
            A tuple (depth, color, hit) with depth MISS_DEPTH on a miss.
        """
        depth = 0.0
        color = vec3d(0.0, 0.0, 0.0)
        hit = 0

        # Taichi has no early return from ti.func, so converged rays idle
        for _ in range(self.max_steps):
            if hit == 0:
                distance, c = self._scene_sdf_with_color(ray, origin + direction * depth)
                if distance < self.ray_dist_epsilon:
                    hit = 1
                    color = c
                else:
                    depth += distance

        if hit == 0:
            depth = MISS_DEPTH

        return depth, color, hit

    @ti.kernel
    def _render(self, lit: ti.i32, origin: vec3d, background: vec3d):
        for i in range(self.num_rays):
            direction = self.directions[i]
            depth, color, hit = self._march(i, origin, direction)

            self.depth[i] = depth

            shaded = background
            if hit == 1:
                shaded = color
                if lit == 1:
                    shaded = self._apply_lighting(i, origin + direction * depth, color)
            self.shaded[i] = shaded

    def run(self, *, lit: bool = False) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Trace every ray and release the frame's fields.

        Args:
            lit: Whether to compute lit colors for hits (otherwise hits
                carry their unlit object color).

        Returns:
            A tuple (depths, colors): depths of shape (n,) with MISS_DEPTH
            for misses, and float colors of shape (n, 3).

        Raises:
            RuntimeError: If the marcher has already run.
            ValueError: If a distance was NaN or (lit shading) a surface
                normal could not be estimated.
        """
        if self._tree is None:
            raise RuntimeError("TaichiMarcher.run() can only be called once per instance")

        try:
            self._render(1 if lit else 0, self._origin, self._background)
            error = int(self.error[0])
            depths = self.depth.to_numpy()
            shaded = self.shaded.to_numpy()
        finally:
            self._release()

        if error == _NAN_DISTANCE:
            raise ValueError("NaN distance encountered while marching")
        if error == _ZERO_NORMAL:
            raise ValueError("Cannot normalize a zero-length vector")

        return depths, shaded
