"""Sphere tracing integrator and frame assembly.

This module implements the ray marcher: each camera ray is advanced by the
scene's signed distance at the current point until it comes within an
epsilon of a surface (a hit) or runs out of steps (a miss). Stepping by the
distance is always safe because the signed distance is a lower bound on the
distance to the nearest surface.

Per-ray state machine:
    Marching(depth=0, steps=0)
      -> Hit(depth)                      when distance < ray_dist_epsilon
      -> Miss                            when steps == max_steps
      -> Marching(depth + distance, steps + 1) otherwise

Shading modes:
    DEPTH: depth visualization (default). Depths are normalized against the
        largest finite depth in the frame; nearer is brighter and misses are
        black.
    LIT: Lambertian shading from a fixed key light with the surface normal
        estimated by central differences. Misses use the scene background.

Backends:
    "taichi": one Taichi kernel integrates every ray (default).
    "python": the reference implementation below, one ray at a time.

Example:
    >>> from src.raymarcher.core.marcher import RayMarcherConfig, render
    >>> from src.raymarcher.scene.presets import create_sphere_scene
    >>> scene, camera = create_sphere_scene()
    >>> image = render(scene, camera, RayMarcherConfig(image_width=40))
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

import numpy as np
import numpy.typing as npt

from src.raymarcher.camera.camera import DEFAULT_ASPECT_RATIO, Camera
from src.raymarcher.core.image import Color, Image
from src.raymarcher.core.vector import Vector3, as_vec3, dot, normalize, vec3
from src.raymarcher.scene.scene import Scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Depth reported for rays that exhaust their step budget
MISS_DEPTH = -1.0

# Key light used by lit shading (dotted with the normal as given)
KEY_LIGHT = (0.0, 1.5, -4.0)
KEY_LIGHT_COLOR = (1.0, 1.0, 1.0)

# Ambient term, currently weighted out entirely
AMBIENT_COLOR = (0.5, 0.5, 0.5)
AMBIENT_WEIGHT = 0.0

# Color of missed rays in depth shading
MISS_COLOR: Color = (0, 0, 0)

Backend = Literal["taichi", "python"]

_BACKENDS = ("taichi", "python")


class ShadingMode(str, Enum):
    """How a traced ray is turned into a pixel color."""

    DEPTH = "depth"
    LIT = "lit"


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class RayMarcherConfig:
    """Configuration for the ray marcher.

    Attributes:
        ray_dist_epsilon: A ray hits once the scene distance drops below this.
        normal_estimation_epsilon: Finite-difference step for normals (lit
            shading only).
        max_steps: Step budget per ray before it counts as a miss.
        image_width: Output width in pixels.
        aspect_ratio: Output width / height.
        image_height: Output height in pixels. Derived as
            int(image_width / aspect_ratio) when not given.
        shading: Shading mode (ShadingMode or its string value).
        backend: "taichi" or "python".
    """

    ray_dist_epsilon: float = 1e-6
    normal_estimation_epsilon: float = 0.1
    max_steps: int = 100
    image_width: int = 400
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    image_height: int | None = None
    shading: ShadingMode = ShadingMode.DEPTH
    backend: Backend = "taichi"

    def __post_init__(self) -> None:
        if not self.ray_dist_epsilon > 0.0:
            raise ValueError(f"ray_dist_epsilon must be positive, got {self.ray_dist_epsilon}")
        if not self.normal_estimation_epsilon > 0.0:
            raise ValueError(
                f"normal_estimation_epsilon must be positive, got {self.normal_estimation_epsilon}"
            )
        if self.max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {self.max_steps}")
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.backend not in _BACKENDS:
            raise ValueError(f"Unknown backend: {self.backend!r} (expected one of {_BACKENDS})")

        object.__setattr__(self, "shading", ShadingMode(self.shading))
        if self.image_height is None:
            object.__setattr__(self, "image_height", int(self.image_width / self.aspect_ratio))

        if self.image_width < 2 or self.image_height < 2:
            raise ValueError(
                f"Image dimensions must be at least 2x2, got {self.image_width}x{self.image_height}"
            )


# =============================================================================
# Shading Helpers
# =============================================================================


def to_channels(values: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Convert float color values to 8-bit channels.

    Values are clamped to [0, 255] and truncated toward zero.

    Raises:
        ValueError: If any value is NaN.
    """
    values = np.asarray(values, dtype=np.float64)
    if np.isnan(values).any():
        raise ValueError("NaN color value encountered while shading")
    return np.clip(values, 0.0, 255.0).astype(np.uint8)


def shade_depths(depths: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Map per-ray depths to grayscale colors.

    Each hit gets intensity ``(1 - depth / max_depth) * 255`` where
    ``max_depth`` is the largest hit depth in the frame, so the nearest
    surfaces are brightest. Misses (negative depth) are black. If every hit
    is at depth zero, hits are full white.

    Args:
        depths: Per-ray depths in scan order, MISS_DEPTH for misses.

    Returns:
        Array of shape (n, 3) with dtype uint8.

    Raises:
        ValueError: If any depth is NaN or every ray missed.
    """
    depths = np.asarray(depths, dtype=np.float64)
    if np.isnan(depths).any():
        raise ValueError("NaN depth encountered while shading")

    hits = depths >= 0.0
    if not hits.any():
        raise ValueError("Every ray missed the scene; cannot normalize depths")

    max_depth = depths[hits].max()
    intensity = np.zeros_like(depths)
    if max_depth > 0.0:
        intensity[hits] = (1.0 - depths[hits] / max_depth) * 255.0
    else:
        intensity[hits] = 255.0

    gray = intensity.astype(np.uint8)
    return np.repeat(gray[:, np.newaxis], 3, axis=1)


# =============================================================================
# Ray Marcher
# =============================================================================


class RayMarcher:
    """Sphere-tracing renderer.

    Attributes:
        config: The marcher configuration.
    """

    def __init__(self, config: RayMarcherConfig | None = None) -> None:
        self.config = config if config is not None else RayMarcherConfig()

    def _trace(self, origin: Vector3, direction: Vector3, scene: Scene) -> tuple[float, Color | None]:
        """Integrate one ray; returns (depth, color) or (MISS_DEPTH, None)."""
        origin = as_vec3(origin)
        direction = as_vec3(direction)

        depth = 0.0
        for _ in range(self.config.max_steps):
            distance, color = scene.sdf_with_color(origin + direction * depth)
            if distance < self.config.ray_dist_epsilon:
                return depth, color
            depth += distance

        return MISS_DEPTH, None

    def send_ray_dist(self, origin: Vector3, direction: Vector3, scene: Scene) -> float:
        """March a ray and report its hit depth.

        Args:
            origin: Ray origin.
            direction: Normalized ray direction.
            scene: Scene to march against (non-empty).

        Returns:
            Distance along the ray to the hit, or MISS_DEPTH if the step
            budget ran out first.
        """
        depth, _ = self._trace(origin, direction, scene)
        return depth

    def send_ray(self, origin: Vector3, direction: Vector3, scene: Scene) -> Color:
        """March a ray and return its lit color.

        Hits are shaded with ``apply_lighting`` at the hit point; misses
        return the scene's background color.
        """
        depth, color = self._trace(origin, direction, scene)
        if color is None:
            return scene.background_color

        hit_point = as_vec3(origin) + as_vec3(direction) * depth
        return self.apply_lighting(hit_point, color, scene)

    def get_normal(self, p: Vector3, scene: Scene) -> Vector3:
        """Estimate the surface normal at p by central differences.

        Raises:
            ValueError: If the distance gradient vanishes at p.
        """
        p = as_vec3(p)
        e = self.config.normal_estimation_epsilon
        dx = vec3(e, 0.0, 0.0)
        dy = vec3(0.0, e, 0.0)
        dz = vec3(0.0, 0.0, e)

        gradient = vec3(
            scene.sdf(p + dx) - scene.sdf(p - dx),
            scene.sdf(p + dy) - scene.sdf(p - dy),
            scene.sdf(p + dz) - scene.sdf(p - dz),
        )
        return normalize(gradient)

    def apply_lighting(self, p: Vector3, color: Color, scene: Scene) -> Color:
        """Shade a surface color with the key light.

        lighting = ambient * AMBIENT_WEIGHT + light_color * max(0, KEY_LIGHT . n)
        """
        normal = self.get_normal(p, scene)
        diffuse_strength = max(0.0, dot(as_vec3(KEY_LIGHT), normal))
        lighting = (
            as_vec3(AMBIENT_COLOR) * AMBIENT_WEIGHT
            + as_vec3(KEY_LIGHT_COLOR) * diffuse_strength
        )

        r, g, b = to_channels(np.asarray(color, dtype=np.float64) * lighting)
        return (int(r), int(g), int(b))

    def march(self, scene: Scene, camera: Camera) -> Image:
        """Render a frame of the scene as seen by the camera.

        Raises:
            ValueError: If the scene is empty, a distance is NaN, or (depth
                shading) every ray misses.
        """
        width = self.config.image_width
        height = self.config.image_height
        generator = camera.ray_generator(width, height)

        if self.config.backend == "taichi":
            colors = self._march_taichi(scene, camera, np.array(list(generator)))
        elif self.config.shading is ShadingMode.DEPTH:
            depths = [self.send_ray_dist(generator.origin, d, scene) for d in generator]
            colors = shade_depths(depths)
        else:
            colors = [self.send_ray(generator.origin, d, scene) for d in generator]

        return Image.from_colors(colors, width, height)

    def _march_taichi(
        self,
        scene: Scene,
        camera: Camera,
        directions: npt.NDArray[np.float64],
    ) -> npt.NDArray[np.uint8]:
        """Integrate all rays in one Taichi kernel launch.

        Taichi is initialised on the CPU in double precision if the caller has
        not initialised it.
        """
        from src.raymarcher.core.kernels import TaichiMarcher, ensure_taichi
        from src.raymarcher.scene.compiled import compile_scene

        ensure_taichi()
        lit = self.config.shading is ShadingMode.LIT
        kernel_marcher = TaichiMarcher(
            compile_scene(scene),
            directions,
            origin=camera.center,
            background_color=scene.background_color,
            config=self.config,
        )
        depths, shaded = kernel_marcher.run(lit=lit)

        if lit:
            return to_channels(shaded)
        return shade_depths(depths)


def render(
    scene: Scene,
    camera: Camera,
    config: RayMarcherConfig | None = None,
) -> Image:
    """Render a scene to an image.

    This is a pure function of its arguments: rendering the same inputs
    twice gives byte-identical images.

    With the default "taichi" backend, Taichi is initialised on first use
    (CPU, double precision) unless the caller already called ti.init().

    Args:
        scene: Scene to render (at least one object).
        camera: Camera to render from.
        config: Marcher configuration (defaults if None).
    """
    return RayMarcher(config).march(scene, camera)
