#!/usr/bin/env python3
"""Render a signed distance field scene.

This script renders one of the preset scenes with the sphere tracer, saves
the result and optionally opens it in a window.

Usage:
    python -m examples.render_sdf_scene [options]

Options:
    --scene NAME          Scene preset: sierpinski, exclusion, sphere (default: exclusion)
    --width WIDTH         Image width in pixels (default: 400)
    --aspect-ratio RATIO  Image width / height (default: 1.7778)
    --shading MODE        Shading mode: depth or lit (default: depth)
    --backend BACKEND     Marcher backend: taichi or python (default: taichi)
    --max-steps STEPS     Step budget per ray (default: 100)
    --output OUTPUT       Output file path, .ppm or .png (default: renders/image.ppm)
    --test-image          Write a gradient test pattern instead of rendering
    --show                Open the image in a window (Escape to close)
    --quiet               Suppress progress output

Example:
    python -m examples.render_sdf_scene --scene exclusion --shading lit --show
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a signed distance field scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="exclusion",
        choices=["sierpinski", "exclusion", "sphere"],
        help="Scene preset (default: exclusion)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=16.0 / 9.0,
        help="Image width / height (default: 1.7778)",
    )
    parser.add_argument(
        "--shading",
        type=str,
        default="depth",
        choices=["depth", "lit"],
        help="Shading mode (default: depth)",
    )
    parser.add_argument(
        "--backend",
        type=str,
        default="taichi",
        choices=["taichi", "python"],
        help="Marcher backend (default: taichi)",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=100,
        help="Step budget per ray (default: 100)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="renders/image.ppm",
        help="Output file path, .ppm or .png (default: renders/image.ppm)",
    )
    parser.add_argument(
        "--test-image",
        action="store_true",
        help="Write a gradient test pattern instead of rendering",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Open the image in a window (Escape to close)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_sdf_scene(
    scene_name: str = "exclusion",
    width: int = 400,
    aspect_ratio: float = 16.0 / 9.0,
    shading: str = "depth",
    backend: str = "taichi",
    max_steps: int = 100,
    output_path: str = "renders/image.ppm",
    test_image: bool = False,
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a preset scene and save it to a file.

    Args:
        scene_name: Name of the scene preset.
        width: Image width in pixels.
        aspect_ratio: Image width / height, shared by camera and marcher.
        shading: "depth" or "lit".
        backend: "taichi" or "python".
        max_steps: Step budget per ray.
        output_path: Output file path (.ppm or .png).
        test_image: Write a gradient test pattern instead of rendering.
        show: Open the result in a window afterwards.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.raymarcher.core.image import create_test_image
    from src.raymarcher.core.marcher import RayMarcherConfig, render
    from src.raymarcher.preview.display import RenderWindow
    from src.raymarcher.preview.export import save_image
    from src.raymarcher.scene.presets import ScenePresetParams, create_scene

    config = RayMarcherConfig(
        image_width=width,
        aspect_ratio=aspect_ratio,
        max_steps=max_steps,
        shading=shading,
        backend=backend,
    )

    start_time = time.time()

    if test_image:
        if not quiet:
            print(f"Creating test image ({config.image_width}x{config.image_height})...")
        image = create_test_image(config.image_width, config.image_height)
    else:
        if not quiet:
            print(
                f"Rendering {scene_name} scene ({config.image_width}x{config.image_height}, "
                f"{shading} shading, {backend} backend)..."
            )
        scene, camera = create_scene(scene_name, ScenePresetParams(aspect_ratio=aspect_ratio))
        image = render(scene, camera, config)

    if not quiet:
        print(f"  Rendered in {time.time() - start_time:.2f}s")
        print("Saving to file...")

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    try:
        save_image(image, output_file)
    except OSError as e:
        raise RuntimeError(f"Could not save image: {e}") from e

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")

    if show:
        if not quiet:
            print("Opening image in window (press Escape to close)...")
        RenderWindow(image, title="Render").run()

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # CUDA supports f64; Taichi falls back to CPU when it is unavailable
    from src.raymarcher.core.kernels import init_taichi

    init_taichi(ti.cuda)

    try:
        render_sdf_scene(
            scene_name=args.scene,
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            shading=args.shading,
            backend=args.backend,
            max_steps=args.max_steps,
            output_path=args.output,
            test_image=args.test_image,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
