#!/usr/bin/env python3
"""Render the demo scene (or a scene file) with Phong shading.

This script builds the checkerboard-and-spheres demo scene, or loads a scene
from a JSON file, renders it row by row and saves the result as a PNG.

Usage:
    python -m examples.render_demo [options]

Options:
    --width WIDTH       Image width in pixels (default: 256)
    --height HEIGHT     Image height in pixels (default: 192)
    --backend BACKEND   "python" or "taichi" (default: python)
    --seed SEED         Seed for the random sphere field (default: 0)
    --spheres COUNT     Number of random spheres (default: 100)
    --scene PATH        Load the scene from a JSON file instead
    --texture PATH      Image wrapped onto the center sphere of the demo scene
    --output OUTPUT     Output file path (default: phong_demo.png)
    --reference PATH    Report the RMSE against a reference image
    --verbose           Log per-pixel diagnostics and timing
    --quiet             Suppress progress output

Example:
    python -m examples.render_demo --width 640 --height 480 --backend taichi
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the Phong demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=256,
        help="Image width in pixels (default: 256)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=192,
        help="Image height in pixels (default: 192)",
    )
    parser.add_argument(
        "--backend",
        choices=("python", "taichi"),
        default="python",
        help="Shading backend (default: python)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the random sphere field (default: 0)",
    )
    parser.add_argument(
        "--spheres",
        type=int,
        default=100,
        help="Number of random spheres (default: 100)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="Load the scene from a JSON file instead of building the demo",
    )
    parser.add_argument(
        "--texture",
        type=str,
        default=None,
        help="Image wrapped onto the center sphere of the demo scene",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="phong_demo.png",
        help="Output file path (default: phong_demo.png)",
    )
    parser.add_argument(
        "--reference",
        type=str,
        default=None,
        help="Report the RMSE against a reference image of the same size",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log per-pixel diagnostics and timing",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_demo(
    width: int = 256,
    height: int = 192,
    backend: str = "python",
    seed: int = 0,
    sphere_count: int = 100,
    scene_path: str | None = None,
    texture_path: str | None = None,
    output_path: str = "phong_demo.png",
    reference_path: str | None = None,
    quiet: bool = False,
) -> Path:
    """Render the demo scene (or a scene file) and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        backend: "python" or "taichi".
        seed: Seed for the random sphere field.
        sphere_count: Number of random spheres in the demo scene.
        scene_path: Optional JSON scene file; overrides the demo scene.
        texture_path: Optional image for the demo's center sphere.
        output_path: Output file path (PNG).
        reference_path: Optional reference image; the RMSE against it is
            printed after saving.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from phong_tracer.core.render import FrameBuffer, RenderDriver, RenderSettings
    from phong_tracer.materials.texture_loader import load_texture
    from phong_tracer.preview.export import frame_rmse, load_png, save_png
    from phong_tracer.scene.config import load_scene
    from phong_tracer.scene.demo import build_demo_scene

    if scene_path is not None:
        if not quiet:
            print(f"Loading scene from {scene_path}...")
        scene = load_scene(scene_path)
    else:
        if not quiet:
            print(f"Creating demo scene (seed={seed}, {sphere_count} spheres)...")
        texture = load_texture(texture_path) if texture_path is not None else None
        scene = build_demo_scene(seed=seed, sphere_count=sphere_count, texture=texture)

    driver = RenderDriver(scene, RenderSettings(width=width, height=height, backend=backend))
    frame = FrameBuffer(width, height)

    if not quiet:
        print(f"Rendering {width}x{height} with the {backend} backend...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            progress_pct = (current / target) * 100 if target > 0 else 0
            print(
                f"\r  Progress: {current}/{target} rows ({progress_pct:.1f}%)",
                end="",
                flush=True,
            )

    report = driver.render(frame, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(frame, output_file)

    total_time = time.time() - start_time
    if not quiet:
        if report.failed_pixels:
            print(f"{report.failed_pixels} pixels fell back to the background color")
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s ({report.backend} backend)")

    if reference_path is not None:
        rmse = frame_rmse(frame, load_png(reference_path))
        print(f"RMSE vs {reference_path}: {rmse:.3f}")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_demo(
            width=args.width,
            height=args.height,
            backend=args.backend,
            seed=args.seed,
            sphere_count=args.spheres,
            scene_path=args.scene,
            texture_path=args.texture,
            output_path=args.output,
            reference_path=args.reference,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
