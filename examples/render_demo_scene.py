#!/usr/bin/env python3
"""Render the demo scene.

This script demonstrates end-to-end rendering of the tracer's demo scene: three
spheres (one textured), a textured floor, a background wall, two directional
lights and a spherical light. It builds the scene, renders it band by band and
saves an RGBA PNG.

Usage:
    python -m examples.render_demo_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 800)
    --height HEIGHT     Image height in pixels (default: 600)
    --depth DEPTH       Maximum recursion depth (default: 5)
    --output OUTPUT     Output file path (default: timestamped name)
    --glass             Use the glass/mirror variant of the scene
    --schlick           Use Schlick's approximation instead of Fresnel
    --rows ROWS         Rows per progress update (default: 50)
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    python -m examples.render_demo_scene --width 400 --height 300 --glass
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
        description="Render the demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=800,
        help="Image width in pixels (default: 800)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=600,
        help="Image height in pixels (default: 600)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=5,
        help="Maximum recursion depth (default: 5)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file path (default: render=<date>=<time>=demo.png)",
    )
    parser.add_argument(
        "--glass",
        action="store_true",
        help="Use the glass/mirror variant of the scene",
    )
    parser.add_argument(
        "--schlick",
        action="store_true",
        help="Use Schlick's approximation at refractive boundaries",
    )
    parser.add_argument(
        "--rows",
        type=int,
        default=50,
        help="Rows per progress update (default: 50)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args()


def render_demo_scene(
    width: int = 800,
    height: int = 600,
    max_recursion_depth: int = 5,
    output_path: str | None = None,
    glass: bool = False,
    schlick: bool = False,
    rows_per_batch: int = 50,
    quiet: bool = False,
) -> Path:
    """Render the demo scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        max_recursion_depth: Maximum recursion depth.
        output_path: Output file path (PNG). None picks a timestamped name.
        glass: If True, render the glass/mirror variant.
        schlick: If True, use Schlick's approximation.
        rows_per_batch: Number of rows to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.whitted.core.ray import ReflectanceModel
    from src.whitted.core.renderer import Renderer
    from src.whitted.preview.export import save_png, timestamped_filename
    from src.whitted.scene.demo import DemoSceneParams, create_demo_scene, glass_demo_params

    model = ReflectanceModel.SCHLICK if schlick else ReflectanceModel.FRESNEL
    overrides = {
        "width": width,
        "height": height,
        "max_recursion_depth": max_recursion_depth,
        "reflectance_model": model,
    }
    params = glass_demo_params(**overrides) if glass else DemoSceneParams(**overrides)

    if not quiet:
        print(f"Creating demo scene ({width}x{height}, depth {max_recursion_depth})...")

    create_demo_scene(params)
    renderer = Renderer(width, height)

    if not quiet:
        print("Rendering...")

    start_time = time.time()

    def progress_callback(rows_done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (rows_done / total) * 100 if total > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total} rows "
                f"({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    renderer.render(rows_per_batch=rows_per_batch, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    label = "demo-glass" if glass else "demo"
    output_file = save_png(renderer, output_path or timestamped_filename("render", label))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Shading relies on double precision for the 1e-6 self-intersection bias
    if args.arch == "gpu":
        try:
            ti.init(arch=ti.gpu, default_fp=ti.f64)
        except Exception:
            ti.init(arch=ti.cpu, default_fp=ti.f64)
    else:
        ti.init(arch=ti.cpu, default_fp=ti.f64)

    try:
        render_demo_scene(
            width=args.width,
            height=args.height,
            max_recursion_depth=args.depth,
            output_path=args.output,
            glass=args.glass,
            schlick=args.schlick,
            rows_per_batch=args.rows,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
