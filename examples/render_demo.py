#!/usr/bin/env python3
"""Render the built-in demo scene.

This script demonstrates end-to-end rendering with the prism ray tracer:
it creates the demo scene (three spheres over a plane), sets up the camera
and renders in batches of scanlines with progress output.

Usage:
    python -m examples.render_demo [options]

Options:
    --size SIZE         Image width and height in pixels (default: 500)
    --depth DEPTH       Reflection depth (default: 6)
    --output OUTPUT     Output file path (default: demo.ppm)
    --rows-per-batch N  Scanlines per progress update (default: 32)
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_demo --size 256 --output demo.png
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
        "--size",
        type=int,
        default=500,
        help="Image width and height in pixels (default: 500)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=6,
        help="Reflection depth (default: 6)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="demo.ppm",
        help="Output file path (default: demo.ppm)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=32,
        help="Scanlines per progress update (default: 32)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_demo(
    size: int = 500,
    max_depth: int = 6,
    output_path: str = "demo.ppm",
    rows_per_batch: int = 32,
    quiet: bool = False,
    preview: bool = False,
) -> Path:
    """Render the demo scene and save to file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.prism.camera.pinhole import setup_camera
    from src.prism.core.renderer import Renderer
    from src.prism.preview.display import show_preview
    from src.prism.scene.demo import create_demo_scene

    if not quiet:
        print(f"Creating demo scene ({size}x{size})...")

    scene, camera = create_demo_scene()
    setup_camera(camera)

    renderer = Renderer(size)

    if not quiet:
        print(f"Rendering with reflection depth {max_depth}...")

    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            rows_per_sec = done / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {done}/{total} rows "
                f"({100.0 * done / total:.1f}%) - {rows_per_sec:.1f} rows/s",
                end="",
                flush=True,
            )

    renderer.render(max_depth=max_depth, rows_per_batch=rows_per_batch, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    renderer.save_image(output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    if preview:
        show_preview(renderer, title="prism demo scene")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)

    ti.init(arch=ti.cpu)

    try:
        render_demo(
            size=args.size,
            max_depth=args.depth,
            output_path=args.output,
            rows_per_batch=args.rows_per_batch,
            quiet=args.quiet,
            preview=args.preview,
        )
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
