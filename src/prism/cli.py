"""Command-line driver: render a scene description to an image.

Usage:
    prism-render SCENE [options]

Arguments:
    SCENE               Scene description file, or "-" for standard input

Options:
    -o, --output PATH   Output image (default: out.ppm); "-" writes PPM to
                        standard output; a .png extension writes PNG
    --size SIZE         Image width and height in pixels (default: 500)
    --depth DEPTH       Reflection depth (default: 6)
    --rows-per-batch N  Scanlines per progress update (default: 32)
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    prism-render demo.txt -o demo.ppm --size 256
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import taichi as ti

logger = logging.getLogger(__name__)

# Duplicated from core.integrator so argument parsing does not import
# modules that declare Taichi fields before ti.init()
DEFAULT_IMAGE_SIZE = 500
DEFAULT_DEPTH = 6
DEFAULT_ROWS_PER_BATCH = 32


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="prism-render",
        description="Render a scene description with the prism ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "scene",
        help='Scene description file, or "-" to read standard input',
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default="out.ppm",
        help='Output image path; "-" writes PPM to standard output (default: out.ppm)',
    )
    parser.add_argument(
        "--size",
        type=int,
        default=DEFAULT_IMAGE_SIZE,
        help=f"Image width and height in pixels (default: {DEFAULT_IMAGE_SIZE})",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=DEFAULT_DEPTH,
        help=f"Reflection depth (default: {DEFAULT_DEPTH})",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=DEFAULT_ROWS_PER_BATCH,
        help=f"Scanlines per progress update (default: {DEFAULT_ROWS_PER_BATCH})",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the rendered image in a Matplotlib window",
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
    return parser


def configure_logging(quiet: bool = False, verbose: bool = False) -> None:
    """Configure root logging for command-line use."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def init_taichi(arch: str = "cpu") -> None:
    """Initialize Taichi on the requested backend, falling back to the CPU."""
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            return
        except RuntimeError as e:
            logger.warning("GPU backend unavailable (%s), using CPU", e)
    ti.init(arch=ti.cpu)


def render_scene(
    scene_path: str,
    output_path: str,
    size: int = DEFAULT_IMAGE_SIZE,
    max_depth: int = DEFAULT_DEPTH,
    rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
    quiet: bool = False,
    preview: bool = False,
) -> None:
    """Read a scene, render it and write the image.

    Taichi must already be initialized.

    Raises:
        OSError: If a file cannot be read or written.
        SceneParseError: If the scene description has errors.
        InvalidCameraError: If the camera is invalid.
        ValueError: If size or depth is out of range.
    """
    # Lazy imports to allow Taichi initialization first
    from src.prism.camera.pinhole import setup_camera
    from src.prism.core.renderer import Renderer
    from src.prism.preview.export import write_ppm
    from src.prism.scene.reader import load_scene_file, read_scene

    if scene_path == "-":
        description = read_scene(sys.stdin, "<stdin>")
    else:
        description = load_scene_file(scene_path)

    description.build_scene()
    setup_camera(description.camera)

    renderer = Renderer(size)
    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            print(
                f"\r  Progress: {done}/{total} rows ({100.0 * done / total:.1f}%) "
                f"- {elapsed:.1f}s",
                end="",
                file=sys.stderr,
                flush=True,
            )

    renderer.render(max_depth=max_depth, rows_per_batch=rows_per_batch, callback=progress_callback)

    if not quiet:
        print(file=sys.stderr)  # Newline after progress

    if output_path == "-":
        write_ppm(renderer.get_image_numpy(), sys.stdout)
        sys.stdout.flush()
    else:
        renderer.save_image(output_path)

    if preview:
        from src.prism.preview.display import show_preview

        show_preview(renderer)


def main(argv: list[str] | None = None) -> int:
    """Main entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(quiet=args.quiet, verbose=args.verbose)

    try:
        init_taichi(args.arch)
        render_scene(
            scene_path=args.scene,
            output_path=args.output,
            size=args.size,
            max_depth=args.depth,
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
