#!/usr/bin/env python3
"""Render the four-sphere material scene.

This script renders the demo scene (a diffuse sphere between a polished and a
rough metal sphere, on a large diffuse ground sphere) and saves it either as a
scene-referred OpenEXR image or as a tone mapped PNG.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH       Image width in pixels (default: PATHTRACER_WIDTH or 256)
    --height HEIGHT     Image height in pixels (default: PATHTRACER_HEIGHT or 256)
    --samples SAMPLES   Samples per pixel (default: PATHTRACER_SAMPLES or 32)
    --depth DEPTH       Maximum bounces per path (default: PATHTRACER_MAX_DEPTH or 5)
    --seed SEED         Random seed (default: PATHTRACER_SEED or 0)
    --output OUTPUT     Output file, .exr or .png (default: renders/sample_file.exr)
    --show              Show the result in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --width 400 --height 225 --samples 64
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    from src.pathtracer.config import OUTPUT_DIR, RenderSettings

    defaults = RenderSettings.from_env()

    parser = argparse.ArgumentParser(
        description="Render the four-sphere material scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.width,
        help=f"Image width in pixels (default: {defaults.width})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=defaults.height,
        help=f"Image height in pixels (default: {defaults.height})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults.samples_per_pixel,
        help=f"Number of samples per pixel (default: {defaults.samples_per_pixel})",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=defaults.max_depth,
        help=f"Maximum bounces per path (default: {defaults.max_depth})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.seed,
        help=f"Random seed (default: {defaults.seed})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=str(OUTPUT_DIR / "sample_file.exr"),
        help="Output file path, .exr or .png (default: renders/sample_file.exr)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_spheres(
    width: int,
    height: int,
    samples: int,
    depth: int,
    seed: int,
    output_path: str,
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the material scene and save it to file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.config import ExportMetadata, RenderSettings
    from src.pathtracer.core.integrator import render_with_settings
    from src.pathtracer.preview.display import convert_to_display, show_preview
    from src.pathtracer.preview.export import save_exr, save_png
    from src.pathtracer.scene.demo import create_material_scene

    settings = RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=samples,
        max_depth=depth,
        seed=seed,
    )
    settings.validate()

    if not quiet:
        print(f"Creating material scene ({width}x{height})...")
    scene, camera = create_material_scene(aspect_ratio=settings.aspect_ratio)

    if not quiet:
        print(f"Rendering {samples} samples per pixel, max depth {depth}...")
    start_time = time.time()
    linear = render_with_settings(settings, scene, camera)

    output_file = Path(output_path)
    display = None
    if output_file.suffix.lower() == ".png":
        display = convert_to_display(linear)
        save_png(display, width, height, output_file)
    else:
        metadata = ExportMetadata(
            comments=f"{samples} spp, max depth {depth}, seed {seed}",
        )
        save_exr(linear, width, height, output_file, metadata)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if show:
        if display is None:
            display = convert_to_display(linear)
        show_preview(display, width, height)

    return output_file


def main() -> int:
    """Main entry point."""
    from src.pathtracer.config import InvalidRenderConfigError
    from src.pathtracer.logging_config import setup_logging

    try:
        args = parse_args()
    except InvalidRenderConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    setup_logging("WARNING" if args.quiet else None)

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except RuntimeError:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    from src.pathtracer.preview.export import ImageExportError

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            samples=args.samples,
            depth=args.depth,
            seed=args.seed,
            output_path=args.output,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except (InvalidRenderConfigError, ImageExportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
