#!/usr/bin/env python3
"""Render a built-in sphere scene to a PPM or PNG image.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH         Image width in pixels (default: 512)
    --height HEIGHT       Image height in pixels (default: 512)
    --samples SAMPLES     Number of samples per pixel (default: 32)
    --max-depth DEPTH     Maximum number of bounces (default: 4)
    --seed SEED           Seed of the random streams (default: 0)
    --scene NAME          Scene to render: default or materials
    --nearest-hit         Resolve overlapping spheres by distance
    --output OUTPUT       Output file path, .ppm or .png (default: image.ppm)
    --batch-size SIZE     Samples per progress update (default: 1)
    --quiet               Only log warnings and errors
    --verbose             Log debug messages

Example:
    python -m examples.render_spheres --width 256 --height 256 --samples 16
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti
from tqdm import tqdm

logger = logging.getLogger("render_spheres")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with Monte Carlo path tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=512,
        help="Image width in pixels (default: 512)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=512,
        help="Image height in pixels (default: 512)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=32,
        help="Number of samples per pixel (default: 32)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=4,
        help="Maximum number of bounces (default: 4)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed of the random streams (default: 0)",
    )
    parser.add_argument(
        "--scene",
        choices=("default", "materials"),
        default="default",
        help="Scene to render (default: default)",
    )
    parser.add_argument(
        "--nearest-hit",
        action="store_true",
        help="Return the closest sphere instead of the first one in scene order",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path, .ppm or .png (default: image.ppm)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=1,
        help="Samples per progress update (default: 1)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )
    return parser.parse_args(argv)


def render_spheres(
    width: int = 512,
    height: int = 512,
    num_samples: int = 32,
    max_depth: int = 4,
    seed: int = 0,
    scene_name: str = "default",
    nearest_hit: bool = False,
    output_path: str = "image.ppm",
    batch_size: int = 1,
    quiet: bool = False,
) -> Path:
    """Render a built-in scene and save it to file.

    Returns:
        Path to the saved image file.

    Raises:
        ValueError: If a parameter is invalid.
        OSError: If the image cannot be written.
    """
    # Lazy imports to allow Taichi initialization first
    from src.spheretrace.camera.pinhole import setup_camera
    from src.spheretrace.core.integrator import RenderSettings, configure_render
    from src.spheretrace.core.progressive import ProgressiveRenderer
    from src.spheretrace.scene.presets import SCENES

    if num_samples <= 0:
        raise ValueError(f"samples must be positive, got {num_samples}")

    logger.info("Creating %s scene (%dx%d)", scene_name, width, height)
    scene, camera = SCENES[scene_name]()
    scene.nearest_hit = nearest_hit
    setup_camera(camera)
    configure_render(RenderSettings(max_depth=max_depth, seed=seed))

    renderer = ProgressiveRenderer(width, height)

    logger.info("Rendering %d samples per pixel", num_samples)
    start_time = time.time()

    with tqdm(
        total=renderer.pixel_count * num_samples,
        unit="ray",
        unit_scale=True,
        disable=quiet,
    ) as bar:
        done = 0
        for current, _ in renderer.render_progressive(num_samples, batch_size):
            bar.update((current - done) * renderer.pixel_count)
            done = current

    render_time = time.time() - start_time

    output_file = Path(output_path)
    renderer.save_image(str(output_file))

    logger.info("Saved to: %s", output_file.absolute())
    logger.info("Render time: %.2fs", render_time)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    level = logging.INFO
    if args.quiet:
        level = logging.WARNING
    elif args.verbose:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu, random_seed=args.seed)
        logger.info("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu, random_seed=args.seed)
        logger.info("Using CPU backend")

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            scene_name=args.scene,
            nearest_hit=args.nearest_hit,
            output_path=args.output,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
