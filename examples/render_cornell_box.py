#!/usr/bin/env python3
"""Render the Cornell box scene.

This script renders the reference Cornell box (or a scene loaded from a JSON
description) with progressive refinement and saves the running mean as a PNG.

Usage:
    python -m examples.render_cornell_box [options]

Options:
    --width WIDTH         Image width in pixels (default: 320)
    --height HEIGHT       Image height in pixels (default: 240)
    --samples SAMPLES     Number of frames to accumulate (default: 100)
    --batch-size SIZE     Frames per progress update (default: 10)
    --multisample K       Rays per pixel along each axis (default: 1)
    --jitter              Jitter sub-samples inside their grid cells
    --seed SEED           Random seed for a reproducible render
    --scene PATH          Scene description (JSON) to render instead
    --output OUTPUT       Output file path (default: cornell_box.png)
    --cpu                 Force the CPU backend
    --quiet               Suppress progress output
    --verbose             Enable debug logging

Example:
    python -m examples.render_cornell_box --width 160 --height 120 --samples 50 --seed 1
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_cornell_box")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the Cornell box scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=320, help="Image width in pixels (default: 320)")
    parser.add_argument("--height", type=int, default=240, help="Image height in pixels (default: 240)")
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of frames to accumulate (default: 100)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Frames per progress update (default: 10)",
    )
    parser.add_argument(
        "--multisample",
        type=int,
        default=1,
        help="Rays per pixel along each axis (default: 1)",
    )
    parser.add_argument(
        "--jitter",
        action="store_true",
        help="Jitter sub-samples inside their grid cells",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: random)")
    parser.add_argument(
        "--scene",
        type=Path,
        default=None,
        help="Scene description (JSON); the Cornell box camera is used",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="cornell_box.png",
        help="Output file path (default: cornell_box.png)",
    )
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def render_cornell_box(
    width: int = 320,
    height: int = 240,
    num_samples: int = 100,
    output_path: str = "cornell_box.png",
    batch_size: int = 10,
    multisample: int = 1,
    jitter: bool = False,
    seed: int | None = None,
    scene_path: Path | None = None,
    quiet: bool = False,
) -> Path:
    """Render the Cornell box scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Number of frames to accumulate.
        output_path: Output file path (PNG).
        batch_size: Number of frames to render between progress updates.
        multisample: Rays per pixel along each axis.
        jitter: Whether to jitter sub-samples.
        seed: Random seed, or None for a non-reproducible render.
        scene_path: Optional scene description to render instead of the box.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from lumen.core.progressive import ProgressiveRenderer, RenderConfig
    from lumen.preview.export import PngSink
    from lumen.scene import Scene, create_cornell_box_scene, load_scene

    shapes, camera_config = create_cornell_box_scene(multisample=multisample, jitter=jitter)
    if scene_path is not None:
        shapes = load_scene(scene_path)
        if not quiet:
            print(f"Loaded {len(shapes)} shapes from {scene_path}")

    if not quiet:
        print(f"Creating scene ({width}x{height}, {multisample * multisample} rays per pixel)...")

    config = RenderConfig(width=width, height=height, seed=seed, batch_size=batch_size)
    renderer = ProgressiveRenderer(Scene(shapes), camera_config, config)

    if not quiet:
        print(f"Rendering {num_samples} samples per pixel...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(num_samples=num_samples, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    renderer.present(PngSink(output_file, gamma=config.gamma))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cpu:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")
    else:
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
        render_cornell_box(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            output_path=args.output,
            batch_size=args.batch_size,
            multisample=args.multisample,
            jitter=args.jitter,
            seed=args.seed,
            scene_path=args.scene,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError) as e:
        logger.debug("Render failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
