#!/usr/bin/env python3
"""Interactive Cornell box renderer with real-time parameter controls.

This script opens a Taichi GGUI window that renders the Cornell box
continuously, one frame per window frame, and shows the running mean.

Usage:
    python -m examples.interactive_cornell_box [--width W] [--height H] [--multisample K]

Controls:
    - Light: Emitted radiance of the light sphere (0-50)
    - Left/Right R/G/B: Side wall colors
    - Export PNG: Save current render with timestamp

Changing a control rebuilds the scene and restarts accumulation.
"""

from __future__ import annotations

import argparse
import logging
import platform
import sys

import taichi as ti


def initialize_taichi(force_cpu: bool = False) -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if not force_cpu:
        if platform.system() == "Darwin":
            try:
                ti.init(arch=ti.metal)
                return "Metal (GPU)"
            except Exception:
                pass

        try:
            ti.init(arch=ti.gpu)
            return "GPU"
        except Exception:
            pass

    ti.init(arch=ti.cpu)
    return "CPU"


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the interactive Cornell box renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(description="Interactive Cornell box renderer.")
    parser.add_argument("--width", type=int, default=480, help="Window width (default: 480)")
    parser.add_argument("--height", type=int, default=320, help="Window height (default: 320)")
    parser.add_argument("--multisample", type=int, default=1, help="Rays per pixel per axis")
    parser.add_argument("--jitter", action="store_true", help="Jitter sub-samples")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize Taichi first (before importing modules that use ti.kernel)
    backend = initialize_taichi(args.cpu)
    print(f"Taichi backend: {backend}")

    from lumen.core.progressive import RenderConfig
    from lumen.preview.interactive import InteractivePreview
    from lumen.scene import CornellBoxParams

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    print(f"Creating interactive preview window ({args.width}x{args.height})...")
    preview = InteractivePreview(args.width, args.height)
    preview.set_params(CornellBoxParams())

    print("Starting interactive rendering...")
    print("  - Adjust sliders to modify scene parameters")
    print("  - Click 'Export PNG' to save current render")
    print("  - Close window to exit")
    print()

    config = RenderConfig(width=args.width, height=args.height, seed=args.seed)
    try:
        preview.run_reactive(config, multisample=args.multisample, jitter=args.jitter)
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print(f"Preview window closed after {preview.sample_count} samples.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
