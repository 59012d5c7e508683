"""Preview module for output and visualization.

This module turns the renderer's linear running mean into pixels:

Components:
    tonemap: Tone curves, gamma encoding and 8-bit conversion
    sink: The FrameSink protocol
    export: PNG export via Pillow
    display: Matplotlib-based preview
    interactive: Taichi GGUI-based interactive preview window

Every sink receives ``(image, sample_count)`` through ``present``; the
renderer hands it over with ``renderer.present(sink)``.

Example:
    >>> from lumen.preview import PngSink, show_preview
    >>>
    >>> renderer.render(100)
    >>> show_preview(renderer, tone_map="reinhard")
    >>> renderer.present(PngSink("output.png"))
"""

from lumen.preview.display import MatplotlibSink, show_preview
from lumen.preview.export import (
    PngSink,
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)
from lumen.preview.interactive import InteractivePreview
from lumen.preview.sink import FrameSink
from lumen.preview.tonemap import (
    ToneMapMethod,
    apply_tone_map,
    gamma_encode,
    process_image_for_display,
    to_rgb8,
    to_rgba8,
    tone_map_exposure,
    tone_map_reinhard,
)

__all__ = [
    "FrameSink",
    # Sinks
    "PngSink",
    "MatplotlibSink",
    "InteractivePreview",
    # Display functions
    "show_preview",
    # Tone mapping
    "ToneMapMethod",
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_tone_map",
    "gamma_encode",
    "process_image_for_display",
    "to_rgb8",
    "to_rgba8",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "compute_rmse",
]
