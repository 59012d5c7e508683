"""Image export utilities for rendered images.

This module provides functions for saving rendered images to files
with support for tone mapping and gamma correction, and the PNG frame sink.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from lumen.preview.export import PngSink
    >>>
    >>> renderer.render(100)
    >>> renderer.present(PngSink("output.png"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from lumen.preview.tonemap import DEFAULT_GAMMA, ToneMapMethod, to_rgb8

if TYPE_CHECKING:
    from lumen.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to uint8 for display/export.

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    return to_rgb8(image, tone_map=tone_map, gamma=gamma, exposure=exposure)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
) -> None:
    """Save a NumPy array as a PNG file.

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2).
        exposure: Exposure value for exposure tone mapping (default 1.0).
    """
    image_uint8 = image_to_uint8(image, tone_map=tone_map, gamma=gamma, exposure=exposure)

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def save_png(
    renderer: ProgressiveRenderer,
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float | None = None,
    exposure: float = 1.0,
) -> None:
    """Save a renderer's running mean as a PNG file.

    Args:
        renderer: The ProgressiveRenderer instance to save.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value. Defaults to the renderer's config.
        exposure: Exposure value for exposure tone mapping (default 1.0).
    """
    if gamma is None:
        gamma = renderer.config.gamma
    renderer.present(PngSink(filepath, tone_map=tone_map, gamma=gamma, exposure=exposure))


class PngSink:
    """Frame sink that writes each presented image to a PNG file.

    Every call to :meth:`present` overwrites the file, so the file always
    holds the latest state of the render.

    Attributes:
        path: Output file path.
        last_sample_count: Sample count of the last written image, or None.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        tone_map: ToneMapMethod = "none",
        gamma: float = DEFAULT_GAMMA,
        exposure: float = 1.0,
    ) -> None:
        self.path = Path(path)
        self.tone_map: ToneMapMethod = tone_map
        self.gamma = gamma
        self.exposure = exposure
        self.last_sample_count: int | None = None

    def present(self, image: npt.NDArray[np.float32], sample_count: int) -> None:
        """Write the image to :attr:`path`."""
        save_png_from_array(
            image,
            self.path,
            tone_map=self.tone_map,
            gamma=self.gamma,
            exposure=self.exposure,
        )
        self.last_sample_count = sample_count
        logger.info("Saved %s (%d SPP)", self.path, sample_count)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
