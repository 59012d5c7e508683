"""Tone mapping and display encoding for linear radiance images.

The display pipeline turns the accumulator's linear radiance into pixels:

1. Optional tone curve for HDR content (Reinhard or exposure)
2. Gamma encoding ``pow(max(c, 0), 1 / gamma)``
3. Scaling to [0, 255] and clamping
4. Quantization to 8 bits (with an opaque alpha channel for RGBA output)

Without a tone curve, radiance of 1 and above saturates to 255. Below
saturation the encoding is strictly increasing.

Example:
    >>> import numpy as np
    >>> radiance = np.full((2, 2, 3), 0.5, dtype=np.float32)
    >>> to_rgba8(radiance)[0, 0]
    array([186, 186, 186, 255], dtype=uint8)
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]

# Default display gamma (sRGB approximation)
DEFAULT_GAMMA = 2.2


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Apply Reinhard tone mapping: L / (1 + L).

    Simple global tone mapping operator that compresses HDR values
    into the displayable [0, 1) range.

    Args:
        image: Linear HDR image array of shape (H, W, 3).

    Returns:
        Tone mapped image in [0, 1) range.
    """
    # Ensure non-negative values
    image = np.maximum(image, 0.0)

    result = image / (1.0 + image)

    return result.astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply exposure-based tone mapping: 1 - exp(-c * exposure).

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        exposure: Exposure value (default 1.0). Higher values brighten the image.

    Returns:
        Tone mapped image in [0, 1) range.
    """
    image = np.maximum(image, 0.0)

    result = 1.0 - np.exp(-image * exposure)

    return result.astype(np.float32)


def apply_tone_map(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply the named tone curve, or return the image unchanged for "none".

    Raises:
        ValueError: If the method is unknown.
    """
    if tone_map == "none":
        return image
    if tone_map == "reinhard":
        return tone_map_reinhard(image)
    if tone_map == "exposure":
        return tone_map_exposure(image, exposure)
    raise ValueError(f"Unknown tone mapping method: {tone_map}")


def gamma_encode(
    radiance: npt.NDArray[np.floating],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float32]:
    """Gamma-encode linear radiance to display values in [0, 255].

    Computes ``clamp(pow(max(c, 0), 1 / gamma) * 255, 0, 255)`` per channel,
    without quantizing.

    Args:
        radiance: Linear radiance of any shape.
        gamma: Display gamma (default 2.2).

    Returns:
        Float32 array of the same shape with values in [0, 255].

    Raises:
        ValueError: If gamma is not positive.
    """
    if not gamma > 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    linear = np.maximum(np.asarray(radiance, dtype=np.float64), 0.0)
    encoded = np.power(linear, 1.0 / gamma) * 255.0

    return np.clip(encoded, 0.0, 255.0).astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Process an image for display with tone mapping and gamma correction.

    Args:
        image: Linear HDR image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 2.2).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        Processed image ready for display, in [0, 1] range.
    """
    mapped = apply_tone_map(image, tone_map, exposure)
    return gamma_encode(mapped, gamma) / np.float32(255.0)


def to_rgb8(
    radiance: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear (H, W, 3) image to 8-bit RGB."""
    encoded = gamma_encode(apply_tone_map(radiance, tone_map, exposure), gamma)
    return np.rint(encoded).astype(np.uint8)


def to_rgba8(
    radiance: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear (H, W, 3) image to 8-bit RGBA with opaque alpha.

    Args:
        radiance: Linear radiance image of shape (H, W, 3).
        tone_map: Tone mapping method applied before gamma encoding.
        gamma: Display gamma (default 2.2).
        exposure: Exposure value for exposure tone mapping.

    Returns:
        Array of shape (H, W, 4) with dtype uint8 and alpha 255.

    Raises:
        ValueError: If the image does not have 3 channels.
    """
    if radiance.ndim != 3 or radiance.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {radiance.shape}")

    rgb = to_rgb8(radiance, tone_map=tone_map, gamma=gamma, exposure=exposure)
    alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=2)
