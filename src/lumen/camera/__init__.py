"""Camera module for primary ray generation.

Components:
    film: Axis-scaled film camera with k x k multisampling

Camera responsibilities:
    - Transform film coordinates in [-0.5, 0.5] to world-space rays
    - Lay out the regular sub-pixel grid used for supersampling
    - Optionally jitter sub-samples with uniforms from the frame sampler

Ray generation uses film coordinates:
    x in [-0.5, 0.5]: left to right across the image
    y in [-0.5, 0.5]: bottom to top across the image
"""

from .film import Camera, CameraConfig

__all__ = [
    "Camera",
    "CameraConfig",
]
