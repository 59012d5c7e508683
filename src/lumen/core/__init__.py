"""Core rendering module.

This module contains the fundamental building blocks of the path tracer:

Components:
    vector: vec3 value type and vector algebra helpers
    ray: Ray data structure and the hemisphere reflection sampler
    sampler: Injectable per-frame random numbers
    integrator: Bounce-capped path tracing and the frame kernel
    accumulator: Running per-pixel mean of frames
    progressive: Host-facing progressive rendering loop

All compute-intensive operations use Taichi kernels.
"""

from .ray import Ray, make_ray, random_reflection_from_normal, ray_at
from .sampler import Sampler
from .vector import (
    Vec3Tuple,
    add,
    cross,
    divide,
    dot,
    length,
    length_squared,
    multiply,
    normalize,
    power,
    scale,
    subtract,
    vec3,
)

# Note: integrator, accumulator and progressive are NOT imported here to avoid
# circular imports with the scene and camera packages. Import them directly:
#   from lumen.core.progressive import ProgressiveRenderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "random_reflection_from_normal",
    "Sampler",
    "vec3",
    "Vec3Tuple",
    "add",
    "subtract",
    "multiply",
    "divide",
    "scale",
    "power",
    "dot",
    "cross",
    "length",
    "length_squared",
    "normalize",
]
