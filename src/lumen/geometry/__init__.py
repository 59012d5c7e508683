"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, the shared HitRecord and the ShapeKind tag
    plane: Single-sided infinite plane primitive

Shapes form a closed union of exactly two variants. On the host they are
frozen dataclasses; on the device the scene stores them in tagged
Structure-of-Arrays fields and dispatches on :class:`ShapeKind`.

Ray-object intersection follows the pattern:
    record = hit_shape(ray, shape_data)  # record.hit, record.t, record.normal
"""

from typing import Union

from .plane import Plane, hit_plane
from .sphere import HitRecord, ShapeKind, Sphere, hit_sphere

# The closed shape union; no third variant is anticipated
Shape = Union[Plane, Sphere]

__all__ = [
    "Shape",
    "ShapeKind",
    "HitRecord",
    "Plane",
    "hit_plane",
    "Sphere",
    "hit_sphere",
]
