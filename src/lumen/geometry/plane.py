"""Single-sided infinite plane primitive.

A plane is defined by a point ``center`` on it and a unit ``normal``. It is
visible only from the side the normal points toward: rays travelling along the
normal or parallel to the surface pass through. This is what lets the camera
of the Cornell box sit outside the front wall and still see in.

Ray-plane intersection:
1. Reject if ``dot(direction, normal) >= 0`` (leaving or parallel).
2. ``t = -dot(origin - center, normal) / dot(direction, normal)``.
3. Reject if ``t <= 0`` (behind the origin).

Example:
    >>> from lumen.materials import Material
    >>> floor = Plane(center=(0.0, 0.0, 0.0), normal=(0.0, 1.0, 0.0),
    ...               material=Material(color=(1.0, 1.0, 1.0)))
"""

import math
from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from lumen.core.ray import Ray
from lumen.core.vector import Vec3Tuple, vec3
from lumen.materials.diffuse import Material

from .sphere import HitRecord, ShapeKind

# Allowed deviation of the normal's length from 1
NORMAL_LENGTH_TOLERANCE = 1e-6


@dataclass(frozen=True)
class Plane:
    """A single-sided plane.

    Attributes:
        center: Any point on the plane (x, y, z).
        normal: Unit normal; the plane is visible from this side only.
        material: The material shared with any other shape that uses it.
    """

    center: Vec3Tuple
    normal: Vec3Tuple
    material: Material

    kind: ClassVar[ShapeKind] = ShapeKind.PLANE

    def __post_init__(self) -> None:
        """Validate that the normal is unit length.

        Raises:
            ValueError: If the normal does not have length 1.
        """
        norm = math.sqrt(sum(c * c for c in self.normal))
        if abs(norm - 1.0) > NORMAL_LENGTH_TOLERANCE:
            raise ValueError(f"Plane normal must be unit length, got length {norm:.6f}")
        object.__setattr__(self, "center", tuple(float(c) for c in self.center))
        object.__setattr__(self, "normal", tuple(float(c) for c in self.normal))


@ti.func
def hit_plane(ray: Ray, center: vec3, normal: vec3) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray: The ray to test.
        center: A point on the plane.
        normal: The unit normal of the plane.

    Returns:
        A HitRecord whose normal is the plane normal, unchanged.
    """
    did_hit = 0
    hit_t = 0.0

    dn = tm.dot(ray.direction, normal)
    if dn < 0.0:
        t = -tm.dot(ray.origin - center, normal) / dn
        if t > 0.0:
            did_hit = 1
            hit_t = t

    return HitRecord(hit=did_hit, t=hit_t, normal=normal)
