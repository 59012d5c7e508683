"""Sphere primitive and the shared hit record.

A sphere is described on the host by the frozen :class:`Sphere` dataclass and
tested on the device by :func:`hit_sphere`. The intersection solves

    |origin + t * direction - center|^2 = radius^2

for a unit direction, which reduces to ``t^2 + 2 b t + c = 0`` with

    v = origin - center,  b = dot(v, direction),  c = |v|^2 - radius^2

and discriminant ``d = b^2 - c``. The nearer root ``-b - sqrt(d)`` is taken
when it lies in front of the origin (origin outside the sphere), otherwise the
farther root ``-b + sqrt(d)`` (origin inside, exit point).

Example:
    >>> from lumen.materials import Material
    >>> white = Material(color=(1.0, 1.0, 1.0))
    >>> ball = Sphere(center=(0.0, 1.0, 0.0), radius=1.0, material=white)
    >>> ball.kind
    <ShapeKind.SPHERE: 1>
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from lumen.core.ray import Ray, ray_at
from lumen.core.vector import Vec3Tuple, normalize, vec3
from lumen.materials.diffuse import Material


class ShapeKind(IntEnum):
    """Tag of the closed shape union, as stored in the scene's kind field."""

    PLANE = 0
    SPHERE = 1


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: Distance along the ray to the intersection (> 0). Only valid if hit == 1.
        normal: Unit surface normal at the intersection. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    normal: vec3


@dataclass(frozen=True)
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (x, y, z).
        radius: The radius of the sphere (positive).
        material: The material shared with any other shape that uses it.
    """

    center: Vec3Tuple
    radius: float
    material: Material

    kind: ClassVar[ShapeKind] = ShapeKind.SPHERE

    def __post_init__(self) -> None:
        """Validate the radius.

        Raises:
            ValueError: If the radius is not positive.
        """
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        object.__setattr__(self, "center", tuple(float(c) for c in self.center))
        object.__setattr__(self, "radius", float(self.radius))


@ti.func
def hit_sphere(ray: Ray, center: vec3, radius: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray: The ray to test. Its direction must be unit length.
        center: The center of the sphere.
        radius: The radius of the sphere.

    Returns:
        A HitRecord with the smallest positive root. The normal always points
        outward from the center, also when the exit point is returned.
    """
    v = ray.origin - center
    b = tm.dot(v, ray.direction)
    c = tm.dot(v, v) - radius * radius
    d = b * b - c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_normal = vec3(0.0, 0.0, 0.0)

    if d >= 0.0:
        sqrt_d = ti.sqrt(d)
        t1 = -b + sqrt_d
        t2 = -b - sqrt_d

        if t2 > 0.0:
            did_hit = 1
            hit_t = t2
        elif t1 > 0.0:
            did_hit = 1
            hit_t = t1

        if did_hit == 1:
            hit_normal = normalize(ray_at(ray, hit_t) - center)

    return HitRecord(hit=did_hit, t=hit_t, normal=hit_normal)
