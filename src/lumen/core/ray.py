"""Ray data structure and the hemisphere reflection sampler.

Rays are created per camera sample or per bounce and consumed immediately.
The reflection sampler draws directions in a fixed global frame (``y`` is the
polar axis) and mirrors them into the hemisphere of the hit normal.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # inside a kernel: (0, 0, 5)
"""

import taichi as ti
import taichi.math as tm

from lumen.core.vector import vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Intersection routines
            assume it is unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point ``origin + t * direction``."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


@ti.func
def random_reflection_from_normal(normal: vec3, u1: ti.f32, u2: ti.f32) -> vec3:
    """Sample a bounce direction on the side of the surface the normal faces.

    The candidate is built in the global frame with ``y`` as the polar axis:

        theta = acos(u1), phi = 2 * pi * u2
        candidate = (sin(theta) cos(phi), cos(theta), sin(theta) sin(phi))

    and negated when it points away from ``normal``. The frame is not rotated
    onto the normal, so only normals close to +/-y get a true hemisphere
    sample; other normals get the mirrored global sample, a known
    approximation of a uniform local-frame hemisphere sampler.

    Args:
        normal: Unit surface normal at the hit point.
        u1: Uniform random number in [0, 1).
        u2: Uniform random number in [0, 1).

    Returns:
        A unit direction with ``dot(direction, normal) >= 0``.
    """
    theta = ti.acos(u1)
    phi = 2.0 * tm.pi * u2
    sin_theta = ti.sin(theta)
    candidate = vec3(sin_theta * ti.cos(phi), ti.cos(theta), sin_theta * ti.sin(phi))

    result = candidate
    if tm.dot(normal, candidate) < 0.0:
        result = -candidate
    return result
