"""Vector3 algebra for the path tracer.

Vectors are Taichi ``vec3`` values: plain value types that are created per
computation and never mutated in place by these helpers. Every function here is
a ``@ti.func`` and may only be called from inside Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.core.vector import vec3, normalize
    >>> @ti.kernel
    ... def unit() -> vec3:
    ...     return normalize(vec3(3.0, 0.0, 4.0))
    >>> unit()  # [0.6, 0.0, 0.8]
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Host-side triple used by scene and camera descriptions
Vec3Tuple = tuple[float, float, float]


@ti.func
def add(a: vec3, b: vec3) -> vec3:
    return a + b


@ti.func
def subtract(a: vec3, b: vec3) -> vec3:
    return a - b


@ti.func
def multiply(a: vec3, b: vec3) -> vec3:
    """Componentwise product (not a dot or cross product)."""
    return a * b


@ti.func
def divide(a: vec3, b: vec3) -> vec3:
    """Componentwise quotient."""
    return a / b


@ti.func
def scale(v: vec3, s: ti.f32) -> vec3:
    return v * s


@ti.func
def power(v: vec3, p: ti.f32) -> vec3:
    """Raise each component to the power ``p``."""
    return vec3(v.x**p, v.y**p, v.z**p)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean length; avoids the square root of ``length``."""
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    A zero-length input is a precondition violation. With ``ti.init(debug=True)``
    the assertion below reports it; otherwise the result is non-finite.

    Args:
        v: A non-zero vector.

    Returns:
        The unit vector pointing along ``v``.
    """
    n = length(v)
    assert n > 0.0, "normalize() called with a zero-length vector"
    return v / n
