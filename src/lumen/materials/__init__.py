"""Materials module.

Components:
    diffuse: Immutable reflectance + emission material and the diffuse bounce
        weight used by the path integrator

A material is shared by reference between all shapes that use it; the scene
uploads each distinct instance once and addresses it by material id on the
device.
"""

from .diffuse import Material, diffuse_weight

__all__ = [
    "Material",
    "diffuse_weight",
]
