"""Diffuse material with optional emission.

Every surface in the scene carries one immutable :class:`Material`: a
reflectance color and an emitted radiance. The two are independent, so a
surface can be a pure reflector, a pure emitter (the area light) or both.

The bounce weight used by the path tracer is

    weight = color * (2 * cos_theta)

where ``cos_theta`` is the cosine between the sampled bounce direction and the
surface normal. With a uniform hemisphere pdf of 1 / (2 pi) and a Lambertian
BRDF of color / pi this is the usual ``brdf * cos / pdf`` estimator.

Example:
    >>> white = Material(color=(1.0, 1.0, 1.0))
    >>> light = Material(color=(0.0, 0.0, 0.0), emission=(10.0, 10.0, 10.0))
    >>> light.is_emissive
    True
"""

from dataclasses import dataclass

import taichi as ti

from lumen.core.vector import Vec3Tuple, vec3


@dataclass(frozen=True, eq=False)
class Material:
    """Reflectance and emission of a surface.

    Materials compare by identity: two shapes share a material only when they
    hold the same instance, which is how the scene deduplicates them.

    Attributes:
        color: Diffuse reflectance (R, G, B), each component in [0, 1].
        emission: Emitted radiance (R, G, B), each component >= 0.
        name: Optional label used by scene descriptions and logs.
    """

    color: Vec3Tuple
    emission: Vec3Tuple = (0.0, 0.0, 0.0)
    name: str | None = None

    def __post_init__(self) -> None:
        """Validate the reflectance and emission ranges.

        Raises:
            ValueError: If a color component is outside [0, 1] or an emission
                component is negative.
        """
        if len(self.color) != 3 or len(self.emission) != 3:
            raise ValueError("Material color and emission must have 3 components")

        for i, component in enumerate(self.color):
            if component < 0.0 or component > 1.0:
                raise ValueError(
                    f"Color component {i} = {component} is outside [0, 1]. "
                    "This would violate energy conservation."
                )
        for i, component in enumerate(self.emission):
            if component < 0.0:
                raise ValueError(f"Emission component {i} = {component} is negative")

        # Normalize to float tuples so descriptions and uploads see one type
        object.__setattr__(self, "color", tuple(float(c) for c in self.color))
        object.__setattr__(self, "emission", tuple(float(c) for c in self.emission))

    @property
    def is_emissive(self) -> bool:
        """Whether the material emits any radiance."""
        return any(c > 0.0 for c in self.emission)

    def to_dict(self) -> dict[str, list[float]]:
        """Export color and emission as JSON-friendly lists."""
        return {"color": list(self.color), "emission": list(self.emission)}


@ti.func
def diffuse_weight(color: vec3, cos_theta: ti.f32) -> vec3:
    """Bounce weight ``color * (2 * cos_theta)`` of a diffuse reflection."""
    return color * (2.0 * cos_theta)
