"""Scene container and nearest-hit query.

A :class:`Scene` owns an ordered list of shapes. On construction it
uploads them into Taichi fields using a Structure-of-Arrays layout tagged by
:class:`~lumen.geometry.ShapeKind`, and uploads every distinct material once.
The nearest-hit query tests every shape in order and keeps the closest hit
with positive distance. :meth:`Scene.reload` swaps in new shape values of the
same counts without reallocating fields or recompiling kernels.

The scene is an explicit value passed to the integrator; there is no
process-wide scene state.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.geometry import Plane, Sphere
    >>> from lumen.materials import Material
    >>> white = Material(color=(1.0, 1.0, 1.0))
    >>> scene = Scene([
    ...     Plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), white),
    ...     Sphere((0.0, 1.0, 0.0), 1.0, white),
    ... ])
    >>> scene.query((0.0, 5.0, 0.0), (0.0, -1.0, 0.0)).distance  # 3.0
"""

import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np
import taichi as ti

from lumen.core.ray import Ray
from lumen.core.vector import Vec3Tuple, vec3
from lumen.geometry import HitRecord, Plane, Shape, ShapeKind, Sphere, hit_plane, hit_sphere
from lumen.materials import Material

logger = logging.getLogger(__name__)


def _checked_shapes(shapes: Sequence[Shape]) -> tuple[Shape, ...]:
    for shape in shapes:
        if not isinstance(shape, (Plane, Sphere)):
            raise TypeError(f"Unsupported shape type: {type(shape).__name__}")
    return tuple(shapes)


def _index_materials(shapes: Sequence[Shape]) -> tuple[tuple[Material, ...], dict[int, int]]:
    """Deduplicate materials by identity, preserving first-use order."""
    materials: list[Material] = []
    material_index: dict[int, int] = {}
    for shape in shapes:
        key = id(shape.material)
        if key not in material_index:
            material_index[key] = len(materials)
            materials.append(shape.material)
    return tuple(materials), material_index


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if any shape was hit, 0 on a miss.
        t: Distance to the nearest hit. Only valid if hit == 1.
        normal: Unit surface normal at the nearest hit. Only valid if hit == 1.
        material_id: Index of the hit shape's material in the scene's material
            table. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    normal: vec3
    material_id: ti.i32


@dataclass(frozen=True)
class Intersection:
    """Host-side result of :meth:`Scene.query`.

    Attributes:
        is_hit: Whether the ray hit anything.
        distance: Distance along the (normalized) ray. Only meaningful on a hit.
        normal: Unit normal at the hit point. Only meaningful on a hit.
        material: The hit shape's material, or None on a miss.
    """

    is_hit: bool
    distance: float = 0.0
    normal: Vec3Tuple = (0.0, 0.0, 0.0)
    material: Material | None = None


@ti.data_oriented
class Scene:
    """An ordered collection of shapes uploaded to the device.

    Attributes:
        num_shapes: Number of shapes in the scene.
        num_materials: Number of distinct materials.
    """

    def __init__(self, shapes: Sequence[Shape] = ()) -> None:
        """Build the scene and upload it to Taichi fields.

        Args:
            shapes: The shapes, in order. Order only matters for exact ties.
                An empty scene is allowed; every ray misses it.

        Raises:
            TypeError: If an element is not a Plane or a Sphere.
        """
        self._shapes: tuple[Shape, ...] = _checked_shapes(shapes)
        self._materials, self._material_index = _index_materials(self._shapes)

        self.num_shapes = len(self._shapes)
        self.num_materials = len(self._materials)

        # Taichi fields cannot be empty, so keep at least one slot
        shape_capacity = max(self.num_shapes, 1)
        material_capacity = max(self.num_materials, 1)

        # Shape storage: Structure of Arrays tagged by ShapeKind
        self.kinds = ti.field(dtype=ti.i32, shape=shape_capacity)
        self.centers = ti.Vector.field(3, dtype=ti.f32, shape=shape_capacity)
        self.normals = ti.Vector.field(3, dtype=ti.f32, shape=shape_capacity)
        self.radii = ti.field(dtype=ti.f32, shape=shape_capacity)
        self.material_ids = ti.field(dtype=ti.i32, shape=shape_capacity)

        # Material storage
        self.colors = ti.Vector.field(3, dtype=ti.f32, shape=material_capacity)
        self.emissions = ti.Vector.field(3, dtype=ti.f32, shape=material_capacity)

        # Host query scratch fields
        self._query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_hit = ti.field(dtype=ti.i32, shape=())
        self._query_t = ti.field(dtype=ti.f32, shape=())
        self._query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_material = ti.field(dtype=ti.i32, shape=())

        self._upload(shape_capacity, material_capacity)

    def reload(self, shapes: Sequence[Shape]) -> None:
        """Replace the shape and material values in place.

        The device fields and compiled kernels are reused, so the new shapes
        must keep the scene's shape count and distinct material count. Any
        renderer drawing from this scene should be reset afterwards.

        Args:
            shapes: The new shapes, in order.

        Raises:
            TypeError: If an element is not a Plane or a Sphere.
            ValueError: If the shape or material count differs from the
                current scene.
        """
        new_shapes = _checked_shapes(shapes)
        materials, material_index = _index_materials(new_shapes)
        if len(new_shapes) != self.num_shapes:
            raise ValueError(
                f"Cannot reload {len(new_shapes)} shapes into a scene of {self.num_shapes}"
            )
        if len(materials) != self.num_materials:
            raise ValueError(
                f"Cannot reload {len(materials)} materials into a scene of {self.num_materials}"
            )

        self._shapes = new_shapes
        self._materials = materials
        self._material_index = material_index
        self._upload(max(self.num_shapes, 1), max(self.num_materials, 1))

    def _upload(self, shape_capacity: int, material_capacity: int) -> None:
        """Copy the host shapes and materials into the Taichi fields."""
        kinds = np.zeros(shape_capacity, dtype=np.int32)
        centers = np.zeros((shape_capacity, 3), dtype=np.float32)
        normals = np.zeros((shape_capacity, 3), dtype=np.float32)
        radii = np.zeros(shape_capacity, dtype=np.float32)
        material_ids = np.zeros(shape_capacity, dtype=np.int32)

        for k, shape in enumerate(self._shapes):
            kinds[k] = int(shape.kind)
            centers[k] = shape.center
            material_ids[k] = self._material_index[id(shape.material)]
            if isinstance(shape, Plane):
                normals[k] = shape.normal
            else:
                radii[k] = shape.radius

        colors = np.zeros((material_capacity, 3), dtype=np.float32)
        emissions = np.zeros((material_capacity, 3), dtype=np.float32)
        for m, material in enumerate(self._materials):
            colors[m] = material.color
            emissions[m] = material.emission

        self.kinds.from_numpy(kinds)
        self.centers.from_numpy(centers)
        self.normals.from_numpy(normals)
        self.radii.from_numpy(radii)
        self.material_ids.from_numpy(material_ids)
        self.colors.from_numpy(colors)
        self.emissions.from_numpy(emissions)

        logger.debug(
            "Uploaded scene with %d shapes and %d materials",
            self.num_shapes,
            self.num_materials,
        )

    # =========================================================================
    # Host-side accessors
    # =========================================================================

    @property
    def shapes(self) -> tuple[Shape, ...]:
        """The shapes, in scene order."""
        return self._shapes

    @property
    def materials(self) -> tuple[Material, ...]:
        """The distinct materials, indexed by material id."""
        return self._materials

    def material_id(self, material: Material) -> int:
        """Get the device material id of a material used by this scene.

        Raises:
            KeyError: If no shape in the scene uses the material.
        """
        return self._material_index[id(material)]

    def __len__(self) -> int:
        return self.num_shapes

    def __iter__(self) -> Iterator[Shape]:
        return iter(self._shapes)

    def __repr__(self) -> str:
        return f"Scene(shapes={self.num_shapes}, materials={self.num_materials})"

    # =========================================================================
    # Device-side queries
    # =========================================================================

    @ti.func
    def nearest_hit(self, ray: Ray) -> SceneHitRecord:
        """Find the nearest positive-distance intersection along a ray.

        Args:
            ray: The ray to test. Its direction must be unit length.

        Returns:
            A SceneHitRecord for the closest hit, or a miss record.
        """
        result = SceneHitRecord(hit=0, t=0.0, normal=vec3(0.0, 0.0, 0.0), material_id=-1)

        for k in range(self.num_shapes):
            rec = HitRecord(hit=0, t=0.0, normal=vec3(0.0, 0.0, 0.0))
            if self.kinds[k] == int(ShapeKind.PLANE):
                rec = hit_plane(ray, self.centers[k], self.normals[k])
            else:
                rec = hit_sphere(ray, self.centers[k], self.radii[k])

            if rec.hit == 1 and (result.hit == 0 or rec.t < result.t):
                result = SceneHitRecord(
                    hit=1,
                    t=rec.t,
                    normal=rec.normal,
                    material_id=self.material_ids[k],
                )

        return result

    @ti.func
    def material_color(self, material_id: ti.i32) -> vec3:
        return self.colors[material_id]

    @ti.func
    def material_emission(self, material_id: ti.i32) -> vec3:
        return self.emissions[material_id]

    @ti.kernel
    def _query_kernel(self):
        ray = Ray(origin=self._query_origin[None], direction=self._query_direction[None])
        rec = self.nearest_hit(ray)
        self._query_hit[None] = rec.hit
        self._query_t[None] = rec.t
        self._query_normal[None] = rec.normal
        self._query_material[None] = rec.material_id

    def query(self, origin: Vec3Tuple, direction: Vec3Tuple) -> Intersection:
        """Run the nearest-hit query for a single ray from Python.

        This is a Python-callable helper for tooling and tests. Rendering uses
        :meth:`nearest_hit` inside kernels.

        Args:
            origin: Ray origin.
            direction: Ray direction. It is normalized before testing.

        Returns:
            The nearest Intersection, or one with ``is_hit=False``.

        Raises:
            ValueError: If the direction has zero length.
        """
        norm = math.sqrt(sum(c * c for c in direction))
        if norm == 0.0:
            raise ValueError("Ray direction must be non-zero")

        self._query_origin[None] = [float(c) for c in origin]
        self._query_direction[None] = [float(c) / norm for c in direction]
        self._query_kernel()

        if self._query_hit[None] == 0:
            return Intersection(is_hit=False)

        n = self._query_normal[None]
        return Intersection(
            is_hit=True,
            distance=float(self._query_t[None]),
            normal=(float(n[0]), float(n[1]), float(n[2])),
            material=self._materials[int(self._query_material[None])],
        )
