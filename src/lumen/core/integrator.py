"""Path tracing integrator for Monte Carlo light transport.

This module estimates the radiance arriving along camera rays by following a
single random path per ray. At every hit the surface's emission is added and
the path continues in a random direction on the visible side of the surface,
weighted by ``color * (2 * cos_theta)``. Paths end when they escape the scene
(black background) or reach the bounce cap.

The estimate is the truncated series

    L = E_0 + w_0 * (E_1 + w_1 * (E_2 + ...))

evaluated front to back with a running throughput. Depth is counted from the
camera; a ray traced at depth ``MAX_DEPTH`` or deeper contributes nothing.

All random numbers come from the injected :class:`~lumen.core.sampler.Sampler`,
so a frame is fully determined by the sampler's generator state.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> import numpy as np
    >>> from lumen.camera import Camera
    >>> from lumen.core.sampler import Sampler
    >>> from lumen.scene import Scene, create_cornell_box_scene
    >>> shapes, camera_config = create_cornell_box_scene()
    >>> camera = Camera(camera_config)
    >>> sampler = Sampler(64, 48, camera.samples_per_pixel, MAX_DEPTH,
    ...                   rng=np.random.default_rng(1))
    >>> integrator = PathIntegrator(Scene(shapes), camera, sampler, 64, 48)
    >>> integrator.render_frame()  # fills integrator.frame
"""

import logging
import math
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from lumen.core.accumulator import field_to_image
from lumen.core.ray import Ray, random_reflection_from_normal
from lumen.core.sampler import BOUNCE_DIMENSIONS, CAMERA_DIMENSIONS, Sampler
from lumen.core.vector import Vec3Tuple, vec3
from lumen.materials.diffuse import diffuse_weight

if TYPE_CHECKING:
    from lumen.camera import Camera
    from lumen.scene import Scene

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray depth; a ray at this depth or deeper returns black
MAX_DEPTH = 5

# Ray offset epsilon to avoid self-intersection
RAY_EPSILON = 1e-4


@ti.func
def _offset_ray_origin(point: vec3, normal: vec3) -> vec3:
    """Lift a bounce origin off the surface it leaves.

    Bounce directions always lie on the side the normal faces, so the offset
    is along the normal.
    """
    return point + RAY_EPSILON * normal


@ti.data_oriented
class PathIntegrator:
    """Bounce-capped path tracer over one scene and camera.

    Attributes:
        scene: The scene to trace against.
        camera: The camera generating primary rays.
        sampler: Source of the uniforms consumed by camera jitter and bounces.
        width: Image width in pixels.
        height: Image height in pixels.
        frame: Taichi field (width, height) holding the last rendered frame.
    """

    def __init__(
        self,
        scene: "Scene",
        camera: "Camera",
        sampler: Sampler,
        width: int,
        height: int,
    ) -> None:
        """Bind the integrator to its scene, camera and sampler.

        Raises:
            ValueError: If the sampler's buffer does not cover the image size,
                the camera's samples per pixel or the bounce cap.
        """
        expected = (
            width,
            height,
            camera.samples_per_pixel,
            CAMERA_DIMENSIONS + BOUNCE_DIMENSIONS * MAX_DEPTH,
        )
        if sampler.shape != expected:
            raise ValueError(f"Sampler shape {sampler.shape} doesn't match expected {expected}")

        self.scene = scene
        self.camera = camera
        self.sampler = sampler
        self.width = width
        self.height = height
        self.samples_per_pixel = camera.samples_per_pixel

        self.frame = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))

        # Host query scratch fields
        self._query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_radiance = ti.Vector.field(3, dtype=ti.f32, shape=())

    # =========================================================================
    # Path Tracing Core
    # =========================================================================

    @ti.func
    def trace_radiance(
        self,
        ray: Ray,
        depth: ti.i32,
        pixel_i: ti.i32,
        pixel_j: ti.i32,
        sample: ti.i32,
    ) -> vec3:
        """Estimate the radiance arriving along a ray.

        Args:
            ray: The ray to trace. Its direction must be unit length.
            depth: Depth of the ray; 0 for camera rays.
            pixel_i: Pixel x-coordinate whose random stream is consumed.
            pixel_j: Pixel y-coordinate whose random stream is consumed.
            sample: Sub-sample index whose random stream is consumed.

        Returns:
            The estimated radiance (RGB). Black on a miss or at the bounce cap.
        """
        radiance = vec3(0.0, 0.0, 0.0)

        # Product of all bounce weights along the path
        throughput = vec3(1.0, 1.0, 1.0)

        origin = ray.origin
        direction = ray.direction

        # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
        active = 1

        for bounce in range(MAX_DEPTH):
            current_depth = depth + bounce
            if active == 1:
                if current_depth >= MAX_DEPTH:
                    active = 0
                else:
                    rec = self.scene.nearest_hit(Ray(origin=origin, direction=direction))
                    if rec.hit == 0:
                        # Escaped: black background
                        active = 0
                    else:
                        hit_point = origin + direction * rec.t
                        radiance += throughput * self.scene.material_emission(rec.material_id)

                        u1, u2 = self.sampler.bounce_uniforms(pixel_i, pixel_j, sample, current_depth)
                        bounce_direction = random_reflection_from_normal(rec.normal, u1, u2)
                        cos_theta = tm.dot(bounce_direction, rec.normal)
                        throughput *= diffuse_weight(
                            self.scene.material_color(rec.material_id), cos_theta
                        )

                        origin = _offset_ray_origin(hit_point, rec.normal)
                        direction = bounce_direction

        return radiance

    # =========================================================================
    # Rendering Kernels
    # =========================================================================

    @ti.kernel
    def _render_frame_kernel(self):
        for i, j in ti.ndrange(self.width, self.height):
            color = vec3(0.0, 0.0, 0.0)
            for s in range(self.samples_per_pixel):
                jitter_u = self.sampler.uniform(i, j, s, 0)
                jitter_v = self.sampler.uniform(i, j, s, 1)
                ray = self.camera.ray_for_sample(
                    i, j, self.width, self.height, s, jitter_u, jitter_v
                )
                color += self.trace_radiance(ray, 0, i, j, s)

            color /= ti.cast(self.samples_per_pixel, ti.f32)

            # Check for NaN/Inf and replace with zero
            for c in ti.static(range(3)):
                if tm.isnan(color[c]) or tm.isinf(color[c]):
                    color[c] = 0.0

            self.frame[i, j] = color

    def render_frame(self) -> None:
        """Draw fresh uniforms and render one full frame into :attr:`frame`."""
        self.sampler.advance()
        self._render_frame_kernel()

    def frame_image(self) -> npt.NDArray[np.float32]:
        """Copy the last frame out as a (height, width, 3) image."""
        return field_to_image(self.frame)

    @ti.kernel
    def _trace_kernel(self, depth: ti.i32, pixel_i: ti.i32, pixel_j: ti.i32, sample: ti.i32):
        ray = Ray(origin=self._query_origin[None], direction=self._query_direction[None])
        self._query_radiance[None] = self.trace_radiance(ray, depth, pixel_i, pixel_j, sample)

    def trace(
        self,
        origin: Vec3Tuple,
        direction: Vec3Tuple,
        depth: int = 0,
        pixel: tuple[int, int] = (0, 0),
        sample: int = 0,
    ) -> Vec3Tuple:
        """Trace a single ray from Python.

        Uses the sampler's current seeds for ``pixel`` and ``sample``; call
        ``sampler.advance()`` first for a fresh random path.

        Args:
            origin: Ray origin.
            direction: Ray direction. It is normalized before tracing.
            depth: Starting depth of the ray.
            pixel: Pixel (i, j) whose random stream is consumed.
            sample: Sub-sample whose random stream is consumed.

        Returns:
            The estimated radiance (R, G, B).

        Raises:
            ValueError: If the direction has zero length, depth is negative, or
                the pixel or sub-sample lies outside the sampler's streams.
        """
        norm = math.sqrt(sum(c * c for c in direction))
        if norm == 0.0:
            raise ValueError("Ray direction must be non-zero")
        if depth < 0:
            raise ValueError(f"Depth must be non-negative, got {depth}")
        i, j = pixel
        if not (0 <= i < self.width and 0 <= j < self.height):
            raise ValueError(f"Pixel ({i}, {j}) is outside the {self.width}x{self.height} image")
        if not 0 <= sample < self.samples_per_pixel:
            raise ValueError(f"Sample {sample} is outside [0, {self.samples_per_pixel})")

        self._query_origin[None] = [float(c) for c in origin]
        self._query_direction[None] = [float(c) / norm for c in direction]
        self._trace_kernel(depth, i, j, sample)
        r = self._query_radiance[None]
        return (float(r[0]), float(r[1]), float(r[2]))

    def __repr__(self) -> str:
        return (
            f"PathIntegrator(width={self.width}, height={self.height}, "
            f"spp={self.samples_per_pixel}, max_depth={MAX_DEPTH})"
        )
