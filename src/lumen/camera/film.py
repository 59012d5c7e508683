"""Axis-scaled film camera for primary ray generation.

The camera maps a film coordinate ``(x, y)`` in ``[-0.5, 0.5]^2`` to a world
space ray. The raw direction

    (x * film_width, y * film_height, focal_length)

is multiplied componentwise by the camera's view direction and normalized.
There is no rotation or basis change: the result is a correct perspective
transform only when every component of the view direction is +/-1 (for example
the reference scene's ``(1, 1, 1)``). Other directions are accepted but logged
as a warning. Non-zero components are required so that no ray collapses to a
zero vector.

Supersampling traces a regular ``k x k`` grid of rays per pixel; sub-sample
``s`` sits at offset ``((s % k) / k, (s // k) / k)`` from the pixel's top-left
corner, measured rightward and downward. With ``k = 1`` every ray passes through
the top-left corner of its pixel.
With ``jitter`` enabled a uniform random offset within each grid cell is added.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> config = CameraConfig(
    ...     position=(0.0, 2.0, -5.0),
    ...     direction=(1.0, 1.0, 1.0),
    ...     focal_length=0.028,
    ...     film_size=(0.036, 0.024),
    ... )
    >>> camera = Camera(config)
    >>> origin, direction = camera.generate_ray(0.0, 0.0)  # straight ahead
"""

import logging
from dataclasses import dataclass

import taichi as ti

from lumen.core.ray import Ray
from lumen.core.vector import Vec3Tuple, multiply, normalize, vec3

logger = logging.getLogger(__name__)

# Tolerance when checking whether a view direction component is +/-1
AXIS_TOLERANCE = 1e-9


# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass(frozen=True)
class CameraConfig:
    """Immutable camera parameters.

    Attributes:
        position: Camera position in world space (x, y, z).
        direction: View direction, applied componentwise. Components should
            be +/-1 for a correct perspective.
        focal_length: Distance from the pinhole to the film (positive).
        film_size: Film extents (width, height) in world units. Film
            coordinates in [-0.5, 0.5] are scaled by these.
        multisample: Rays per pixel along each axis (k). A pixel traces
            k * k rays and averages them.
        jitter: Whether to randomize each sub-sample within its grid cell.
    """

    position: Vec3Tuple
    direction: Vec3Tuple
    focal_length: float
    film_size: tuple[float, float]
    multisample: int = 1
    jitter: bool = False

    def __post_init__(self) -> None:
        """Validate the parameters.

        Raises:
            ValueError: If the focal length or a film extent is not positive,
                a view direction component is zero, or multisample < 1.
        """
        if not self.focal_length > 0.0:
            raise ValueError(f"Focal length must be positive, got {self.focal_length}")
        if len(self.film_size) != 2 or not all(s > 0.0 for s in self.film_size):
            raise ValueError(f"Film size must be two positive extents, got {self.film_size}")
        if len(self.direction) != 3 or any(c == 0.0 for c in self.direction):
            raise ValueError(
                f"View direction components must be non-zero, got {self.direction}"
            )
        if self.multisample < 1:
            raise ValueError(f"Multisample count must be at least 1, got {self.multisample}")

    @classmethod
    def from_dpi(
        cls,
        position: Vec3Tuple,
        direction: Vec3Tuple,
        focal_length: float,
        dots_per_unit: float,
        width: int,
        height: int,
        *,
        multisample: int = 1,
        jitter: bool = False,
    ) -> "CameraConfig":
        """Build a camera from a pixel density instead of film extents.

        A pixel offset ``px`` from the image center scaled by ``1 / dpi`` is
        the same point as film coordinate ``px / width`` scaled by
        ``width / dpi``, so the film extents are ``(width / dpi, height / dpi)``.

        Args:
            position: Camera position.
            direction: View direction (componentwise).
            focal_length: Focal length in world units.
            dots_per_unit: Pixels per world unit on the film.
            width: Image width in pixels.
            height: Image height in pixels.
            multisample: Rays per pixel along each axis.
            jitter: Whether to jitter sub-samples.

        Raises:
            ValueError: If ``dots_per_unit`` is not positive.
        """
        if not dots_per_unit > 0.0:
            raise ValueError(f"dots_per_unit must be positive, got {dots_per_unit}")
        return cls(
            position=position,
            direction=direction,
            focal_length=focal_length,
            film_size=(width / dots_per_unit, height / dots_per_unit),
            multisample=multisample,
            jitter=jitter,
        )

    @property
    def samples_per_pixel(self) -> int:
        """Rays traced per pixel and frame (k * k)."""
        return self.multisample * self.multisample

    @property
    def is_axis_aligned(self) -> bool:
        """Whether every view direction component is +/-1."""
        return all(abs(abs(c) - 1.0) <= AXIS_TOLERANCE for c in self.direction)

    def sub_pixel_offsets(self) -> list[tuple[float, float]]:
        """Un-jittered (right, down) sub-sample offsets from the pixel's top-left corner."""
        k = self.multisample
        return [((s % k) / k, (s // k) / k) for s in range(k * k)]


# =============================================================================
# Camera (Taichi-side ray generation)
# =============================================================================


@ti.data_oriented
class Camera:
    """Ray generator built once from a :class:`CameraConfig`.

    Attributes:
        config: The configuration this camera was built from.
        multisample: Rays per pixel along each axis.
        samples_per_pixel: Rays per pixel (multisample squared).
        jitter: Whether sub-samples are jittered.
    """

    def __init__(self, config: CameraConfig) -> None:
        """Store the configuration in Taichi fields.

        Args:
            config: The camera parameters.
        """
        self.config = config
        self.multisample = config.multisample
        self.samples_per_pixel = config.samples_per_pixel
        self.jitter = config.jitter

        if not config.is_axis_aligned:
            logger.warning(
                "View direction %s has components other than +/-1; the componentwise "
                "camera transform will not be a true perspective projection",
                config.direction,
            )

        self._position = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._film_size = ti.Vector.field(2, dtype=ti.f32, shape=())
        self._focal_length = ti.field(dtype=ti.f32, shape=())

        self._position[None] = [float(c) for c in config.position]
        self._direction[None] = [float(c) for c in config.direction]
        self._film_size[None] = [float(c) for c in config.film_size]
        self._focal_length[None] = float(config.focal_length)

        # Host query scratch fields
        self._query_coordinate = ti.Vector.field(2, dtype=ti.f32, shape=())
        self._query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())

    @classmethod
    def from_dpi(
        cls,
        position: Vec3Tuple,
        direction: Vec3Tuple,
        focal_length: float,
        dots_per_unit: float,
        width: int,
        height: int,
        **kwargs,
    ) -> "Camera":
        """Build a camera from a pixel density. See :meth:`CameraConfig.from_dpi`."""
        return cls(
            CameraConfig.from_dpi(
                position, direction, focal_length, dots_per_unit, width, height, **kwargs
            )
        )

    @ti.func
    def ray_for_coordinate(self, x: ti.f32, y: ti.f32) -> Ray:
        """Generate the ray through film coordinate (x, y).

        Args:
            x: Horizontal film coordinate in [-0.5, 0.5] (left to right).
            y: Vertical film coordinate in [-0.5, 0.5] (bottom to top).

        Returns:
            A Ray from the camera position with a unit direction.
        """
        film = self._film_size[None]
        raw = vec3(x * film.x, y * film.y, self._focal_length[None])
        direction = normalize(multiply(self._direction[None], raw))
        return Ray(origin=self._position[None], direction=direction)

    @ti.func
    def ray_for_sample(
        self,
        pixel_i: ti.i32,
        pixel_j: ti.i32,
        width: ti.i32,
        height: ti.i32,
        sample: ti.i32,
        jitter_u: ti.f32,
        jitter_v: ti.f32,
    ) -> Ray:
        """Generate the ray of one sub-sample of a pixel.

        Args:
            pixel_i: Pixel x-coordinate (0 = left).
            pixel_j: Pixel y-coordinate (0 = bottom).
            width: Image width in pixels.
            height: Image height in pixels.
            sample: Sub-sample index in [0, k * k).
            jitter_u: Uniform in [0, 1), used only when jitter is enabled.
            jitter_v: Uniform in [0, 1), used only when jitter is enabled.

        Sub-sample offsets are taken rightward and downward from the top-left
        corner of the pixel, so row ``height - 1`` starts at the film's top edge.

        Returns:
            The camera ray through the sub-sample position.
        """
        k = self.multisample
        offset_u = ti.cast(sample % k, ti.f32)
        offset_v = ti.cast(sample // k, ti.f32)
        if ti.static(self.jitter):
            offset_u += jitter_u
            offset_v += jitter_v

        x = (ti.cast(pixel_i, ti.f32) + offset_u / k) / ti.cast(width, ti.f32) - 0.5
        y = (ti.cast(pixel_j, ti.f32) + 1.0 - offset_v / k) / ti.cast(height, ti.f32) - 0.5
        return self.ray_for_coordinate(x, y)

    @ti.kernel
    def _generate_ray_kernel(self):
        coordinate = self._query_coordinate[None]
        ray = self.ray_for_coordinate(coordinate.x, coordinate.y)
        self._query_origin[None] = ray.origin
        self._query_direction[None] = ray.direction

    def generate_ray(self, x: float, y: float) -> tuple[Vec3Tuple, Vec3Tuple]:
        """Generate the ray through film coordinate (x, y) from Python.

        Args:
            x: Horizontal film coordinate in [-0.5, 0.5].
            y: Vertical film coordinate in [-0.5, 0.5].

        Returns:
            Tuple of (origin, direction).
        """
        self._query_coordinate[None] = [float(x), float(y)]
        self._generate_ray_kernel()
        o = self._query_origin[None]
        d = self._query_direction[None]
        return (
            (float(o[0]), float(o[1]), float(o[2])),
            (float(d[0]), float(d[1]), float(d[2])),
        )

    def __repr__(self) -> str:
        return (
            f"Camera(position={self.config.position}, direction={self.config.direction}, "
            f"spp={self.samples_per_pixel})"
        )
