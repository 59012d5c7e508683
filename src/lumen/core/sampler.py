"""Injectable random number source for frame rendering.

Taichi's built-in ``ti.random`` draws from one process-wide generator that can
only be seeded through ``ti.init``. The path tracer instead derives its
uniforms from an injected ``numpy.random.Generator``: before every frame the
sampler draws one 32-bit seed per pixel and uploads only those. Kernels turn a
seed and a counter into a uniform with a PCG hash, so every (pixel, sub-sample,
dimension) gets its own value without a per-dimension buffer on the host.

Stream layout (dimension index within a sub-sample stream):

    0, 1                 camera jitter (x, y)
    2 + 2*d, 3 + 2*d     reflection sample (u1, u2) at bounce depth d

The counter of dimension ``dim`` of sub-sample ``s`` is
``s * dimensions + dim``.

Example:
    >>> import numpy as np
    >>> sampler = Sampler(64, 64, samples_per_pixel=4, max_depth=5,
    ...                   rng=np.random.default_rng(7))
    >>> sampler.advance()  # draw the pixel seeds for the next frame
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

# Uniforms consumed by the camera for sub-pixel jitter
CAMERA_DIMENSIONS = 2

# Uniforms consumed by each bounce (u1, u2)
BOUNCE_DIMENSIONS = 2

# A uniform keeps the top 24 bits of the hash so it is exact in f32
_MANTISSA_SHIFT = 8
_MANTISSA_SCALE = 1.0 / 16777216.0


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """One round of the PCG output permutation over a 32-bit state."""
    state = value * ti.u32(747796405) + ti.u32(1013904223)
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(277803737)
    return (word >> ti.u32(22)) ^ word


@ti.data_oriented
class Sampler:
    """Per-frame uniform random numbers backed by a NumPy generator.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of sub-samples (camera rays) per pixel.
        dimensions: Number of uniforms per sub-sample stream.
        rng: The injected generator. All randomness of a render flows from it.
        seeds: Taichi field (width, height) of the current frame's pixel seeds.
    """

    def __init__(
        self,
        width: int,
        height: int,
        samples_per_pixel: int,
        max_depth: int,
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> None:
        """Allocate the seed buffer.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            samples_per_pixel: Camera rays traced per pixel and frame.
            max_depth: Bounce cap of the integrator.
            rng: Generator to draw from. Takes precedence over ``seed``.
            seed: Seed for a fresh ``numpy.random.default_rng`` when no
                generator is given.

        Raises:
            ValueError: If any size is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Sampler dimensions must be positive, got {width}x{height}")
        if samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")
        if max_depth <= 0:
            raise ValueError(f"max_depth must be positive, got {max_depth}")

        self.width = width
        self.height = height
        self.samples_per_pixel = samples_per_pixel
        self.dimensions = CAMERA_DIMENSIONS + BOUNCE_DIMENSIONS * max_depth
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        self.seeds = ti.field(dtype=ti.u32, shape=(width, height))

        # Host query scratch field for pixel_uniforms()
        self._query_stream = ti.field(dtype=ti.f32, shape=(samples_per_pixel, self.dimensions))

    @property
    def shape(self) -> tuple[int, int, int, int]:
        """Logical shape of the uniforms (width, height, samples, dimensions)."""
        return (self.width, self.height, self.samples_per_pixel, self.dimensions)

    def advance(self) -> None:
        """Draw fresh pixel seeds, giving an independent set of uniforms."""
        seeds = self.rng.integers(0, 2**32, size=(self.width, self.height), dtype=np.uint32)
        self.seeds.from_numpy(seeds)

    def load(self, seeds: npt.NDArray[np.uint32]) -> None:
        """Load explicit pixel seeds, e.g. to replay a frame.

        Args:
            seeds: Array of shape (width, height) of 32-bit seeds.

        Raises:
            ValueError: If the array has the wrong shape.
        """
        expected = (self.width, self.height)
        if seeds.shape != expected:
            raise ValueError(f"Seeds shape {seeds.shape} doesn't match expected {expected}")
        self.seeds.from_numpy(np.ascontiguousarray(seeds, dtype=np.uint32))

    @ti.func
    def uniform(self, i: ti.i32, j: ti.i32, s: ti.i32, dim: ti.i32) -> ti.f32:
        """Uniform in [0, 1) for dimension ``dim`` of pixel (i, j), sub-sample s."""
        counter = ti.cast(s * self.dimensions + dim, ti.u32)
        h = pcg_hash(self.seeds[i, j] + pcg_hash(counter))
        return ti.cast(h >> ti.u32(_MANTISSA_SHIFT), ti.f32) * _MANTISSA_SCALE

    @ti.func
    def bounce_uniforms(self, i: ti.i32, j: ti.i32, s: ti.i32, depth: ti.i32):
        """Return the (u1, u2) pair reserved for bounce ``depth``."""
        base = CAMERA_DIMENSIONS + BOUNCE_DIMENSIONS * depth
        return self.uniform(i, j, s, base), self.uniform(i, j, s, base + 1)

    @ti.kernel
    def _pixel_uniforms_kernel(self, i: ti.i32, j: ti.i32):
        for s, dim in self._query_stream:
            self._query_stream[s, dim] = self.uniform(i, j, s, dim)

    def pixel_uniforms(self, i: int, j: int) -> npt.NDArray[np.float32]:
        """Copy the current uniforms of pixel (i, j) out as (samples, dimensions).

        Raises:
            ValueError: If the pixel lies outside the image.
        """
        if not (0 <= i < self.width and 0 <= j < self.height):
            raise ValueError(f"Pixel ({i}, {j}) is outside the {self.width}x{self.height} image")
        self._pixel_uniforms_kernel(i, j)
        return self._query_stream.to_numpy()
