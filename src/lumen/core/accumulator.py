"""Progressive per-pixel running mean.

The accumulator keeps one mean color per pixel and a single sample count. Each
merged frame is folded in with

    sample_count += 1
    mean += (frame - mean) / sample_count

so after ``n`` merges the buffer holds the arithmetic mean of the ``n`` frames
without ever storing a sum. Frames can be merged as Taichi fields of shape
(width, height) or as NumPy images of shape (height, width, 3).

Field layout follows Taichi conventions: index (i, j) with i = 0 at the left
and j = 0 at the bottom. NumPy images follow image conventions: row 0 at the
top. :func:`field_to_image` and :func:`image_to_field_array` convert between
the two.

Example:
    >>> import numpy as np
    >>> acc = Accumulator(4, 3)
    >>> acc.merge_frame(np.ones((3, 4, 3), dtype=np.float32))
    >>> acc.sample_count
    1
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti

logger = logging.getLogger(__name__)


def field_to_image(field: "ti.MatrixField") -> npt.NDArray[np.float32]:
    """Copy a (width, height) vector field into a (height, width, 3) image."""
    data = field.to_numpy()

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(data, (1, 0, 2))

    # Flip vertically (Taichi uses bottom-left origin, images use top-left)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)


def image_to_field_array(image: npt.NDArray) -> npt.NDArray[np.float32]:
    """Convert a (height, width, 3) image into a (width, height, 3) field array."""
    return np.ascontiguousarray(np.transpose(np.flipud(image), (1, 0, 2)), dtype=np.float32)


@ti.data_oriented
class Accumulator:
    """Running mean of rendered frames.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        mean: Taichi field (width, height) of mean colors.
    """

    def __init__(self, width: int, height: int) -> None:
        """Allocate a zeroed buffer with sample count 0.

        Raises:
            ValueError: If width or height is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

        self.width = width
        self.height = height
        self.mean = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
        self._staging = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
        self._sample_count = 0

    @property
    def sample_count(self) -> int:
        """Number of frames merged since creation or the last reset."""
        return self._sample_count

    @ti.kernel
    def _merge(self, frame: ti.template(), n: ti.i32):
        for i, j in self.mean:
            # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
            self.mean[i, j] += (frame[i, j] - self.mean[i, j]) / ti.cast(n, ti.f32)

    def merge_field(self, frame: "ti.MatrixField") -> None:
        """Merge a frame held in a Taichi field of shape (width, height).

        Raises:
            ValueError: If the field shape does not match the accumulator.
        """
        if tuple(frame.shape) != (self.width, self.height):
            raise ValueError(
                f"Frame shape {tuple(frame.shape)} doesn't match accumulator "
                f"({self.width}, {self.height})"
            )
        self._sample_count += 1
        self._merge(frame, self._sample_count)

    def merge_frame(self, image: npt.NDArray) -> None:
        """Merge a frame given as a NumPy image of shape (height, width, 3).

        Raises:
            ValueError: If the image shape does not match the accumulator.
        """
        expected = (self.height, self.width, 3)
        if image.shape != expected:
            raise ValueError(f"Frame shape {image.shape} doesn't match expected {expected}")
        self._staging.from_numpy(image_to_field_array(image))
        self.merge_field(self._staging)

    def mean_image(self) -> npt.NDArray[np.float32]:
        """Copy the running mean out as a (height, width, 3) float32 image."""
        return field_to_image(self.mean)

    def reset(self) -> None:
        """Zero the buffer and the sample count."""
        self.mean.fill(0.0)
        self._sample_count = 0
        logger.debug("Accumulator reset (%dx%d)", self.width, self.height)

    def __repr__(self) -> str:
        return f"Accumulator(width={self.width}, height={self.height}, samples={self.sample_count})"
