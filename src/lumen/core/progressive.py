"""Progressive renderer for iterative sample accumulation.

This module ties the pieces of a render together and provides a convenient
interface on top of them:
- One frame at a time (``render_frame``) or in batches with progress callbacks
- A generator API that can simply be abandoned to cancel
- Access to the running mean and the sample count
- Reset and presentation to any frame sink

Each renderer owns its camera, sampler, integrator and accumulator. Scenes
are shared read-only, so several renderers can trace the same scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.core.progressive import ProgressiveRenderer, RenderConfig
    >>> from lumen.scene import Scene, create_cornell_box_scene
    >>>
    >>> shapes, camera_config = create_cornell_box_scene()
    >>> renderer = ProgressiveRenderer(
    ...     Scene(shapes), camera_config, RenderConfig(width=160, height=120, seed=7)
    ... )
    >>> renderer.render(16)  # Merge 16 frames
    >>> image = renderer.accumulated_mean()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from lumen.camera import Camera, CameraConfig
from lumen.core.accumulator import Accumulator
from lumen.core.integrator import MAX_DEPTH, PathIntegrator
from lumen.core.sampler import Sampler

if TYPE_CHECKING:
    from lumen.preview.sink import FrameSink
    from lumen.scene import Scene

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class RenderConfig:
    """Immutable render settings.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        seed: Seed for the renderer's random generator. None draws fresh
            entropy, so renders are not reproducible.
        batch_size: Frames rendered between progress reports by default.
        gamma: Display gamma used when converting the mean to pixels.
    """

    width: int = 320
    height: int = 240
    seed: int | None = None
    batch_size: int = 1
    gamma: float = 2.2

    def __post_init__(self) -> None:
        """Validate the settings.

        Raises:
            ValueError: If a size, the batch size or gamma is not positive.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.batch_size < 1:
            raise ValueError(f"Batch size must be at least 1, got {self.batch_size}")
        if not self.gamma > 0.0:
            raise ValueError(f"Gamma must be positive, got {self.gamma}")


class ProgressiveRenderer:
    """A progressive renderer that accumulates frames over time.

    Attributes:
        scene: The scene being rendered.
        camera: The camera built from the camera configuration.
        config: The render settings.
        sampler: The sampler feeding the integrator.
        integrator: The path tracer producing frames.
        accumulator: The running mean of all merged frames.
    """

    def __init__(
        self,
        scene: Scene,
        camera_config: CameraConfig,
        config: RenderConfig | None = None,
        *,
        rng: np.random.Generator | None = None,
    ) -> None:
        """Initialize the progressive renderer.

        Args:
            scene: The scene to render.
            camera_config: The camera parameters.
            config: Render settings. Defaults to RenderConfig().
            rng: Random generator to draw from. Takes precedence over
                ``config.seed``.
        """
        self.config = config if config is not None else RenderConfig()
        self.scene = scene
        self.camera = Camera(camera_config)
        self.sampler = Sampler(
            self.config.width,
            self.config.height,
            self.camera.samples_per_pixel,
            MAX_DEPTH,
            rng=rng,
            seed=self.config.seed,
        )
        self.integrator = PathIntegrator(
            scene, self.camera, self.sampler, self.config.width, self.config.height
        )
        self.accumulator = Accumulator(self.config.width, self.config.height)

        logger.info(
            "Renderer ready: %dx%d, %d rays per pixel, %r",
            self.width,
            self.height,
            self.camera.samples_per_pixel,
            scene,
        )

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.height

    @property
    def sample_count(self) -> int:
        """Get the number of frames merged into the running mean."""
        return self.accumulator.sample_count

    def step(self) -> int:
        """Render one frame and merge it without copying it to the host.

        Returns:
            The sample count after the merge.
        """
        self.integrator.render_frame()
        self.accumulator.merge_field(self.integrator.frame)
        return self.sample_count

    def render_frame(self) -> npt.NDArray[np.float32]:
        """Render one frame, merge it and return it.

        Returns:
            The new frame as a (height, width, 3) float32 array of linear
            radiance.
        """
        self.step()
        return self.integrator.frame_image()

    def render(
        self,
        num_samples: int = 1,
        batch_size: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render frames progressively with optional progress callback.

        Accumulates the specified number of frames into the existing mean.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Number of frames to merge.
            batch_size: Frames to render before each callback. Defaults to
                ``config.batch_size``.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render frames progressively, yielding progress after each batch.

        Stop iterating to cancel; frames merged so far are kept.

        Args:
            num_samples: Number of frames to merge.
            batch_size: Frames to render before each yield. Defaults to
                ``config.batch_size``.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is less than 1.
        """
        if batch_size is None:
            batch_size = self.config.batch_size
        if batch_size < 1:
            raise ValueError(f"Batch size must be at least 1, got {batch_size}")
        if num_samples <= 0:
            return

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            for _ in range(batch):
                self.step()
            remaining -= batch
            logger.debug("Merged batch of %d frames (%d/%d)", batch, self.sample_count, target_samples)
            yield (self.sample_count, target_samples)

    def accumulated_mean(self) -> npt.NDArray[np.float32]:
        """Get the running mean as a (height, width, 3) float32 array.

        Values are linear radiance and are not clamped.
        """
        return self.accumulator.mean_image()

    def reset(self) -> None:
        """Discard all merged frames.

        The random generator keeps its state, so frames after a reset are
        new samples rather than a replay.
        """
        self.accumulator.reset()
        logger.info("Renderer reset")

    def present(self, sink: FrameSink) -> None:
        """Hand the current running mean and sample count to a frame sink."""
        sink.present(self.accumulated_mean(), self.sample_count)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
