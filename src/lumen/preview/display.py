"""Matplotlib-based preview display for rendered images.

Example:
    >>> from lumen.preview.display import MatplotlibSink, show_preview
    >>>
    >>> renderer.render(100)
    >>> show_preview(renderer, tone_map="reinhard")
    >>>
    >>> # Or keep one figure and refresh it while rendering
    >>> sink = MatplotlibSink(block=False)
    >>> for _ in renderer.render_progressive(100, batch_size=10):
    ...     renderer.present(sink)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
import numpy.typing as npt

from lumen.preview.tonemap import DEFAULT_GAMMA, ToneMapMethod, process_image_for_display

if TYPE_CHECKING:
    from lumen.core.progressive import ProgressiveRenderer


class MatplotlibSink:
    """Frame sink that draws each presented image into a Matplotlib figure.

    The figure is created on the first :meth:`present` and reused afterwards.
    The sample count is shown in the title.

    Attributes:
        figure: The Matplotlib figure, or None before the first present.
    """

    def __init__(
        self,
        *,
        tone_map: ToneMapMethod = "none",
        gamma: float = DEFAULT_GAMMA,
        exposure: float = 1.0,
        title: str | None = None,
        figsize: tuple[float, float] = (8, 6),
        show: bool = True,
        block: bool = False,
    ) -> None:
        """Configure the sink.

        Args:
            tone_map: Tone mapping method ("none", "reinhard", or "exposure").
            gamma: Gamma correction value (default 2.2).
            exposure: Exposure value for exposure tone mapping (default 1.0).
            title: Custom title (default shows sample count).
            figsize: Figure size in inches (width, height).
            show: Whether to show the figure on each present. With False the
                figure is only drawn, e.g. for saving or headless use.
            block: Whether showing blocks until the figure is closed.
        """
        self.tone_map: ToneMapMethod = tone_map
        self.gamma = gamma
        self.exposure = exposure
        self.title = title
        self.figsize = figsize
        self.show = show
        self.block = block
        self.figure: Any = None
        self._axes: Any = None
        self._artist: Any = None

    def present(self, image: npt.NDArray[np.float32], sample_count: int) -> None:
        """Draw the image and update the title."""
        import matplotlib.pyplot as plt

        display_image = process_image_for_display(
            image,
            tone_map=self.tone_map,
            gamma=self.gamma,
            exposure=self.exposure,
        )

        if self.figure is None:
            self.figure, self._axes = plt.subplots(1, 1, figsize=self.figsize)
            self._axes.axis("off")
            self._artist = self._axes.imshow(display_image)
        else:
            self._artist.set_data(display_image)

        self._axes.set_title(self.title_for(sample_count))
        self.figure.tight_layout()

        if self.show:
            plt.show(block=self.block)
            if not self.block:
                plt.pause(0.001)
        else:
            self.figure.canvas.draw()

    def title_for(self, sample_count: int) -> str:
        """Build the figure title for a sample count."""
        if self.title is not None:
            return self.title
        title_text = f"Render Preview - {sample_count} SPP"
        if self.tone_map != "none":
            title_text += f" ({self.tone_map})"
        return title_text

    def close(self) -> None:
        """Close the figure."""
        if self.figure is not None:
            import matplotlib.pyplot as plt

            plt.close(self.figure)
            self.figure = None


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float | None = None,
    exposure: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display the current render as a Matplotlib figure.

    Args:
        renderer: The ProgressiveRenderer instance to display.
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value. Defaults to the renderer's config.
        exposure: Exposure value for exposure tone mapping (default 1.0).
        title: Custom title (default shows sample count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    sink = MatplotlibSink(
        tone_map=tone_map,
        gamma=renderer.config.gamma if gamma is None else gamma,
        exposure=exposure,
        title=title,
        figsize=figsize,
        block=block,
    )
    renderer.present(sink)
