"""Interactive preview window using Taichi GGUI.

This module provides an interactive preview window for real-time rendering
using Taichi's ti.ui.Window and canvas system. The window is also a frame
sink: :meth:`InteractivePreview.present` loads an accumulated image into the
display buffer and records its sample count.

Features:
    - Continuous progressive rendering until the window is closed
    - Sample count display
    - Light and wall color controls that rebuild the scene and restart
      accumulation
    - PNG export of the current state

Example:
    >>> from lumen.preview.interactive import InteractivePreview
    >>> from lumen.scene import CornellBoxParams
    >>>
    >>> preview = InteractivePreview(320, 240)
    >>> preview.set_params(CornellBoxParams(light_emission=(15.0, 15.0, 15.0)))
    >>> preview.run_reactive()  # Renders continuously until window closed
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from lumen.preview.tonemap import DEFAULT_GAMMA, ToneMapMethod, process_image_for_display

if TYPE_CHECKING:
    import numpy.typing as npt

    from lumen.core.progressive import ProgressiveRenderer, RenderConfig
    from lumen.scene import CornellBoxParams

logger = logging.getLogger(__name__)

# Slider changes smaller than this are ignored
SLIDER_EPSILON = 1e-6

# Upper bound of the light emission slider
MAX_LIGHT_EMISSION = 50.0


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        display_image: Taichi field storing the display image (RGB float).
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        title: str = "Cornell Box - Interactive Preview",
        tone_map: ToneMapMethod = "none",
        gamma: float = DEFAULT_GAMMA,
    ) -> None:
        """Initialize the preview.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            title: Window title.
            tone_map: Tone mapping applied to presented images.
            gamma: Display gamma applied to presented images.

        Note:
            The window is created lazily, so a preview can be constructed and
            fed images in a headless environment.
        """
        self.width = width
        self.height = height
        self.tone_map: ToneMapMethod = tone_map
        self.gamma = gamma
        self._title = title

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None
        self._sample_count = 0

        self._params: CornellBoxParams | None = None
        self._current_params: CornellBoxParams | None = None
        self._renderer: ProgressiveRenderer | None = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))

    def _initialize_window(self) -> None:
        if self._window is not None:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    @property
    def sample_count(self) -> int:
        """Sample count of the image currently in the display buffer."""
        return self._sample_count

    @property
    def renderer(self) -> ProgressiveRenderer | None:
        """The renderer driven by :meth:`run_reactive`, if any."""
        return self._renderer

    # =========================================================================
    # Display Buffer
    # =========================================================================

    def update_image(self, image: npt.NDArray[np.float32]) -> None:
        """Update the display image from a display-ready numpy array.

        Args:
            image: NumPy array of shape (height, width, 3) with values in
                [0, 1], already tone mapped and gamma encoded.

        Raises:
            ValueError: If image shape doesn't match (height, width, 3).
        """
        expected_shape = (self.height, self.width, 3)
        if image.shape != expected_shape:
            raise ValueError(f"Image shape {image.shape} doesn't match expected {expected_shape}")

        # Taichi fields use (x, y) indexing with the origin at the bottom-left
        image_transposed = np.ascontiguousarray(
            np.transpose(np.flipud(image), (1, 0, 2)), dtype=np.float32
        )
        self.display_image.from_numpy(image_transposed)

    def present(self, image: npt.NDArray[np.float32], sample_count: int) -> None:
        """Load a linear accumulated image; it appears on the next :meth:`show_frame`."""
        display = process_image_for_display(image, tone_map=self.tone_map, gamma=self.gamma)
        self.update_image(display)
        self._sample_count = sample_count

    # =========================================================================
    # Window Loop
    # =========================================================================

    def is_running(self) -> bool:
        """Check if the window is still open."""
        return self.window.running

    def show_frame(self) -> None:
        """Draw the display buffer and present the window frame."""
        self.canvas.set_image(self.display_image)
        self.window.show()

    def run(self, renderer: ProgressiveRenderer) -> None:
        """Render continuously with ``renderer`` until the window is closed.

        One frame is merged and displayed per window frame.
        """
        self._renderer = renderer
        self._initialize_window()

        while self.is_running():
            renderer.step()
            renderer.present(self)
            self._draw_status_panel()
            self.show_frame()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        # Windows generally always has display
        if os.name == "nt":
            return True

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            return not (ssh_connection and not display)

        # On Linux, check for X11 or Wayland
        return bool(display or wayland)

    # =========================================================================
    # Reactive Rendering Support
    # =========================================================================

    def set_params(self, params: CornellBoxParams) -> None:
        """Set the scene parameters for reactive rendering.

        When the parameters differ from the ones the current scene was built
        with, the scene is reloaded and accumulation restarts on the next frame.
        """
        self._params = params

    def _params_changed(self) -> bool:
        return self._params is not None and self._params != self._current_params

    def _rebuild_renderer(self, config: RenderConfig, multisample: int, jitter: bool) -> None:
        """Build the renderer once, then reload the Cornell box from the current params.

        Later rebuilds upload the new shape values into the existing scene and
        restart accumulation, so no fields or kernels are allocated per edit.
        """
        # Import here to avoid circular imports
        from lumen.core.progressive import ProgressiveRenderer
        from lumen.scene import CornellBoxParams, Scene, create_cornell_box_scene

        params = self._params if self._params is not None else CornellBoxParams()
        shapes, camera_config = create_cornell_box_scene(
            params, multisample=multisample, jitter=jitter
        )

        if self._renderer is None:
            self._renderer = ProgressiveRenderer(Scene(shapes), camera_config, config)
        else:
            self._renderer.scene.reload(shapes)
            self._renderer.reset()
        self._current_params = params
        logger.info("Scene rebuilt with %s", params)

    def run_reactive(
        self,
        config: RenderConfig | None = None,
        *,
        multisample: int = 1,
        jitter: bool = False,
    ) -> None:
        """Run the reactive rendering loop over the Cornell box.

        On each frame the loop applies control changes (rebuilding the scene
        and restarting accumulation when needed), merges one frame and shows
        the running mean. It continues until the window is closed.

        Args:
            config: Render settings. Width and height default to the window
                size.
            multisample: Rays per pixel along each axis.
            jitter: Whether to jitter sub-samples.
        """
        from lumen.core.progressive import RenderConfig
        from lumen.scene import CornellBoxParams

        if config is None:
            config = RenderConfig(width=self.width, height=self.height, gamma=self.gamma)
        if self._params is None:
            self._params = CornellBoxParams()

        self._initialize_window()
        self._rebuild_renderer(config, multisample, jitter)

        while self.is_running():
            if self._params_changed():
                self._rebuild_renderer(config, multisample, jitter)

            assert self._renderer is not None
            self._renderer.step()
            self._renderer.present(self)

            self._draw_status_panel()
            self._draw_controls_panel()
            self.show_frame()

    def _draw_status_panel(self) -> None:
        with self.window.GUI.sub_window("Render", 0.02, 0.02, 0.25, 0.12) as gui:
            gui.text(f"Samples: {self._sample_count}")
            if gui.button("Export PNG"):
                self._export_png()

    def _draw_controls_panel(self) -> None:
        """Draw the light and wall color controls and queue param changes."""
        from lumen.scene import CornellBoxParams

        assert self._params is not None
        params = self._params

        with self.window.GUI.sub_window("Scene", 0.02, 0.16, 0.25, 0.40) as gui:
            emission = gui.slider_float(
                "Light", params.light_emission[0], minimum=0.0, maximum=MAX_LIGHT_EMISSION
            )
            left = tuple(
                gui.slider_float(f"Left {c}", v, minimum=0.0, maximum=1.0)
                for c, v in zip("RGB", params.left_wall_color)
            )
            right = tuple(
                gui.slider_float(f"Right {c}", v, minimum=0.0, maximum=1.0)
                for c, v in zip("RGB", params.right_wall_color)
            )

        def moved(new: tuple[float, ...], old: tuple[float, ...]) -> bool:
            return any(abs(a - b) > SLIDER_EPSILON for a, b in zip(new, old))

        light = (emission, emission, emission)
        if (
            moved(light, params.light_emission)
            or moved(left, params.left_wall_color)
            or moved(right, params.right_wall_color)
        ):
            self._params = CornellBoxParams(
                light_emission=light,
                left_wall_color=left,
                right_wall_color=right,
                wall_color=params.wall_color,
            )

    def _export_png(self) -> None:
        """Export the current render to a timestamped PNG file."""
        from lumen.preview.export import PngSink

        if self._renderer is None:
            logger.error("No renderer available for export")
            return

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"cornell_box_{timestamp}.png"
        self._renderer.present(
            PngSink(filename, tone_map=self.tone_map, gamma=self.gamma)
        )
