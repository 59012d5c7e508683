"""Frame sink protocol.

A frame sink receives the renderer's running mean (linear radiance, shape
(height, width, 3), float32) together with the number of frames merged into
it, and displays or stores it. The renderer never depends on a concrete
sink; see :meth:`lumen.core.progressive.ProgressiveRenderer.present`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt


@runtime_checkable
class FrameSink(Protocol):
    """Anything that can present an accumulated image."""

    def present(self, image: npt.NDArray[np.float32], sample_count: int) -> None:
        """Present a linear (H, W, 3) image accumulated from ``sample_count`` frames."""
        ...
