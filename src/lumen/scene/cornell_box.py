"""Reference Cornell-style box scene.

The box spans x in [-2, 2], y in [0, 4] and z in [-2, 2]. It is built from six
single-sided planes, each facing inward:

- Left wall (x = 2): blue
- Right wall (x = -2): yellow
- Floor, ceiling, back and front walls: white
- Light: a large emissive sphere centered above the ceiling whose cap pokes
  through it (center y = 7.95, radius 4)
- Subject: a small white sphere resting on the floor

The camera sits outside the front wall at (0, 2, -5). Since the front wall
faces into the box, it is invisible from outside and the camera sees straight
in; from inside the box it still bounces light.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from lumen.scene import Scene, create_cornell_box_scene
    >>> shapes, camera_config = create_cornell_box_scene()
    >>> scene = Scene(shapes)
    >>> len(scene)
    8
"""

from dataclasses import dataclass

from lumen.camera import CameraConfig
from lumen.geometry import Plane, Shape, Sphere
from lumen.materials import Material

# =============================================================================
# Cornell Box Parameters
# =============================================================================


@dataclass(frozen=True)
class CornellBoxParams:
    """Parameters for configuring the Cornell box scene.

    Attributes:
        light_emission: Emitted radiance of the light sphere.
        left_wall_color: Albedo of the wall at x = 2. Default is blue.
        right_wall_color: Albedo of the wall at x = -2. Default is yellow.
        wall_color: Albedo of the floor, ceiling, back and front walls and of
            the subject sphere. Default is white.

    Example:
        >>> params = CornellBoxParams(light_emission=(20.0, 18.0, 16.0))
        >>> shapes, camera = create_cornell_box_scene(params)
    """

    light_emission: tuple[float, float, float] = (10.0, 10.0, 10.0)
    left_wall_color: tuple[float, float, float] = (0.0, 0.0, 1.0)
    right_wall_color: tuple[float, float, float] = (1.0, 1.0, 0.0)
    wall_color: tuple[float, float, float] = (1.0, 1.0, 1.0)


# =============================================================================
# Cornell Box Constants
# =============================================================================

# Half-width of the box in x and z; the box is BOX_HEIGHT tall
BOX_HALF_WIDTH = 2.0
BOX_HEIGHT = 4.0

LIGHT_CENTER = (0.0, 7.95, 0.0)
LIGHT_RADIUS = 4.0

SUBJECT_CENTER = (0.0, 1.0, 0.0)
SUBJECT_RADIUS = 1.0

# Camera (35mm-style film with a 28mm lens)
CAMERA_POSITION = (0.0, 2.0, -5.0)
CAMERA_DIRECTION = (1.0, 1.0, 1.0)
CAMERA_FOCAL_LENGTH = 0.028
CAMERA_FILM_SIZE = (0.036, 0.024)


# =============================================================================
# Cornell Box Factory
# =============================================================================


def create_cornell_box_scene(
    params: CornellBoxParams | None = None,
    *,
    multisample: int = 1,
    jitter: bool = False,
) -> tuple[list[Shape], CameraConfig]:
    """Create the reference Cornell box scene and its camera.

    Args:
        params: Optional CornellBoxParams for customizing the light and the
            wall colors. If None, uses default CornellBoxParams().
        multisample: Rays per pixel along each axis for the camera.
        jitter: Whether the camera jitters its sub-samples.

    Returns:
        A tuple of (shapes, camera_config). Pass the shapes to
        :class:`~lumen.scene.Scene` and the config to the renderer.
    """
    if params is None:
        params = CornellBoxParams()

    # =========================================================================
    # Materials
    # =========================================================================

    light = Material(color=(0.0, 0.0, 0.0), emission=params.light_emission, name="light")
    white = Material(color=params.wall_color, name="white")
    left = Material(color=params.left_wall_color, name="left_wall")
    right = Material(color=params.right_wall_color, name="right_wall")

    # =========================================================================
    # Walls (6 planes facing into the box)
    # =========================================================================

    w = BOX_HALF_WIDTH
    shapes: list[Shape] = [
        Plane(center=(w, 0.0, 0.0), normal=(-1.0, 0.0, 0.0), material=left),
        Plane(center=(-w, 0.0, 0.0), normal=(1.0, 0.0, 0.0), material=right),
        Plane(center=(0.0, BOX_HEIGHT, 0.0), normal=(0.0, -1.0, 0.0), material=white),
        Plane(center=(0.0, 0.0, 0.0), normal=(0.0, 1.0, 0.0), material=white),
        Plane(center=(0.0, 0.0, w), normal=(0.0, 0.0, -1.0), material=white),
        Plane(center=(0.0, 0.0, -w), normal=(0.0, 0.0, 1.0), material=white),
    ]

    # =========================================================================
    # Spheres
    # =========================================================================

    shapes.append(Sphere(center=LIGHT_CENTER, radius=LIGHT_RADIUS, material=light))
    shapes.append(Sphere(center=SUBJECT_CENTER, radius=SUBJECT_RADIUS, material=white))

    # =========================================================================
    # Camera Setup
    # =========================================================================

    camera = CameraConfig(
        position=CAMERA_POSITION,
        direction=CAMERA_DIRECTION,
        focal_length=CAMERA_FOCAL_LENGTH,
        film_size=CAMERA_FILM_SIZE,
        multisample=multisample,
        jitter=jitter,
    )

    return shapes, camera
