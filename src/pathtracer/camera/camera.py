"""Axis-aligned perspective camera for primary ray generation.

The camera sits at ``position`` and looks down -Z with +Y up. Its viewport is
a ``viewport_width`` x ``viewport_height`` rectangle placed ``focal_length``
in front of the camera. The basis is fixed:

- right: (viewport_width, 0, 0), spans the viewport horizontally
- up: (0, viewport_height, 0), spans the viewport vertically
- back: (0, 0, focal_length), points from the viewport toward the camera

Ray directions are not normalized: a ray through (u, v) points exactly at the
corresponding viewport point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.camera.camera import Camera, get_ray_at_coords, setup_camera
    >>>
    >>> camera = Camera.from_aspect_ratio(16.0 / 9.0)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray_at_coords(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from src.pathtracer.core.ray import Ray, make_ray

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class Camera:
    """Configuration for an axis-aligned perspective camera.

    Attributes:
        focal_length: Distance from the camera to the viewport.
        viewport_width: Width of the viewport in world units.
        viewport_height: Height of the viewport in world units.
        position: Camera position in world space (x, y, z).
    """

    focal_length: float
    viewport_width: float
    viewport_height: float
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        for name in ("focal_length", "viewport_width", "viewport_height"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0.0:
                raise ValueError(f"Camera {name} must be positive, got {value}")
        if len(self.position) != 3:
            raise ValueError(f"Camera position must have 3 components, got {self.position}")

    @classmethod
    def from_aspect_ratio(
        cls,
        aspect_ratio: float,
        viewport_height: float = 2.0,
        focal_length: float = 1.0,
    ) -> "Camera":
        """Create a camera whose viewport matches an image aspect ratio.

        Args:
            aspect_ratio: Image width divided by height.
            viewport_height: Height of the viewport in world units.
            focal_length: Distance from the camera to the viewport.
        """
        return cls(
            focal_length=focal_length,
            viewport_width=aspect_ratio * viewport_height,
            viewport_height=viewport_height,
        )

    @property
    def right(self) -> tuple[float, float, float]:
        return (self.viewport_width, 0.0, 0.0)

    @property
    def up(self) -> tuple[float, float, float]:
        return (0.0, self.viewport_height, 0.0)

    @property
    def back(self) -> tuple[float, float, float]:
        return (0.0, 0.0, self.focal_length)

    @property
    def lower_left_corner(self) -> tuple[float, float, float]:
        """Viewport corner at (u, v) = (0, 0): position - right/2 - up/2 - back."""
        corner = (
            np.array(self.position, dtype=np.float64)
            - np.array(self.right) / 2.0
            - np.array(self.up) / 2.0
            - np.array(self.back)
        )
        return (float(corner[0]), float(corner[1]), float(corner[2]))

    def ray_direction(self, u: float, v: float) -> tuple[float, float, float]:
        """Python-side direction of the ray through (u, v)."""
        direction = (
            np.array(self.lower_left_corner)
            + u * np.array(self.right)
            + v * np.array(self.up)
            - np.array(self.position)
        )
        return (float(direction[0]), float(direction[1]), float(direction[2]))


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_back = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload camera state to the Taichi fields.

    Must be called before rendering, from Python scope.

    Args:
        camera: Camera configuration.
    """
    _camera_position[None] = camera.position
    _camera_right[None] = camera.right
    _camera_up[None] = camera.up
    _camera_back[None] = camera.back
    _lower_left_corner[None] = camera.lower_left_corner


@ti.func
def get_ray_at_coords(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized viewport coordinates (u, v).

    - u = 0: left edge, u = 1: right edge
    - v = 0: bottom edge, v = 1: top edge

    Args:
        u: Horizontal coordinate (left to right).
        v: Vertical coordinate (bottom to top).

    Returns:
        A Ray from the camera position toward the viewport point. The direction
        is not normalized.
    """
    origin = _camera_position[None]
    direction = _lower_left_corner[None] + u * _camera_right[None] + v * _camera_up[None] - origin
    return make_ray(origin, direction)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with position, right, up, back and lower_left.
    """
    fields = {
        "position": _camera_position,
        "right": _camera_right,
        "up": _camera_up,
        "back": _camera_back,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, field in fields.items():
        value = field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
