"""Camera module for primary ray generation.

Components:
    camera: Axis-aligned perspective camera with a fixed viewport basis

Ray generation uses normalized viewport coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .camera import (
    Camera,
    get_camera_info,
    get_ray_at_coords,
    setup_camera,
)

__all__ = [
    "Camera",
    "setup_camera",
    "get_ray_at_coords",
    "get_camera_info",
]
