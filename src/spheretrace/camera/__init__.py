"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole camera on the optical axis looking down -z

Camera responsibilities:
    - Map pixel coordinates to points on the image plane
    - Apply per-sample jitter within the pixel footprint
    - Produce normalized primary rays from the camera position
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    pixel_to_plane,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "pixel_to_plane",
    "get_camera_info",
]
