"""Pinhole camera model for perspective projection ray generation.

The camera sits on the optical axis at (0, 0, camera_z) and looks down -z
through an image plane of size view_width x view_height centred on the
origin. A pixel (x, y) of a width x height image maps to the plane point

    wx = ((x - width // 2) / width) * view_width + dx
    wy = ((y - height // 2) / height) * view_height + dy

where dx and dy are uniform jitter within one pixel footprint. The ray
direction is (wx, wy, -camera_z) normalized. Row y = 0 is the first row
written to the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.camera.pinhole import PinholeCamera, setup_camera
    >>>
    >>> camera = PinholeCamera(view_width=20.0, view_height=20.0, camera_z=5.0)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.0, 0.0)  # Ray through the image centre
"""

import logging
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import Ray, make_ray, vec3
from src.spheretrace.core.sampler import random_range

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        view_width: Width of the image plane in world units. Together with
            camera_z this sets the horizontal field of view.
        view_height: Height of the image plane in world units.
        camera_z: Distance from the image plane to the camera, which sits
            at (0, 0, camera_z).
    """

    view_width: float = 20.0
    view_height: float = 20.0
    camera_z: float = 5.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_view_width = ti.field(dtype=ti.f32, shape=())
_view_height = ti.field(dtype=ti.f32, shape=())
_camera_z = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Must be called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If any camera dimension is not positive.
    """
    for name in ("view_width", "view_height", "camera_z"):
        value = getattr(camera, name)
        if value <= 0.0:
            raise ValueError(f"Camera {name} must be positive, got {value}")

    _view_width[None] = camera.view_width
    _view_height[None] = camera.view_height
    _camera_z[None] = camera.camera_z
    logger.debug("Camera set up: %s", camera)


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(wx: ti.f32, wy: ti.f32) -> Ray:
    """Generate a ray through the image-plane point (wx, wy, 0).

    Args:
        wx: Horizontal world coordinate on the image plane.
        wy: Vertical world coordinate on the image plane.

    Returns:
        A Ray from the camera position with a normalized direction.
    """
    camera_z = _camera_z[None]
    origin = vec3(0.0, 0.0, camera_z)
    direction = tm.normalize(vec3(wx, wy, -camera_z))
    return make_ray(origin, direction)


@ti.func
def pixel_to_plane(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32):
    """Map a pixel coordinate to its unjittered image-plane point.

    Returns:
        A tuple (wx, wy).
    """
    wx = (ti.cast(pixel_x - width // 2, ti.f32) / ti.cast(width, ti.f32)) * _view_width[None]
    wy = (ti.cast(pixel_y - height // 2, ti.f32) / ti.cast(height, ti.f32)) * _view_height[None]
    return wx, wy


@ti.func
def get_ray_jittered(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    state: ti.u32,
):
    """Generate a jittered ray for anti-aliasing.

    The jitter is uniform over one pixel footprint centred on the pixel's
    plane point, so averaging many samples integrates over the pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = first row written).
        width: Image width in pixels.
        height: Image height in pixels.
        state: The sample's random stream state.

    Returns:
        A tuple of (new_state, origin, direction) describing the ray.
    """
    half_pixel_w = 0.5 * _view_width[None] / ti.cast(width, ti.f32)
    half_pixel_h = 0.5 * _view_height[None] / ti.cast(height, ti.f32)

    s, dx = random_range(state, -half_pixel_w, half_pixel_w)
    s, dy = random_range(s, -half_pixel_h, half_pixel_h)

    wx, wy = pixel_to_plane(pixel_x, pixel_y, width, height)
    ray = get_ray(wx + dx, wy + dy)
    return s, ray.origin, ray.direction


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with view_width, view_height and camera_z.
    """
    return {
        "view_width": float(_view_width[None]),
        "view_height": float(_view_height[None]),
        "camera_z": float(_camera_z[None]),
    }
