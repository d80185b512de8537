"""Radiance estimator and render loop.

The radiance along a ray is defined recursively:

    trace(ray, depth):
        depth == max_depth  -> black
        no hit              -> background color
        hit                 -> attenuate(material, trace(scattered, depth + 1))

Every material's attenuation rule is affine in the incident radiance,
radiance = ambient + attenuation * incident. Taichi kernels cannot recurse,
so trace_radiance() unrolls the recursion into a bounded loop that adds each
bounce's ambient term weighted by the product of the attenuations before it:

    L = a0 + b0 * (a1 + b1 * (a2 + ...))

Running out of depth adds nothing and escaping adds the weighted background,
which gives the same value as the recursive definition. Each call follows a
single path; noise is reduced only by averaging samples per pixel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.core.integrator import render_image, setup_render_target
    >>> from src.spheretrace.scene.presets import create_default_scene
    >>> from src.spheretrace.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(512, 512)
    >>> render_image(num_samples=32)
"""

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.spheretrace.camera.pinhole import get_ray_jittered
from src.spheretrace.core.sampler import seed_stream
from src.spheretrace.geometry.sphere import EPSILON, T_MAX
from src.spheretrace.materials.dielectric import (
    get_dielectric_base_color,
    get_dielectric_refraction_index,
    scatter_dielectric,
)
from src.spheretrace.materials.lambertian import scatter_lambertian_by_id
from src.spheretrace.materials.metal import (
    get_metal_base_color,
    scatter_metal,
)
from src.spheretrace.scene.intersection import intersect_scene
from src.spheretrace.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum path length (recursion depth of the estimator)
MAX_DEPTH = 4

# Radiance of rays that leave the scene
BACKGROUND_COLOR = (0.8, 1.0, 1.0)

# Default seed of the per-sample random streams
DEFAULT_SEED = 0


@dataclass
class RenderSettings:
    """Global settings of the radiance estimator.

    Attributes:
        max_depth: Maximum number of bounces. A path reaching it contributes
            black. Must be non-negative.
        background: Radiance returned by rays that miss every sphere.
        seed: Seed of the per-sample random streams.
    """

    max_depth: int = MAX_DEPTH
    background: tuple[float, float, float] = BACKGROUND_COLOR
    seed: int = DEFAULT_SEED


_max_depth = ti.field(dtype=ti.i32, shape=())
_background = ti.Vector.field(3, dtype=ti.f32, shape=())
_seed = ti.field(dtype=ti.i32, shape=())
_settings_initialized = ti.field(dtype=ti.i32, shape=())


def configure_render(settings: RenderSettings | None = None) -> None:
    """Apply estimator settings. Defaults are used when settings is None.

    Raises:
        ValueError: If max_depth is negative or the background color has
            a negative channel.
    """
    if settings is None:
        settings = RenderSettings()

    if settings.max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {settings.max_depth}")
    if len(settings.background) != 3 or any(c < 0.0 for c in settings.background):
        raise ValueError(f"Invalid background color: {settings.background}")

    _max_depth[None] = settings.max_depth
    _background[None] = [float(c) for c in settings.background]
    # Stream seeds are hashed as 32-bit values
    _seed[None] = int(settings.seed) & 0x7FFFFFFF
    _settings_initialized[None] = 1
    logger.debug("Render settings: %s", settings)


def reset_render_settings() -> None:
    """Forget configured settings; the next render falls back to defaults."""
    _settings_initialized[None] = 0


def get_render_settings() -> RenderSettings:
    """Get the active estimator settings."""
    _ensure_settings()
    background = _background[None]
    return RenderSettings(
        max_depth=int(_max_depth[None]),
        background=(float(background[0]), float(background[1]), float(background[2])),
        seed=int(_seed[None]),
    )


def _ensure_settings() -> None:
    if _settings_initialized[None] == 0:
        configure_render()


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running mean of the samples of each pixel, indexed [x, y]
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel (preallocated to max size)
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def release_render_target() -> None:
    """Clear the buffers and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Dispatch to the scatter function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The outward unit normal at the hit point.
        state: The sample's random stream state.

    Returns:
        A tuple of (new_state, direction, ambient, attenuation, did_scatter).
        did_scatter is 0 only for an unknown material, which absorbs the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    new_state = state
    direction = vec3(0.0, 0.0, 0.0)
    ambient = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 1

    if mat_type == int(MaterialType.LAMBERTIAN):
        new_state, direction, ambient, attenuation = scatter_lambertian_by_id(
            type_index, normal, state
        )

    elif mat_type == int(MaterialType.METAL):
        direction, ambient, attenuation = scatter_metal(
            get_metal_base_color(type_index), incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        direction, ambient, attenuation = scatter_dielectric(
            get_dielectric_base_color(type_index),
            get_dielectric_refraction_index(type_index),
            incident_direction,
            normal,
        )

    else:
        did_scatter = 0

    return new_state, direction, ambient, attenuation, did_scatter


# =============================================================================
# Radiance Estimator
# =============================================================================


@ti.func
def trace_radiance(ray_origin: vec3, ray_direction: vec3, state: ti.u32):
    """Estimate the radiance arriving along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        state: The sample's random stream state.

    Returns:
        A tuple of (new_state, radiance).
    """
    s = state
    origin = ray_origin
    direction = ray_direction

    radiance = vec3(0.0, 0.0, 0.0)
    # Product of the attenuations of all bounces so far
    weight = vec3(1.0, 1.0, 1.0)

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(_max_depth[None]):
        if active == 1:
            rec = intersect_scene(origin, direction, EPSILON, T_MAX)

            if rec.hit == 0:
                radiance += weight * _background[None]
                active = 0
            else:
                s, new_direction, ambient, attenuation, did_scatter = _scatter_material(
                    rec.material_id, direction, rec.normal, s
                )
                if did_scatter == 0:
                    active = 0
                else:
                    radiance += weight * ambient
                    weight *= attenuation
                    origin = rec.point
                    direction = new_direction

    return s, radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32):
    """Render one sample per pixel and fold it into the running mean."""
    for x, y in ti.ndrange(width, height):
        sample_index = _sample_count[x, y]
        state = seed_stream(y * width + x, sample_index, _seed[None])
        state, origin, direction = get_ray_jittered(x, y, width, height, state)
        state, color = trace_radiance(origin, direction, state)

        _sample_count[x, y] += 1
        n = _sample_count[x, y]
        _color_buffer[x, y] += (color - _color_buffer[x, y]) / ti.cast(n, ti.f32)


# Result slot of the single-ray kernels
_single_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _render_single_pixel(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    sample_index: ti.i32,
):
    """Render one sample of one pixel into _single_result."""
    # One-iteration outer loop keeps the bounce loop serial
    for _ in range(1):
        state = seed_stream(pixel_y * width + pixel_x, sample_index, _seed[None])
        state, origin, direction = get_ray_jittered(pixel_x, pixel_y, width, height, state)
        state, color = trace_radiance(origin, direction, state)
        _single_result[None] = color


@ti.kernel
def _trace_single_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    stream: ti.i32,
):
    """Trace one ray given by its components into _single_result."""
    for _ in range(1):
        state = seed_stream(0, stream, _seed[None])
        state, color = trace_radiance(vec3(ox, oy, oz), vec3(dx, dy, dz), state)
        _single_result[None] = color


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    stream: int = 0,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray from Python.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z). Normalized by the caller.
        stream: Selects the random stream used for stochastic materials.

    Returns:
        Tuple of (R, G, B) radiance.
    """
    _ensure_settings()
    _trace_single_ray(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], stream
    )
    color = _single_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(pixel_x: int, pixel_y: int, sample_index: int = 0) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = first row).
        sample_index: Which sample of the pixel to evaluate.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    _ensure_settings()

    width, height = get_image_dimensions()
    _render_single_pixel(pixel_x, pixel_y, width, height, sample_index)

    color = _single_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1) -> None:
    """Render the image with the specified number of samples per pixel.

    Accumulates samples into the color buffer. Can be called multiple times
    to add more samples.

    Args:
        num_samples: Number of samples to render per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    _ensure_settings()

    width, height = get_image_dimensions()

    for _ in range(num_samples):
        _render_one_spp(width, height)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    The array has shape (height, width, 3), rows in output order (row 0
    first), and holds the unclamped per-pixel sample means.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    return np.ascontiguousarray(image, dtype=np.float32)
