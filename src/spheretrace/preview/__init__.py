"""Preview module for image output.

Components:
    export: 8-bit conversion and PPM/PNG writers

Example:
    >>> from src.spheretrace.preview import save_image
    >>> from src.spheretrace.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(512, 512)
    >>> renderer.render(32)
    >>> save_image(renderer.get_image_numpy(), "output.png")
"""

from src.spheretrace.preview.export import (
    compute_rmse,
    image_to_uint8,
    iter_pixels,
    save_image,
    save_png,
    save_ppm,
)

__all__ = [
    "image_to_uint8",
    "iter_pixels",
    "save_ppm",
    "save_png",
    "save_image",
    "compute_rmse",
]
