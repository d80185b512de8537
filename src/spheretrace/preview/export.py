"""Image export utilities for rendered images.

Converts the float sample means of the integrator into 8-bit channels and
writes them to disk.

Supported formats:
    - PPM (plain-text P3, written directly)
    - PNG (8-bit via Pillow)

Channel conversion is floor(value * 255). Values are clamped to [0, 1]
first by default; with clamp=False an out-of-range value is an error.

Example:
    >>> from src.spheretrace.preview.export import save_image
    >>> from src.spheretrace.core.integrator import get_image_numpy
    >>>
    >>> save_image(get_image_numpy(), "output.ppm")
"""

import logging
import os
from collections.abc import Iterator

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Maximum channel value of the 8-bit output
MAX_CHANNEL = 255


def image_to_uint8(
    image: npt.NDArray[np.floating],
    *,
    clamp: bool = True,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to uint8 for export.

    Args:
        image: Image array of shape (H, W, 3).
        clamp: Clamp channels to [0, 1]. When False, a channel outside
            [0, 1] (or NaN) raises ValueError.
        gamma: Gamma correction value applied after clamping.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the image is not (H, W, 3), gamma is not positive, or
            clamp is False and a channel is out of range.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    values = np.asarray(image, dtype=np.float64)

    if clamp:
        values = np.clip(np.nan_to_num(values, nan=0.0), 0.0, 1.0)
    elif not np.all((values >= 0.0) & (values <= 1.0)):
        bad = np.argwhere(~((values >= 0.0) & (values <= 1.0)))[0]
        raise ValueError(
            f"Channel value {values[tuple(bad)]} at (row={bad[0]}, col={bad[1]}, "
            f"channel={bad[2]}) is outside [0, 1]"
        )

    if gamma != 1.0:
        values = np.power(values, 1.0 / gamma)

    return np.floor(values * MAX_CHANNEL).astype(np.uint8)


def iter_pixels(image_uint8: npt.NDArray[np.uint8]) -> Iterator[tuple[int, int, int]]:
    """Yield (r, g, b) triples in row-major order, row 0 first."""
    height, width = image_uint8.shape[:2]
    for y in range(height):
        for x in range(width):
            r, g, b = image_uint8[y, x]
            yield int(r), int(g), int(b)


def save_ppm(
    image: npt.NDArray[np.floating],
    filepath: str,
    *,
    clamp: bool = True,
    gamma: float = 1.0,
) -> None:
    """Save an image as a plain-text (P3) PPM file.

    The file holds the header "P3", "<width> <height>", "255" followed by
    one "R G B" line per pixel.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path.
        clamp: Clamp channels to [0, 1] before conversion.
        gamma: Gamma correction value.
    """
    image_uint8 = image_to_uint8(image, clamp=clamp, gamma=gamma)
    height, width = image_uint8.shape[:2]

    with open(filepath, "w", encoding="ascii") as f:
        f.write(f"P3\n{width} {height}\n{MAX_CHANNEL}\n")
        f.writelines(f"{r} {g} {b}\n" for r, g, b in iter_pixels(image_uint8))

    logger.info("Wrote %dx%d PPM image to %s", width, height, filepath)


def save_png(
    image: npt.NDArray[np.floating],
    filepath: str,
    *,
    clamp: bool = True,
    gamma: float = 1.0,
) -> None:
    """Save an image as an 8-bit PNG file.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path.
        clamp: Clamp channels to [0, 1] before conversion.
        gamma: Gamma correction value.
    """
    image_uint8 = image_to_uint8(image, clamp=clamp, gamma=gamma)

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath, format="PNG")

    logger.info(
        "Wrote %dx%d PNG image to %s", image_uint8.shape[1], image_uint8.shape[0], filepath
    )


_WRITERS = {
    ".ppm": save_ppm,
    ".png": save_png,
}


def save_image(
    image: npt.NDArray[np.floating],
    filepath: str,
    *,
    clamp: bool = True,
    gamma: float = 1.0,
) -> None:
    """Save an image, choosing the format from the file extension.

    Raises:
        ValueError: If the extension is not .ppm or .png.
        OSError: If the file cannot be written.
    """
    ext = os.path.splitext(filepath)[1].lower()
    writer = _WRITERS.get(ext)
    if writer is None:
        raise ValueError(
            f"Unsupported image format {ext!r}; expected one of {sorted(_WRITERS)}"
        )
    writer(image, filepath, clamp=clamp, gamma=gamma)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
