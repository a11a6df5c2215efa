"""Image export utilities for rendered images.

Rendered images are linear float arrays of shape (H, W, 3). Before they are
written, every channel is gamma corrected (gamma 2, i.e. a square root),
clamped to [0, 0.999] and scaled to an integer in [0, 255].

Supported formats:
    - PPM (plain-text P3, the renderer's native output)
    - PNG (8-bit via Pillow)

Example:
    >>> import sys
    >>> from pathlite.core.integrator import render
    >>> from pathlite.preview.export import save_png, write_ppm
    >>>
    >>> image = render(camera, world)
    >>> write_ppm(image, sys.stdout)
    >>> save_png(image, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Channel values are clamped to this range before scaling to bytes
INTENSITY_MIN = 0.0
INTENSITY_MAX = 0.999


def linear_to_gamma(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Apply gamma 2 correction: sqrt(x) for positive x, 0 otherwise.

    Args:
        image: Linear color values of any shape.

    Returns:
        Gamma-corrected values (float64, same shape).
    """
    linear = np.asarray(image, dtype=np.float64)
    return np.sqrt(np.maximum(linear, 0.0))


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit output values.

    Each channel is gamma corrected, clamped to [0, 0.999] and mapped with
    int(256 * x), so 1.0 and above become 255 and 0 becomes 0.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    gamma = linear_to_gamma(image)
    clamped = np.clip(gamma, INTENSITY_MIN, INTENSITY_MAX)
    return (256.0 * clamped).astype(np.uint8)


def _check_image_shape(image: npt.NDArray) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def write_ppm(image: npt.NDArray[np.floating], stream: TextIO) -> None:
    """Write a linear image to a text stream as a plain (P3) PPM.

    The header is ``P3``, ``"<width> <height>"`` and ``255``, followed by
    one ``"R G B"`` line per pixel, top row first, left to right.

    Args:
        image: Linear image array of shape (H, W, 3).
        stream: Text stream to write to.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    _check_image_shape(image)
    height, width, _ = image.shape
    pixels = image_to_uint8(image).reshape(-1, 3)

    stream.write(f"P3\n{width} {height}\n255\n")
    stream.writelines(f"{r} {g} {b}\n" for r, g, b in pixels.tolist())


def save_ppm(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a linear image as a plain (P3) PPM file."""
    with open(filepath, "w", encoding="ascii") as stream:
        write_ppm(image, stream)
    logger.info("Wrote %s", filepath)


def save_png(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a linear image as an 8-bit PNG file.

    Uses the same gamma correction and byte conversion as the PPM output.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    _check_image_shape(image)
    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath)
    logger.info("Wrote %s", filepath)
