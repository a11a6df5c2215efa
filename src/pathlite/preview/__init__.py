"""Preview module: converting and writing rendered images.

Components:
    export: Gamma correction, 8-bit conversion, PPM and PNG output

Example:
    >>> from pathlite.preview import save_png
    >>> save_png(image, "output.png")
"""

from pathlite.preview.export import (
    image_to_uint8,
    linear_to_gamma,
    save_png,
    save_ppm,
    write_ppm,
)

__all__ = [
    "linear_to_gamma",
    "image_to_uint8",
    "write_ppm",
    "save_ppm",
    "save_png",
]
