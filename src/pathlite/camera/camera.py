"""Thin-lens camera model and primary ray generation.

The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view
- Arbitrary aspect ratios
- Jittered sub-pixel sampling for anti-aliasing
- Depth of field via a defocus disk (thin lens)

initialize() builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the plane of perfect focus, ``focus_dist`` in front of the
camera. Pixel (0, 0) is the top-left pixel; ``pixel_delta_v`` points down.
Ray origins are the camera center, or a random point on the defocus disk when
``defocus_angle > 0``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlite.camera.camera import Camera
    >>> camera = Camera(aspect_ratio=16.0 / 9.0, image_width=400, vfov=20.0,
    ...                 lookfrom=(13.0, 2.0, 3.0), lookat=(0.0, 0.0, 0.0),
    ...                 defocus_angle=0.6, focus_dist=10.0)
    >>> camera.initialize()
    >>> camera.image_height
    225
"""

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TextIO

import numpy as np
import taichi as ti

from pathlite.core.ray import Ray, make_ray, vec3
from pathlite.core.vector import random_in_unit_disk

if TYPE_CHECKING:
    from pathlite.core.integrator import ProgressCallback
    from pathlite.scene.world import HittableList

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass
class Camera:
    """Camera configuration and derived viewing geometry.

    The public attributes are set by the caller before rendering. The derived
    attributes are filled in by initialize() and are read-only afterwards.

    Attributes:
        aspect_ratio: Ratio of image width over height.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Count of random samples for each pixel.
        max_depth: Maximum number of ray bounces into the scene.
        vfov: Vertical field of view in degrees.
        lookfrom: Point the camera is looking from.
        lookat: Point the camera is looking at.
        vup: Camera-relative "up" direction.
        defocus_angle: Variation angle of rays through each pixel, in degrees.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10

    vfov: float = 90.0
    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)

    defocus_angle: float = 0.0
    focus_dist: float = 10.0

    # Derived by initialize()
    image_height: int = field(default=0, init=False)
    pixel_samples_scale: float = field(default=0.0, init=False)
    center: np.ndarray = field(default=None, init=False, repr=False)
    pixel00_loc: np.ndarray = field(default=None, init=False, repr=False)
    pixel_delta_u: np.ndarray = field(default=None, init=False, repr=False)
    pixel_delta_v: np.ndarray = field(default=None, init=False, repr=False)
    u: np.ndarray = field(default=None, init=False, repr=False)
    v: np.ndarray = field(default=None, init=False, repr=False)
    w: np.ndarray = field(default=None, init=False, repr=False)
    defocus_disk_u: np.ndarray = field(default=None, init=False, repr=False)
    defocus_disk_v: np.ndarray = field(default=None, init=False, repr=False)

    def _validate(self) -> None:
        """Reject configurations that cannot produce an image."""
        if self.image_width < 1:
            raise ValueError(f"image_width must be at least 1, got {self.image_width}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")
        if self.defocus_angle < 0.0:
            raise ValueError(
                f"defocus_angle must be non-negative, got {self.defocus_angle}"
            )

    def initialize(self) -> None:
        """Derive the viewing geometry and upload it for ray generation.

        Must be called after the configuration is final and before rendering.
        Camera.render() calls it automatically.

        Raises:
            ValueError: If the configuration is degenerate (no samples, empty
                image, coincident lookfrom/lookat, vup parallel to the view
                direction, ...).
        """
        self._validate()

        # Image height is at least one pixel
        self.image_height = max(1, int(self.image_width / self.aspect_ratio))
        self.pixel_samples_scale = 1.0 / self.samples_per_pixel

        lookfrom = np.array(self.lookfrom, dtype=np.float64)
        lookat = np.array(self.lookat, dtype=np.float64)
        vup = np.array(self.vup, dtype=np.float64)
        self.center = lookfrom

        theta = math.radians(self.vfov)
        h = math.tan(theta / 2.0)
        viewport_height = 2.0 * h * self.focus_dist
        viewport_width = viewport_height * (self.image_width / self.image_height)

        # Orthonormal camera basis
        view = lookfrom - lookat
        view_length = np.linalg.norm(view)
        if view_length == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        self.w = view / view_length

        side = np.cross(vup, self.w)
        side_length = np.linalg.norm(side)
        if side_length < 1e-12:
            raise ValueError("vup must not be parallel to the view direction")
        self.u = side / side_length
        self.v = np.cross(self.w, self.u)

        # Vectors across the horizontal and down the vertical viewport edges
        viewport_u = viewport_width * self.u
        viewport_v = viewport_height * -self.v

        self.pixel_delta_u = viewport_u / self.image_width
        self.pixel_delta_v = viewport_v / self.image_height

        viewport_upper_left = (
            self.center - self.focus_dist * self.w - viewport_u / 2.0 - viewport_v / 2.0
        )
        self.pixel00_loc = viewport_upper_left + 0.5 * (self.pixel_delta_u + self.pixel_delta_v)

        defocus_radius = self.focus_dist * math.tan(math.radians(self.defocus_angle / 2.0))
        self.defocus_disk_u = self.u * defocus_radius
        self.defocus_disk_v = self.v * defocus_radius

        _upload_camera(self)
        logger.debug(
            "Camera initialized: %dx%d, %d spp, max depth %d",
            self.image_width,
            self.image_height,
            self.samples_per_pixel,
            self.max_depth,
        )

    def render(
        self,
        world: "HittableList",
        out: TextIO,
        callback: "ProgressCallback | None" = None,
    ) -> np.ndarray:
        """Render the scene and write it to a text stream as a PPM image.

        Args:
            world: The scene to render.
            out: Text stream receiving the P3 image.
            callback: Optional progress callback, see
                pathlite.core.integrator.render().

        Returns:
            The linear color image, shape (image_height, image_width, 3).
        """
        from pathlite.core.integrator import render
        from pathlite.preview.export import write_ppm

        image = render(self, world, callback=callback)
        write_ppm(image, out)
        return image


# =============================================================================
# Taichi Fields for Camera State (kernel-accessible)
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel00_loc = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f64, shape=())
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f64, shape=())
_defocus_angle = ti.field(dtype=ti.f64, shape=())

# Set once a camera has been uploaded
_camera_initialized = ti.field(dtype=ti.i32, shape=())


def _upload_camera(camera: Camera) -> None:
    """Copy derived camera values into the kernel-side fields."""
    _camera_center[None] = camera.center.tolist()
    _pixel00_loc[None] = camera.pixel00_loc.tolist()
    _pixel_delta_u[None] = camera.pixel_delta_u.tolist()
    _pixel_delta_v[None] = camera.pixel_delta_v.tolist()
    _defocus_disk_u[None] = camera.defocus_disk_u.tolist()
    _defocus_disk_v[None] = camera.defocus_disk_v.tolist()
    _defocus_angle[None] = camera.defocus_angle
    _camera_initialized[None] = 1


def is_camera_initialized() -> bool:
    """Check whether a camera has been uploaded with Camera.initialize()."""
    return bool(_camera_initialized[None])


def reset_camera() -> None:
    """Forget the uploaded camera."""
    _camera_initialized[None] = 0


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def sample_square() -> vec3:
    """Random offset in the [-0.5, -0.5] - [0.5, 0.5] unit square."""
    return vec3(ti.random(ti.f64) - 0.5, ti.random(ti.f64) - 0.5, 0.0)


@ti.func
def defocus_disk_sample() -> vec3:
    """Random point on the camera's defocus disk."""
    p = random_in_unit_disk()
    return _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]


@ti.func
def get_ray_through(pixel_i: ti.i32, pixel_j: ti.i32, offset: vec3) -> Ray:
    """Ray from the camera toward a given sub-pixel offset of pixel (i, j).

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        offset: Sub-pixel offset; only x and y are used.

    Returns:
        A ray whose direction is not normalized.
    """
    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(pixel_i, ti.f64) + offset.x) * _pixel_delta_u[None]
        + (ti.cast(pixel_j, ti.f64) + offset.y) * _pixel_delta_v[None]
    )

    ray_origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        ray_origin = defocus_disk_sample()

    return make_ray(ray_origin, pixel_sample - ray_origin)


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32) -> Ray:
    """Generate a jittered camera ray through pixel (i, j).

    The sample point is jittered uniformly inside the pixel for
    anti-aliasing. When accumulated over many samples this produces smooth
    edges.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).

    Returns:
        A Ray from the camera center (or defocus disk) through a random
        point of the pixel.
    """
    return get_ray_through(pixel_i, pixel_j, sample_square())


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with center, pixel00_loc, pixel_delta_u, pixel_delta_v,
        defocus_disk_u and defocus_disk_v as (x, y, z) tuples.
    """
    fields = {
        "center": _camera_center,
        "pixel00_loc": _pixel00_loc,
        "pixel_delta_u": _pixel_delta_u,
        "pixel_delta_v": _pixel_delta_v,
        "defocus_disk_u": _defocus_disk_u,
        "defocus_disk_v": _defocus_disk_v,
    }
    info = {}
    for name, value_field in fields.items():
        value = value_field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
