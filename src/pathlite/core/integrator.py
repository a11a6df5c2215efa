"""Monte Carlo light transport integrator and render loop.

For every pixel the renderer averages ``samples_per_pixel`` estimates of the
light arriving along jittered camera rays. Each estimate follows one path
through the scene:

    - the ray misses everything: the sky gradient is returned
    - the ray hits a surface whose material absorbs it: black
    - the material scatters the ray: its attenuation multiplies the light
      carried by the scattered ray
    - the bounce budget (max_depth) runs out: black

Taichi functions cannot recurse, so the path is followed with a loop that
carries the product of the attenuations seen so far. This is equivalent to
``attenuation * ray_color(scattered, depth - 1)``.

Intersections are searched from ``T_MIN = 1e-4`` rather than 0 so that a ray
leaving a surface does not hit that same surface again due to round-off
("shadow acne").

Scanlines are rendered one kernel launch at a time; pixels of a scanline are
evaluated in parallel. Results are kept in a preallocated color buffer and
returned as one array, so output order never depends on execution order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlite.camera.camera import Camera
    >>> from pathlite.core.integrator import render
    >>> from pathlite.scene.world import HittableList
    >>>
    >>> world = HittableList()
    >>> mat = world.add_lambertian_material((0.5, 0.5, 0.5))
    >>> world.add_sphere((0.0, 0.0, -1.0), 0.5, mat)
    >>> image = render(Camera(image_width=64, samples_per_pixel=4), world)
"""

import logging
import math
import sys
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, TextIO

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathlite.camera.camera import get_ray, is_camera_initialized
from pathlite.core.interval import Interval
from pathlite.core.ray import Ray
from pathlite.core.vector import vec3
from pathlite.geometry.hittable import HitRecord
from pathlite.materials.dielectric import scatter_dielectric_by_id
from pathlite.materials.lambertian import scatter_lambertian_by_id
from pathlite.materials.metal import scatter_metal_by_id
from pathlite.scene.intersection import intersect_scene
from pathlite.scene.world import MaterialType, get_material_type, get_material_type_index

if TYPE_CHECKING:
    from pathlite.camera.camera import Camera
    from pathlite.scene.world import HittableList

logger = logging.getLogger(__name__)

# Callback receives (scanlines_remaining, image_height)
ProgressCallback = Callable[[int, int], None]

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min and t_max for ray intersection
T_MIN = 1e-4
T_MAX = math.inf

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Averaged linear color per pixel, indexed [column, row] with row 0 at the top.
# Stored in f32 like the returned image.
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Result slot for single-ray queries from Python
_trace_result = ti.Vector.field(3, dtype=ti.f64, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the color buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions exceed maximum supported size.
    """
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
    """Clear the color buffer to zero."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Raise if setup_render_target() has not been called."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def _check_camera_initialized() -> None:
    """Raise if no camera has been uploaded."""
    if not is_camera_initialized():
        raise RuntimeError("Camera not initialized. Call Camera.initialize() first.")


# =============================================================================
# Light Transport
# =============================================================================


@ti.func
def background(direction: vec3) -> vec3:
    """Sky gradient seen by rays that escape the scene.

    Blends white at the horizon-down direction into light blue overhead
    based on the normalized vertical component of the direction.
    """
    unit_direction = tm.normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * vec3(1.0, 1.0, 1.0) + a * vec3(0.5, 0.7, 1.0)


@ti.func
def scatter(incident_direction: vec3, rec: HitRecord):
    """Dispatch to the scatter function of the material that was hit.

    Args:
        incident_direction: Direction of the incoming ray.
        rec: The hit record of the intersection.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material ids absorb the ray.
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, rec.normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, rec.normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, rec.normal, rec.front_face
        )

    return scattered_direction, attenuation, did_scatter


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the color of the light arriving along a ray.

    Args:
        ray: The ray to follow.
        depth: Number of bounces still allowed. depth <= 0 yields black.

    Returns:
        The estimated linear color (RGB).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction

    # Active flag for path continuation
    active = 1

    for _ in range(depth):
        if active == 1:
            current = Ray(origin=origin, direction=direction)
            rec = intersect_scene(current, Interval(min=T_MIN, max=T_MAX))

            if rec.hit == 0:
                color = throughput * background(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = scatter(direction, rec)

                if did_scatter == 0:
                    # Absorbed
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    # Paths still active here ran out of bounces and contribute black
    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_scanline(
    row: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    pixel_samples_scale: ti.f64,
):
    """Render every pixel of one scanline into the color buffer."""
    for i in range(width):
        pixel_color = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            pixel_color += ray_color(get_ray(i, row), max_depth)
        _color_buffer[i, row] = ti.cast(pixel_samples_scale * pixel_color, ti.f32)


@ti.kernel
def _trace_ray(origin: vec3, direction: vec3, depth: ti.i32):
    """Evaluate ray_color for one ray into _trace_result."""
    # Single-iteration loop keeps scene traversal serial inside it
    for _ in range(1):
        _trace_result[None] = ray_color(Ray(origin=origin, direction=direction), depth)


@ti.kernel
def _render_pixel_sample(pixel_i: ti.i32, pixel_j: ti.i32, depth: ti.i32):
    """Evaluate one jittered camera sample for a pixel into _trace_result."""
    for _ in range(1):
        _trace_result[None] = ray_color(get_ray(pixel_i, pixel_j), depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
) -> tuple[float, float, float]:
    """Evaluate the color along a single ray against the current scene.

    Python-callable entry point for testing and debugging; render() is the
    production path.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        depth: Bounce budget.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    _trace_ray(vec3(*origin), vec3(*direction), depth)
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(pixel_i: int, pixel_j: int, depth: int) -> tuple[float, float, float]:
    """Evaluate one jittered camera sample for pixel (i, j).

    Raises:
        RuntimeError: If no camera has been initialized.
    """
    _check_camera_initialized()
    _render_pixel_sample(pixel_i, pixel_j, depth)
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered linear image as a NumPy array.

    Returns:
        Array of shape (height, width, 3), row 0 at the top, dtype float32.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(full_image[:width, :height, :], (1, 0, 2))
    return np.ascontiguousarray(image, dtype=np.float32)


def render(
    camera: "Camera",
    world: "HittableList",
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.float32]:
    """Render the scene through the camera.

    Initializes the camera, then renders scanline by scanline from the top.
    Each pixel is the average of camera.samples_per_pixel samples.

    Args:
        camera: Camera configuration. initialize() is called here.
        world: The scene to render. It is uploaded to the scene fields first
            if another list replaced it there.
        callback: Optional callback, called before each scanline with
            (scanlines_remaining, image_height) and once more with
            (0, image_height) when the image is complete.

    Returns:
        Linear color image of shape (image_height, image_width, 3).

    Raises:
        ValueError: If the camera configuration is invalid or the image is
            larger than the render target.
    """
    camera.initialize()
    world.activate()

    width = camera.image_width
    height = camera.image_height
    setup_render_target(width, height)

    logger.info(
        "Rendering %dx%d, %d spp, max depth %d, %d spheres",
        width,
        height,
        camera.samples_per_pixel,
        camera.max_depth,
        len(world),
    )
    start_time = time.perf_counter()

    for j in range(height):
        if callback is not None:
            callback(height - j, height)
        _render_scanline(
            j,
            width,
            camera.samples_per_pixel,
            camera.max_depth,
            camera.pixel_samples_scale,
        )

    if callback is not None:
        callback(0, height)

    logger.info("Render finished in %.2fs", time.perf_counter() - start_time)
    return get_image_numpy()


def make_scanline_reporter(stream: TextIO = sys.stderr) -> ProgressCallback:
    """Build a progress callback printing the remaining scanline count.

    The output overwrites itself with carriage returns and ends with a
    "Done." line once the image is complete.

    Args:
        stream: Text stream to write progress to (default: stderr).

    Returns:
        A ProgressCallback suitable for render().
    """

    def report(remaining: int, total: int) -> None:
        if remaining > 0:
            stream.write(f"\rScanlines remaining: {remaining} ")
        else:
            stream.write("\rDone.                 \n")
        stream.flush()

    return report
