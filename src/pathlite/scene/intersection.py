"""Scene-level ray intersection over the list of spheres.

The scene is an ordered list of spheres stored in Taichi fields. Querying the
list tests every sphere in insertion order and returns the closest hit, with
the upper bound of the search interval narrowed to the closest ``t`` found so
far. A later sphere therefore replaces the current hit only when it is
strictly closer, and ties resolve to the sphere added first.

Traversal is linear in the number of spheres; there is no acceleration
structure.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlite.scene.intersection import add_sphere, clear_scene, intersect_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from pathlite.core.interval import Interval
from pathlite.core.ray import Ray
from pathlite.core.vector import vec3
from pathlite.geometry.hittable import HitRecord, make_miss_record
from pathlite.geometry.sphere import Sphere, hit_sphere


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Append a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere. Negative values are clamped to 0.
        material_id: The material id to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = max(0.0, radius)
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(i: ti.i32) -> Sphere:
    """Load sphere i from field storage."""
    return Sphere(
        center=sphere_centers[i],
        radius=sphere_radii[i],
        material_id=sphere_material_ids[i],
    )


@ti.func
def intersect_scene(ray: Ray, ray_t: Interval) -> HitRecord:
    """Find the closest intersection of a ray with the scene.

    Args:
        ray: The ray to test.
        ray_t: Accepted range of ray parameters.

    Returns:
        The HitRecord of the closest sphere hit with t inside ray_t, or a
        miss record if nothing is hit (always the case for an empty scene).
    """
    closest_so_far = ray_t.max
    hit_anything = 0
    result = make_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        rec = hit_sphere(ray, get_sphere(i), Interval(min=ray_t.min, max=closest_so_far))
        # Equal t keeps the earlier sphere
        if rec.hit == 1 and (hit_anything == 0 or rec.t < closest_so_far):
            hit_anything = 1
            closest_so_far = rec.t
            result = rec

    return result
