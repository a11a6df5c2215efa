"""Hit record structure shared by every intersectable shape.

Every intersection routine in the renderer has the same contract::

    rec = hit_<shape>(ray, shape, ray_t)

where ``ray_t`` is the :class:`~pathlite.core.interval.Interval` of accepted
ray parameters and ``rec.hit`` reports whether the nearest intersection with
``t`` inside ``ray_t`` exists. Records are built per query inside kernels and
never stored.
"""

import taichi as ti
import taichi.math as tm

from pathlite.core.ray import Ray
from pathlite.core.vector import vec3

# Material id carried by records that did not hit anything
NO_MATERIAL = -1


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The unit surface normal at the intersection point. Always
            points against the incoming ray. Only valid if hit == 1.
        front_face: Whether the ray struck the outward-facing side (1) or the
            inside (0). Only valid if hit == 1.
        material_id: Unified material id of the surface, or NO_MATERIAL.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def face_normal(ray: Ray, outward_normal: vec3):
    """Orient a geometric normal against the incoming ray.

    Args:
        ray: The ray that produced the intersection.
        outward_normal: The unit normal pointing out of the surface.

    Returns:
        A tuple (front_face, normal). front_face is 1 when the ray arrives
        from outside the surface; normal is outward_normal in that case and
        its negation otherwise.
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray.direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=NO_MATERIAL,
    )
