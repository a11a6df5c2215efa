"""Sphere primitive and ray-sphere intersection.

The intersection solves the quadratic obtained by substituting the ray into
the sphere equation, written with the half linear coefficient::

    oc = center - origin
    a  = dot(direction, direction)
    h  = dot(direction, oc)
    c  = dot(oc, oc) - radius^2
    t  = (h -/+ sqrt(h^2 - a*c)) / a

The half coefficient drops the factors of 2 and 4 from the textbook formula,
which removes some cancellation in the discriminant.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlite.geometry.sphere import Sphere, hit_sphere
    >>> # Inside a Taichi kernel:
    >>> # rec = hit_sphere(ray, Sphere(center=vec3(0, 0, -1), radius=0.5,
    >>> #                              material_id=0), Interval(min=1e-4, max=1e10))
"""

import taichi as ti
import taichi.math as tm

from pathlite.core.interval import Interval
from pathlite.core.ray import Ray, ray_at
from pathlite.core.vector import vec3
from pathlite.geometry.hittable import HitRecord, face_normal, make_miss_record


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Never negative; see make_sphere().
        material_id: Unified material id shared with other shapes.
    """

    center: vec3
    radius: ti.f64
    material_id: ti.i32


@ti.func
def make_sphere(center: vec3, radius: ti.f64, material_id: ti.i32) -> Sphere:
    """Create a sphere, clamping a negative radius to zero."""
    return Sphere(center=center, radius=tm.max(radius, 0.0), material_id=material_id)


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Find the nearest intersection of a ray with a sphere.

    The smaller root is tested first. If it lies outside ray_t the larger root
    is tested; if both lie outside there is no hit. A negative discriminant
    means the ray misses the sphere entirely.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test against.
        ray_t: Accepted range of ray parameters (closed).

    Returns:
        A HitRecord for the nearest accepted root, or a miss record.
    """
    result = make_miss_record()

    oc = sphere.center - ray.origin
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    if discriminant >= 0.0:
        sqrtd = ti.sqrt(discriminant)

        # Find the nearest root that lies in the acceptable range
        root = (h - sqrtd) / a
        valid = ray_t.contains(root)
        if valid == 0:
            root = (h + sqrtd) / a
            valid = ray_t.contains(root)

        if valid == 1:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            front_face, normal = face_normal(ray, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result
