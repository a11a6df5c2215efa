"""Geometry module: hit records and the sphere primitive.

Components:
    hittable: HitRecord structure and face orientation
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions returning a HitRecord whose
``hit`` flag tells whether the ray struck the shape.
"""

from .hittable import NO_MATERIAL, HitRecord, face_normal, make_miss_record
from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "NO_MATERIAL",
    "face_normal",
    "make_miss_record",
    "Sphere",
    "hit_sphere",
    "make_sphere",
]
