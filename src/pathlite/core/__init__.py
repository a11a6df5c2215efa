"""Core rendering module.

Components:
    vector: vec3 helpers, reflection/refraction and random sampling
    interval: Closed real intervals used to bound ray parameters
    ray: Ray data structure
    integrator: ray_color, render target and the scanline render loop

All per-ray operations are Taichi functions for parallel execution.
"""

from .interval import EMPTY, UNIVERSE, Interval, empty_interval, make_interval, universe_interval
from .ray import Ray, make_ray, ray_at
from .vector import (
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_range,
    random_unit_vector,
    random_vector,
    reflect,
    reflectance,
    refract,
    vec3,
)

# Note: integrator is NOT imported here to avoid circular imports with the
# camera package. Import it directly:
#   from pathlite.core.integrator import render

__all__ = [
    "Interval",
    "make_interval",
    "empty_interval",
    "universe_interval",
    "EMPTY",
    "UNIVERSE",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "near_zero",
    "reflect",
    "refract",
    "reflectance",
    "random_range",
    "random_vector",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
