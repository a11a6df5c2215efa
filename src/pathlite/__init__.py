"""Monte Carlo sphere ray tracer built on Taichi.

This package renders scenes of spheres by following randomly scattered rays
through the scene and averaging their color per pixel. It supports:
- Lambertian (diffuse), metal and dielectric (glass) materials
- A positionable camera with field of view and depth of field
- Plain-text PPM output and PNG export

Subpackages:
    core: Vector helpers, rays, intervals and the render loop
    geometry: Hit records and the sphere primitive
    materials: Scatter functions and material registries
    scene: Scene storage and the host-side HittableList
    camera: Camera configuration and primary ray generation
    preview: Gamma correction and image export

Taichi must be initialized with ti.init(default_fp=ti.f64) before importing the
subpackages, since they allocate Taichi fields at import time. Scene math is
double precision, so the backend must support float64.
"""

__version__ = "0.1.0"
