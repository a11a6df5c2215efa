"""Lambertian (ideal diffuse) material implementation.

Diffuse surfaces scatter toward ``normal + random_unit_vector()``. Because the
random unit vector is uniform on the sphere, the resulting directions follow a
cosine-weighted distribution around the normal, which is the ideal Lambertian
lobe. The attenuation is the material's albedo and the ray always scatters.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlite.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, normal)
"""

import taichi as ti

from pathlite.core.vector import near_zero, random_unit_vector, vec3


@ti.func
def lambertian_direction(normal: vec3, unit_sample: vec3) -> vec3:
    """Combine a normal with a unit sample into a diffuse scatter direction.

    If the sample nearly cancels the normal, the sum is numerically zero and
    the normal itself is returned instead.

    Args:
        normal: The unit surface normal at the hit point.
        unit_sample: A unit vector drawn uniformly from the sphere.

    Returns:
        A scatter direction that is never near zero.
    """
    direction = normal + unit_sample
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(
    albedo: vec3,
    normal: vec3,
):
    """Sample a scattered direction for a Lambertian material.

    Args:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        normal: The surface normal at the hit point (unit length).

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: normal plus a random unit vector (not normalized).
        - attenuation: The albedo.
        - did_scatter: Always 1.
    """
    scattered_direction = lambertian_direction(normal, random_unit_vector())
    attenuation = albedo
    did_scatter = 1
    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 1024

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component should be in [0, 1] for energy conservation.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(
    material_idx: ti.i32,
    normal: vec3,
):
    """Scatter off a registered Lambertian material.

    Args:
        material_idx: The index of the material in the registry.
        normal: The surface normal at the hit point (unit length).

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    albedo = get_lambertian_albedo(material_idx)
    return scatter_lambertian(albedo, normal)
