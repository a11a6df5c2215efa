"""Dielectric (glass/water) material implementation.

Dielectrics never absorb light. At each hit the ray either reflects or
refracts:

    - Snell's law gives the refracted direction: n1 sin(t1) = n2 sin(t2)
    - Total internal reflection forces a reflection when ri * sin(t1) > 1
    - Otherwise Schlick's approximation gives the probability of reflecting

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlite.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     refraction_index, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pathlite.core.vector import reflect, reflectance, refract, vec3


@ti.func
def refraction_ratio(refraction_index: ti.f64, front_face: ti.i32) -> ti.f64:
    """Effective index ratio for a ray entering (front face) or leaving."""
    ri = refraction_index
    if front_face == 1:
        ri = 1.0 / refraction_index
    return ri


@ti.func
def scatter_dielectric(
    refraction_index: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered direction for a dielectric material.

    Args:
        refraction_index: Refractive index of the material relative to the
            surrounding medium.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit length, facing the incoming ray).
        front_face: 1 if the ray enters the material, 0 if it leaves.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted direction.
        - attenuation: Always (1, 1, 1).
        - did_scatter: Always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ri = refraction_ratio(refraction_index, front_face)

    unit_direction = tm.normalize(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))

    cannot_refract = ri * sin_theta > 1.0

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or reflectance(cos_theta, ri) > ti.random(ti.f64):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ri)

    did_scatter = 1

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 1024

# Storage for dielectric material properties
dielectric_indices = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(refraction_index: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        refraction_index: Refractive index relative to the surrounding medium.
            Default is 1.5 (typical glass). Values below 1.0 are allowed and
            model e.g. an air bubble inside water (1.0 / 1.33).
            Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the refraction index is not positive.
    """
    if refraction_index <= 0.0:
        raise ValueError(
            f"Refraction index = {refraction_index} must be positive."
        )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_indices[idx] = refraction_index
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_index(material_idx: ti.i32) -> ti.f64:
    """Get the refraction index for a dielectric material by index."""
    return dielectric_indices[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Scatter off a registered dielectric material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    refraction_index = get_dielectric_index(material_idx)
    return scatter_dielectric(refraction_index, incident_direction, normal, front_face)
