"""Vector arithmetic and random sampling helpers for Taichi kernels.

Points, directions and colors all share the ``vec3`` type. Every helper in
this module is a ``@ti.func`` and can only be called from inside a Taichi
kernel (or another Taichi function).

Random draws use ``ti.random``, which keeps an independent generator state per
Taichi thread. Seeding is left to the caller through
``ti.init(random_seed=...)``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlite.core.vector import reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# Double precision throughout; tm.vec3 is bound to float32 when taichi is
# imported. Large spheres need f64 to keep |oc|^2 - r^2 accurate near T_MIN.
vec3 = ti.types.vector(3, ti.f64)

# Components below this magnitude are treated as zero
NEAR_ZERO_EPSILON = 1e-8

# Upper bound on rejection-sampling attempts inside kernels
MAX_REJECTION_ATTEMPTS = 100


# =============================================================================
# Vector Arithmetic
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Return the unit vector pointing along v."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is close to zero in every component.

    Used to catch degenerate scatter directions.

    Args:
        v: The vector to check.

    Returns:
        1 if all components are below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    result = 0
    if ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s:
        result = 1
    return result


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a direction about a surface normal.

    Computes ``v - 2 * dot(v, n) * n``. The normal must be unit length; v
    need not be.

    Args:
        v: The incoming direction (pointing toward the surface).
        n: The unit surface normal.

    Returns:
        The mirrored direction, with the same length as v.
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f64) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The result is split into the components perpendicular and parallel to the
    normal. The caller is responsible for checking total internal reflection
    before calling; under total internal reflection the parallel term uses
    the absolute value under the square root and the result is not physical.

    Args:
        uv: The incoming unit direction.
        n: The unit surface normal, on the same side as the incoming ray.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def reflectance(cosine: ti.f64, refraction_index: ti.f64) -> ti.f64:
    """Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        refraction_index: Ratio of refractive indices at the interface.

    Returns:
        The approximate probability that the ray reflects.
    """
    r0 = (1.0 - refraction_index) / (1.0 + refraction_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_range(lo: ti.f64, hi: ti.f64) -> ti.f64:
    """Return a uniform random number in [lo, hi)."""
    return lo + (hi - lo) * ti.random(ti.f64)


@ti.func
def random_vector(lo: ti.f64, hi: ti.f64) -> vec3:
    """Return a vector whose components are uniform in [lo, hi)."""
    return vec3(random_range(lo, hi), random_range(lo, hi), random_range(lo, hi))


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling over the enclosing cube. Points extremely close to
    the origin are rejected as well so that the result can be normalized
    safely.

    Returns:
        A random point with 1e-20 < |p|^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            p = random_vector(-1.0, 1.0)
            lensq = length_squared(p)
            if 1e-20 < lensq and lensq < 1.0:
                found = True
    if not found:
        p = vec3(0.0, 0.0, 1.0)
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a unit vector uniformly distributed on the sphere."""
    return normalize(random_in_unit_sphere())


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used for defocus (thin lens) sampling.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            p = vec3(random_range(-1.0, 1.0), random_range(-1.0, 1.0), 0.0)
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    if not found:
        p = vec3(0.0, 0.0, 0.0)
    return p
