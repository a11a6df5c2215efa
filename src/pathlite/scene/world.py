"""Host-side scene list coordinating spheres and materials.

:class:`HittableList` is the scene root handed to the renderer. It owns the
ordered sphere list (stored in Taichi fields by
:mod:`pathlite.scene.intersection`) and a unified material id space. Each
material id maps to a ``(MaterialType, type-local index)`` pair so that the
integrator can dispatch to the right scatter function; any number of spheres
may share one material id.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlite.scene.world import HittableList
    >>> world = HittableList()
    >>> ground = world.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
    >>> glass = world.add_dielectric_material(refraction_index=1.5)
    >>> world.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    >>> world.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import taichi as ti

from pathlite.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from pathlite.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from pathlite.materials.metal import (
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
)
from pathlite.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
)

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 1024

# Taichi fields for kernel-side material type lookup
# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_table() -> None:
    """Clear the unified material id table."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a material id inside a kernel.

    Returns:
        The material type as an integer (see MaterialType), or -1 for
        invalid material ids.
    """
    result = -1
    if 0 <= material_id and material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local registry index for a material id inside a kernel.

    Returns:
        The index into the type-specific material arrays, or -1 for invalid
        material ids.
    """
    result = -1
    if 0 <= material_id and material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material id.
        material_type: The type of material.
        type_index: The index within the type-specific material arrays.
        params: The material parameters as stored.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere after clamping.
        material_id: The material id assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


def _clear_storage() -> None:
    """Empty the sphere, material and material table fields."""
    clear_scene()
    clear_lambertian_materials()
    clear_metal_materials()
    clear_dielectric_materials()
    clear_material_table()


def _store_material(material_type: MaterialType, params: dict[str, Any]) -> int:
    """Write a material into its type registry and the unified table.

    Returns:
        The unified material id.

    Raises:
        RuntimeError: If the unified table or the type registry is full.
        ValueError: If the parameters are invalid for the material type.
    """
    material_id = int(num_materials[None])
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    if material_type == MaterialType.LAMBERTIAN:
        type_index = add_lambertian_material(params["albedo"])
    elif material_type == MaterialType.METAL:
        type_index = add_metal_material(params["albedo"], params["fuzz"])
    else:
        type_index = add_dielectric_material(params["refraction_index"])

    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


class HittableList:
    """Ordered list of spheres forming the scene root.

    Sphere and material storage lives in module-level Taichi fields, so only
    one list is uploaded at a time. Creating a list clears the fields and
    makes it the active list. Each list keeps its own SphereInfo and
    MaterialInfo records, and activate() uploads them again when another
    list has replaced the field contents in the meantime.

    Attributes:
        materials: MaterialInfo for every registered material, by id.
        spheres: SphereInfo for every sphere, in insertion order.

    Example:
        >>> world = HittableList()
        >>> red = world.add_lambertian_material(albedo=(0.8, 0.1, 0.1))
        >>> gold = world.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> world.add_sphere((0, 0, -1), 0.5, red)
        >>> world.add_sphere((1, 0, -1), 0.5, gold)
    """

    # List whose spheres and materials are currently in the fields
    _active: "HittableList | None" = None

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere and material."""
        self.materials.clear()
        self.spheres.clear()
        _clear_storage()
        HittableList._active = self

    def __len__(self) -> int:
        return len(self.spheres)

    def __repr__(self) -> str:
        return f"HittableList(spheres={len(self.spheres)}, materials={len(self.materials)})"

    def is_active(self) -> bool:
        """Whether the Taichi fields currently hold this list."""
        return HittableList._active is self

    def activate(self) -> None:
        """Upload this list's spheres and materials unless they are already loaded."""
        if self.is_active():
            return

        _clear_storage()
        for info in self.materials:
            _store_material(info.material_type, info.params)
        for sphere in self.spheres:
            add_sphere(sphere.center, sphere.radius, sphere.material_id)
        HittableList._active = self
        logger.debug(
            "Uploaded scene: %d spheres, %d materials", len(self.spheres), len(self.materials)
        )

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(self, material_type: MaterialType, params: dict[str, Any]) -> int:
        """Store a material and record it under the next unified id."""
        self.activate()
        material_id = _store_material(material_type, params)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=int(material_type_indices[material_id]),
                params=params,
            )
        )
        logger.debug("Registered %s material %d: %s", material_type.name, material_id, params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material.

        Args:
            albedo: The diffuse reflectance color as (R, G, B) in [0, 1].

        Returns:
            The unified material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        return self._register_material(MaterialType.LAMBERTIAN, {"albedo": tuple(albedo)})

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material.

        Args:
            albedo: The reflective color as (R, G, B) in [0, 1].
            fuzz: Reflection fuzziness, clamped to [0, 1]. 0 is a perfect mirror.

        Returns:
            The unified material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        return self._register_material(
            MaterialType.METAL, {"albedo": tuple(albedo), "fuzz": clamp_fuzz(fuzz)}
        )

    def add_dielectric_material(self, refraction_index: float = 1.5) -> int:
        """Add a dielectric (glass/water) material.

        Args:
            refraction_index: Refractive index relative to the enclosing medium.

        Returns:
            The unified material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the refraction index is not positive.
        """
        return self._register_material(
            MaterialType.DIELECTRIC, {"refraction_index": refraction_index}
        )

    def get_material_count(self) -> int:
        """Get the total number of materials."""
        return len(self.materials)

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material, or None for unknown ids."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type(self, material_id: int) -> MaterialType | None:
        """Get the MaterialType of a material, or None for unknown ids."""
        info = self.get_material_info(material_id)
        return info.material_type if info is not None else None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Append a sphere to the list.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius. Negative values are clamped to 0.
            material_id: A unified material id from one of the add_*_material
                methods. The same id can be shared by many spheres.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid.
        """
        if material_id < 0 or material_id >= len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")

        self.activate()
        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=max(0.0, radius),
                material_id=material_id,
            )
        )
        return sphere_index

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the list."""
        return len(self.spheres)

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
