"""Scene module: sphere storage and the scene list.

Components:
    intersection: Field storage for spheres and closest-hit queries
    world: HittableList and the unified material id table
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .world import (
    MAX_MATERIALS,
    HittableList,
    MaterialInfo,
    MaterialType,
    SphereInfo,
    clear_material_table,
    get_material_type,
    get_material_type_index,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # World module
    "HittableList",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "MAX_MATERIALS",
    "clear_material_table",
    "get_material_type",
    "get_material_type_index",
]
