"""Scene module for scene management and ray-scene queries.

Components:
    intersection: Sphere storage and scene traversal
    manager: Unified scene manager coordinating spheres and materials
    presets: Built-in scenes

Scene data is organized for efficient access from kernels:
    - Structure-of-Arrays layout for sphere data
    - Contiguous material ID arrays
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    TraversalMode,
    add_sphere,
    clear_scene,
    get_sphere_count,
    get_traversal_mode,
    intersect_scene,
    set_traversal_mode,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .presets import SCENES, create_default_scene, create_materials_scene

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "TraversalMode",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "set_traversal_mode",
    "get_traversal_mode",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Presets
    "SCENES",
    "create_default_scene",
    "create_materials_scene",
]
