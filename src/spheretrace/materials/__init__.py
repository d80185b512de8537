"""Materials module for surface scattering models.

This module implements the three surface materials of the sphere tracer:

Components:
    lambertian: Diffuse scattering blending surface color and incident light
    metal: Perfect mirror reflection tinted by the base color
    dielectric: Snell's-law refraction with total internal reflection

Each material provides:
    - scatter_direction_*(): The outgoing direction at a hit point
    - reflect_*(): The attenuation rule combining the material with the
      incident radiance
    - scatter_*(): Both of the above in the affine form
      (direction, ambient, attenuation) consumed by the integrator
    - A field-backed registry (add_*_material / clear_*_materials)

All scattering computations are Taichi functions for parallel execution.
"""

from .dielectric import (
    DielectricMaterial,
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_base_color,
    get_dielectric_material_count,
    get_dielectric_refraction_index,
    reflect_dielectric,
    scatter_dielectric,
    scatter_direction_dielectric,
)
from .lambertian import (
    LambertianMaterial,
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_base_color,
    get_lambertian_material_count,
    get_lambertian_reflectance_factor,
    reflect_lambertian,
    scatter_direction_lambertian,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    MetalMaterial,
    add_metal_material,
    clear_metal_materials,
    get_metal_base_color,
    get_metal_material_count,
    reflect_metal,
    scatter_direction_metal,
    scatter_metal,
)

__all__ = [
    # Lambertian
    "LambertianMaterial",
    "scatter_direction_lambertian",
    "reflect_lambertian",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_base_color",
    "get_lambertian_reflectance_factor",
    # Metal
    "MetalMaterial",
    "scatter_direction_metal",
    "reflect_metal",
    "scatter_metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_base_color",
    # Dielectric
    "DielectricMaterial",
    "scatter_direction_dielectric",
    "reflect_dielectric",
    "scatter_dielectric",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_base_color",
    "get_dielectric_refraction_index",
]
