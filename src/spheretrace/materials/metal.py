"""Metal (specular reflective) material implementation.

Metals are perfect mirrors. The scattered direction is

    R = d - 2 * n * (n . d)

with the incident direction d and the normal n both normalized first. No
randomness is consumed. The outgoing radiance is the incident radiance tinted
by the base color (elementwise product).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, ambient, attenuation = scatter_metal(
    >>> #     base_color, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class MetalMaterial:
    """Metal (specular reflective) material properties.

    Attributes:
        base_color: The reflective tint (RGB, each component in [0, 1]).
    """

    base_color: vec3


@ti.func
def scatter_direction_metal(incident_direction: vec3, normal: vec3) -> vec3:
    """Compute the mirror reflection of the incident direction.

    Args:
        incident_direction: The incoming ray direction (need not be normalized).
        normal: The surface normal (need not be normalized).

    Returns:
        The reflected direction.
    """
    d = tm.normalize(incident_direction)
    n = tm.normalize(normal)
    return reflect(d, n)


@ti.func
def reflect_metal(base_color: vec3, incident: vec3) -> vec3:
    """Tint the incident radiance by the base color."""
    return base_color * incident


@ti.func
def scatter_metal(
    base_color: vec3,
    incident_direction: vec3,
    normal: vec3,
):
    """Scatter a ray off a metal surface.

    Args:
        base_color: The reflective tint.
        incident_direction: The incoming ray direction.
        normal: The surface normal.

    Returns:
        A tuple of (direction, ambient, attenuation) where ambient is zero
        and attenuation is base_color, so radiance = base_color * incident.
    """
    direction = scatter_direction_metal(incident_direction, normal)
    ambient = vec3(0.0, 0.0, 0.0)
    return direction, ambient, base_color


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_base_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(base_color: tuple[float, float, float]) -> int:
    """Add a metal material to the material registry.

    Args:
        base_color: The reflective tint as (R, G, B) tuple, each in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any color component is outside [0, 1].
    """
    for i, component in enumerate(base_color):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Base color component {i} = {component} is outside [0, 1].")

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_base_colors[idx] = vec3(base_color[0], base_color[1], base_color[2])
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_base_color(material_idx: ti.i32) -> vec3:
    """Get the base color for a metal material by index."""
    return metal_base_colors[material_idx]
