"""Dielectric (glass/water) material implementation.

Dielectrics refract light according to Snell's law and fall back to mirror
reflection on total internal reflection. The choice between the two is made
from the geometry alone; there is no Fresnel-weighted random mixing.

With d and n the normalized incident direction and outward normal,
eta = 1 / refraction_index, cos_i = d . n and sin_i = sqrt(1 - cos_i^2):

    cos_i > 0 (leaving the medium):
        eta = 1 / eta, sin_t = sin_i * eta
        sin_t > 1:  d - 2 * n * cos_i                    (total internal reflection)
        otherwise:  cos_t * n + eta * (d - cos_i * n)
    cos_i <= 0 (entering the medium):
        -cos_t * n + eta * (d + cos_i * n)

The result is normalized. Outgoing radiance is the incident radiance tinted by
the base color, which is white for clear glass.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, ambient, attenuation = scatter_dielectric(
    >>> #     base_color, refraction_index, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class DielectricMaterial:
    """Dielectric (glass/water) material properties.

    Attributes:
        base_color: The transmission tint (RGB). White for colorless glass.
        refraction_index: Index of refraction (positive). Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    base_color: vec3
    refraction_index: ti.f32


@ti.func
def scatter_direction_dielectric(
    refraction_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
) -> vec3:
    """Compute the refracted or totally internally reflected direction.

    Args:
        refraction_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (need not be normalized).
        normal: The outward surface normal (need not be normalized).

    Returns:
        The new unit direction.
    """
    d = tm.normalize(incident_direction)
    n = tm.normalize(normal)

    eta = 1.0 / refraction_index
    cos_i = tm.dot(d, n)
    sin_i = ti.sqrt(tm.max(0.0, 1.0 - cos_i * cos_i))

    direction = vec3(0.0, 0.0, 0.0)
    if cos_i > 0.0:
        # Inside the medium, heading out
        eta = 1.0 / eta
        sin_t = sin_i * eta
        if sin_t > 1.0:
            direction = d - 2.0 * n * cos_i
        else:
            cos_t = ti.sqrt(1.0 - sin_t * sin_t)
            direction = cos_t * n + eta * (d - cos_i * n)
    else:
        sin_t = sin_i * eta
        if sin_t > 1.0:
            # Only reachable with refraction_index < 1
            direction = d - 2.0 * n * cos_i
        else:
            cos_t = ti.sqrt(1.0 - sin_t * sin_t)
            direction = -cos_t * n + eta * (d + cos_i * n)

    return tm.normalize(direction)


@ti.func
def reflect_dielectric(base_color: vec3, incident: vec3) -> vec3:
    """Tint the incident radiance by the base color."""
    return base_color * incident


@ti.func
def scatter_dielectric(
    base_color: vec3,
    refraction_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Scatter a ray through a dielectric surface.

    Args:
        base_color: The transmission tint.
        refraction_index: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        normal: The outward surface normal.

    Returns:
        A tuple of (direction, ambient, attenuation) where ambient is zero
        and attenuation is base_color.
    """
    direction = scatter_direction_dielectric(refraction_index, incident_direction, normal)
    ambient = vec3(0.0, 0.0, 0.0)
    return direction, ambient, base_color


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_base_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
dielectric_refraction_indices = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(
    refraction_index: float = 1.5,
    base_color: tuple[float, float, float] = (1.0, 1.0, 1.0),
) -> int:
    """Add a dielectric material to the material registry.

    Args:
        refraction_index: Index of refraction. Default is 1.5 (typical glass).
        base_color: The transmission tint as (R, G, B), each in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If refraction_index is not positive or a color
            component is outside [0, 1].
    """
    if refraction_index <= 0.0:
        raise ValueError(f"Refraction index = {refraction_index} must be positive.")

    for i, component in enumerate(base_color):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Base color component {i} = {component} is outside [0, 1].")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_base_colors[idx] = vec3(base_color[0], base_color[1], base_color[2])
    dielectric_refraction_indices[idx] = refraction_index
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_base_color(material_idx: ti.i32) -> vec3:
    """Get the base color for a dielectric material by index."""
    return dielectric_base_colors[material_idx]


@ti.func
def get_dielectric_refraction_index(material_idx: ti.i32) -> ti.f32:
    """Get the refraction index for a dielectric material by index."""
    return dielectric_refraction_indices[material_idx]
