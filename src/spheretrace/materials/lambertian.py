"""Lambertian (diffuse) material implementation.

Scattering draws a point uniformly from the cube [-1, 1]^3, flips it into
the hemisphere of the outward normal, adds the normal and normalizes. The
result is biased toward the normal and approximates, but is not exactly, a
cosine-weighted distribution. The reflectance factors of existing scenes are
tuned to this distribution, so it is kept as is.

The radiance leaving a Lambertian surface is a blend of the surface's own
color and the incident radiance:

    radiance = base_color * (1 - reflectance_factor)
               + reflectance_factor * incident

This models an ambient contribution rather than an energy-conserving BRDF.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # state, direction, ambient, attenuation = scatter_lambertian(
    >>> #     base_color, reflectance_factor, normal, state
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.sampler import random_in_cube

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class LambertianMaterial:
    """Lambertian (diffuse) material properties.

    Attributes:
        base_color: The surface color (RGB, each component in [0, 1]).
        reflectance_factor: Fraction of the outgoing radiance taken from the
            incident radiance, in [0, 1]. The remainder comes from base_color.
    """

    base_color: vec3
    reflectance_factor: ti.f32


@ti.func
def scatter_direction_lambertian(normal: vec3, state: ti.u32):
    """Sample a diffuse scatter direction around the outward normal.

    Args:
        normal: The outward unit normal at the hit point.
        state: The sample's random stream state.

    Returns:
        A tuple of (new_state, direction) with direction normalized.
    """
    new_state, direction = random_in_cube(state)

    # Reflect off the outer surface
    if tm.dot(direction, normal) < 0.0:
        direction = -direction

    direction = tm.normalize(direction + normal)
    return new_state, direction


@ti.func
def reflect_lambertian(base_color: vec3, reflectance_factor: ti.f32, incident: vec3) -> vec3:
    """Combine the surface color with the incident radiance.

    Args:
        base_color: The surface color.
        reflectance_factor: Blend weight of the incident radiance.
        incident: Radiance arriving along the scattered ray.

    Returns:
        base_color * (1 - reflectance_factor) + reflectance_factor * incident.
    """
    return base_color * (1.0 - reflectance_factor) + reflectance_factor * incident


@ti.func
def scatter_lambertian(
    base_color: vec3,
    reflectance_factor: ti.f32,
    normal: vec3,
    state: ti.u32,
):
    """Scatter a ray off a Lambertian surface.

    The attenuation rule is returned in affine form so the integrator can
    fold it into a running path weight:

        radiance = ambient + attenuation * incident

    with ambient = base_color * (1 - f) and attenuation = (f, f, f), which is
    exactly reflect_lambertian().

    Args:
        base_color: The surface color.
        reflectance_factor: Blend weight f of the incident radiance.
        normal: The outward unit normal at the hit point.
        state: The sample's random stream state.

    Returns:
        A tuple of (new_state, direction, ambient, attenuation).
    """
    new_state, direction = scatter_direction_lambertian(normal, state)
    ambient = base_color * (1.0 - reflectance_factor)
    attenuation = vec3(reflectance_factor, reflectance_factor, reflectance_factor)
    return new_state, direction, ambient, attenuation


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_base_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
lambertian_reflectance_factors = ti.field(dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(
    base_color: tuple[float, float, float],
    reflectance_factor: float = 0.5,
) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        base_color: The surface color as (R, G, B) tuple, each in [0, 1].
        reflectance_factor: Blend weight of the incident radiance, in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any color component or the reflectance factor is
            outside [0, 1].
    """
    for i, component in enumerate(base_color):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Base color component {i} = {component} is outside [0, 1].")

    if reflectance_factor < 0.0 or reflectance_factor > 1.0:
        raise ValueError(f"Reflectance factor = {reflectance_factor} is outside [0, 1].")

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_base_colors[idx] = vec3(base_color[0], base_color[1], base_color[2])
    lambertian_reflectance_factors[idx] = reflectance_factor
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_base_color(material_idx: ti.i32) -> vec3:
    """Get the base color for a Lambertian material by index."""
    return lambertian_base_colors[material_idx]


@ti.func
def get_lambertian_reflectance_factor(material_idx: ti.i32) -> ti.f32:
    """Get the reflectance factor for a Lambertian material by index."""
    return lambertian_reflectance_factors[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3, state: ti.u32):
    """Scatter off a Lambertian material looked up by registry index.

    Returns:
        A tuple of (new_state, direction, ambient, attenuation).
    """
    return scatter_lambertian(
        get_lambertian_base_color(material_idx),
        get_lambertian_reflectance_factor(material_idx),
        normal,
        state,
    )
