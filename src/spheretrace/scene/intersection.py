"""Scene-level sphere intersection testing.

The scene is an ordered list of spheres stored in Taichi fields. Each sphere
carries a material ID for shading.

Two traversal modes are supported:

    FIRST_HIT: spheres are tested in insertion order and the first one the
        ray hits is returned, even if a later sphere is closer. This is the
        default; existing reference images depend on it. An occluding sphere
        added after the sphere it hides will render incorrectly.
    NEAREST_HIT: every sphere is tested and the closest hit is returned.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.scene.intersection import (
    ...     add_sphere, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -8), 8.0, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.spheretrace.geometry.sphere import HitRecord, Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class TraversalMode(IntEnum):
    """How the scene resolves a ray that hits several spheres."""

    FIRST_HIT = 0
    NEAREST_HIT = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The world-space hit point.
        normal: The outward unit normal of the hit sphere at the hit point.
        material_id: The material ID of the hit sphere. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

_traversal_mode = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero and restores first-hit traversal. The
    field data is overwritten when new spheres are added.
    """
    num_spheres[None] = 0
    _traversal_mode[None] = int(TraversalMode.FIRST_HIT)


def set_traversal_mode(mode: TraversalMode) -> None:
    """Select first-hit (default) or nearest-hit scene traversal."""
    _traversal_mode[None] = int(TraversalMode(mode))


def get_traversal_mode() -> TraversalMode:
    """Get the active scene traversal mode."""
    return TraversalMode(int(_traversal_mode[None]))


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the end of the scene list.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (must be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    """Attach a material ID to a sphere hit record."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Test a ray against the spheres of the scene.

    In FIRST_HIT mode the scan stops at the first sphere, in insertion order,
    that the ray hits. In NEAREST_HIT mode every sphere is tested and t_max
    shrinks to the closest hit found so far.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: The epsilon floor for valid hits.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A SceneHitRecord for the selected hit, or a miss record.
    """
    nearest = _traversal_mode[None] == int(TraversalMode.NEAREST_HIT)
    closest_t = t_max
    found = 0
    result = _make_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        if found == 0 or nearest:
            sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
            rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
            if rec.hit == 1:
                found = 1
                if nearest:
                    closest_t = rec.t
                result = _hit_record_to_scene_hit_record(rec, sphere_material_ids[i])

    return result
