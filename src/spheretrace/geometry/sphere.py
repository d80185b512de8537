"""Sphere primitive with ray-sphere intersection.

This module provides a Sphere dataclass, a HitRecord and the intersection
routine used by the scene traversal.

The intersection solves |o + t*d - c|^2 = r^2 for t:

    y = o - c
    a = d . d
    b = 2 * (d . y)
    c' = |y|^2 - r^2
    discriminant = b^2 - 4 * a * c'

For a unit direction a == 1 and this reduces to the classic b^2 - 4c' form.
The nearer root is used unless it lies below the epsilon floor, in which case
the farther root is used; if both lie below the floor there is no hit. The
floor keeps a ray scattered from a surface point from re-hitting that point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -8), radius=8.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Minimum hit distance, rejects self-intersections from a scatter origin
EPSILON = 1e-3

# Upper bound used when any distance is acceptable
T_MAX = 1e10


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (must be positive).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The world-space point where the ray intersected the sphere.
            Only valid if hit == 1.
        normal: The outward unit normal at the hit point, (point - center)
            normalized. Unlike a front-face normal it is not flipped when the
            ray starts inside the sphere. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def sphere_normal(sphere: Sphere, point: vec3) -> vec3:
    """Compute the outward unit normal at a point on the sphere.

    Args:
        sphere: The sphere.
        point: A point on the sphere surface. Points off the surface still
            give the normalized direction from the center.

    Returns:
        (point - center) normalized.
    """
    return tm.normalize(point - sphere.center)


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: The epsilon floor. Roots below it are rejected.
        t_max: Hits at or beyond this distance are rejected. Used by
            nearest-hit traversal to discard farther objects.

    Returns:
        A HitRecord containing intersection information. Check hit field
        to determine if intersection occurred.
    """
    y = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    b = 2.0 * tm.dot(ray_direction, y)
    c = tm.dot(y, y) - sphere.radius * sphere.radius

    discriminant = b * b - 4.0 * a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t1 = (-b - sqrt_d) / (2.0 * a)
        t2 = (-b + sqrt_d) / (2.0 * a)

        if t2 >= t_min:
            t = t1
            if t1 < t_min:
                t = t2

            if t < t_max:
                did_hit = 1
                hit_t = t
                hit_point = ray_origin + t * ray_direction
                hit_normal = sphere_normal(sphere, hit_point)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
